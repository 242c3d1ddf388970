from __future__ import annotations

import os
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

import yaml

from cloudroot.config import ConfigError, dump_example_config, load_config

CLEAN_ENV = {"CLOUDROOT_DEFAULT_CONTAINER": "", "CLOUDROOT_CONTAINER_ROOT": ""}


class ConfigLoaderTests(unittest.TestCase):
    def test_load_config_defaults(self) -> None:
        with patch.dict(os.environ, CLEAN_ENV, clear=False):
            config = load_config()

        self.assertEqual(config.channel.name, "com.draexl.project-manager/iCloud")
        self.assertIsNone(config.resolver.default_container)
        self.assertEqual(config.resolver.subpath, "Documents")
        self.assertEqual(config.resolver.mobile_documents_root, Path("~/Library/Mobile Documents"))
        self.assertEqual(config.resolver.container_roots, {})
        self.assertEqual(config.resolver.max_workers, 4)
        self.assertEqual(config.logging.level, "INFO")

    def test_load_config_applies_overrides(self) -> None:
        overrides = {
            "resolver.max_workers": 2,
            "resolver": {"subpath": "Inbox"},
            "channel": {"name": "com.example/cloud"},
        }

        with patch.dict(os.environ, CLEAN_ENV, clear=False):
            config = load_config(overrides=overrides)

        self.assertEqual(config.resolver.max_workers, 2)
        self.assertEqual(config.resolver.subpath, "Inbox")
        self.assertEqual(config.channel.name, "com.example/cloud")

    def test_environment_variables(self) -> None:
        env = {
            "CLOUDROOT_DEFAULT_CONTAINER": "iCloud.com.example.app",
            "CLOUDROOT_CONTAINER_ROOT": "/sim/icloud",
        }
        with patch.dict(os.environ, env, clear=False):
            config = load_config()

        self.assertEqual(config.resolver.default_container, "iCloud.com.example.app")
        self.assertEqual(config.resolver.default_container_root, Path("/sim/icloud"))

    def test_user_file_merges_over_defaults(self) -> None:
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "cloudroot.toml"
            path.write_text(
                '[resolver]\ndefault_container = "iCloud.com.example.app"\n\n'
                '[resolver.container_roots]\n"iCloud.com.example.app" = "/sim/icloud"\n',
                encoding="utf-8",
            )
            with patch.dict(os.environ, CLEAN_ENV, clear=False):
                config = load_config(path)

        self.assertEqual(config.resolver.default_container, "iCloud.com.example.app")
        self.assertEqual(config.resolver.container_roots, {"iCloud.com.example.app": Path("/sim/icloud")})
        self.assertEqual(config.resolver.subpath, "Documents")

    def test_escaping_subpath_rejected(self) -> None:
        with patch.dict(os.environ, CLEAN_ENV, clear=False):
            with self.assertRaises(ConfigError):
                load_config(overrides={"resolver.subpath": "../elsewhere"})

    def test_missing_file_raises(self) -> None:
        with self.assertRaises(ConfigError):
            load_config(Path("/does/not/exist.yaml"))

    def test_dump_example_config_yaml(self) -> None:
        with TemporaryDirectory() as tmpdir:
            dest = Path(tmpdir) / "example.yaml"
            dump_example_config(dest)
            data = yaml.safe_load(dest.read_text(encoding="utf-8"))

        self.assertIn("channel", data)
        self.assertIn("resolver", data)

    def test_dump_example_config_rejects_toml(self) -> None:
        with TemporaryDirectory() as tmpdir:
            dest = Path(tmpdir) / "config.toml"
            with self.assertRaises(ConfigError):
                dump_example_config(dest)


if __name__ == "__main__":
    unittest.main()
