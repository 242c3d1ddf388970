from __future__ import annotations

import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from cloudroot.config.models import ResolverConfig
from cloudroot.containers import (
    ChainedLocator,
    ContainerLocator,
    MobileDocumentsLocator,
    StaticLocator,
    locator_from_config,
)
from cloudroot.util.paths import container_dirname, join_subpath


class PathHelperTests(unittest.TestCase):
    def test_container_dirname(self) -> None:
        self.assertEqual(container_dirname("iCloud.com.example.app"), "iCloud~com~example~app")

    def test_join_subpath_rejects_escape(self) -> None:
        root = Path("/sim/icloud")
        self.assertEqual(join_subpath(root, "Documents/a"), root / "Documents" / "a")
        for bad in ("../x", "/abs", ""):
            with self.assertRaises(ValueError):
                join_subpath(root, bad)


class MobileDocumentsLocatorTests(unittest.TestCase):
    def test_present_container_resolves(self) -> None:
        with TemporaryDirectory() as tmpdir:
            container = Path(tmpdir) / "iCloud~com~example~app"
            container.mkdir()
            locator = MobileDocumentsLocator(tmpdir)

            self.assertEqual(locator.resolve_container_root("iCloud.com.example.app"), container.resolve())

    def test_missing_container_is_unavailable(self) -> None:
        with TemporaryDirectory() as tmpdir:
            locator = MobileDocumentsLocator(tmpdir, default_identifier="iCloud.com.example.app")
            self.assertIsNone(locator.resolve_container_root(None))

    def test_default_falls_back_to_icloud_drive(self) -> None:
        with TemporaryDirectory() as tmpdir:
            drive = Path(tmpdir) / "com~apple~CloudDocs"
            drive.mkdir()
            locator = MobileDocumentsLocator(tmpdir)

            self.assertEqual(locator.resolve_container_root(None), drive.resolve())

    def test_satisfies_protocol(self) -> None:
        self.assertIsInstance(MobileDocumentsLocator("/tmp"), ContainerLocator)


class StaticAndChainedLocatorTests(unittest.TestCase):
    def test_static_default_identifier(self) -> None:
        locator = StaticLocator({"iCloud.a": "/sim/a"}, default_identifier="iCloud.a")
        self.assertEqual(locator.resolve_container_root(None), Path("/sim/a"))
        self.assertIsNone(locator.resolve_container_root("iCloud.b"))

    def test_chain_first_answer_wins(self) -> None:
        chain = ChainedLocator(StaticLocator({}), StaticLocator({None: "/sim/icloud"}))
        self.assertEqual(chain.resolve_container_root(None), Path("/sim/icloud"))

    def test_locator_from_config_prefers_overrides(self) -> None:
        with TemporaryDirectory() as tmpdir:
            config = ResolverConfig(
                mobile_documents_root=Path(tmpdir),
                default_container_root=Path("/sim/icloud"),
                container_roots={"iCloud.com.example.app": Path("/sim/app")},
            )
            locator = locator_from_config(config)

            self.assertEqual(locator.resolve_container_root(None), Path("/sim/icloud"))
            self.assertEqual(locator.resolve_container_root("iCloud.com.example.app"), Path("/sim/app"))
            self.assertIsNone(locator.resolve_container_root("iCloud.com.other"))

    def test_locator_from_config_without_overrides(self) -> None:
        locator = locator_from_config(ResolverConfig())
        self.assertIsInstance(locator, MobileDocumentsLocator)


if __name__ == "__main__":
    unittest.main()
