"""Command-line entry points for cloudroot."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, List, Optional

import typer
import yaml

from cloudroot.bridge import INVALID_REQUEST, ChannelError, InvalidRequest, MethodCall, decode_call, encode_reply
from cloudroot.config import ConfigError, dump_example_config, load_config
from cloudroot.errors import ResolutionError
from cloudroot.handler import build_channel
from cloudroot.resolver import StorageRootResolver
from cloudroot.util.logging import configure_logging

app = typer.Typer(add_completion=False, help="iCloud storage root resolver")


def _parse_assignments(assignments: Optional[List[str]]) -> dict[str, Any]:
    """Turn repeated `--set key=value` options into dotted overrides."""

    overrides: dict[str, Any] = {}
    for item in assignments or []:
        key, sep, raw = item.partition("=")
        if not sep or not key.strip():
            typer.echo(f"Invalid --set {item!r}; expected KEY=VALUE", err=True)
            raise typer.Exit(code=2)
        try:
            overrides[key.strip()] = yaml.safe_load(raw) if raw else None
        except yaml.YAMLError:
            overrides[key.strip()] = raw
    return overrides


def _load(config_path: Optional[Path], assignments: Optional[List[str]] = None):
    try:
        cfg = load_config(config_path, overrides=_parse_assignments(assignments))
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)
    configure_logging(level=cfg.logging.level, log_path=cfg.logging.log_path)
    return cfg


@app.command()
def resolve(
    container: Optional[str] = typer.Option(None, "--container", "-c", help="Container identifier (default from config)"),
    subpath: Optional[str] = typer.Option(None, help="Directory to provision under the container root"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Config file (YAML/TOML/JSON)"),
    assignments: Optional[List[str]] = typer.Option(None, "--set", help="Override a setting, e.g. resolver.subpath=Inbox"),
) -> None:
    """Print the provisioned directory for a container."""

    cfg = _load(config_path, assignments)
    with StorageRootResolver.from_config(cfg.resolver) as resolver:
        try:
            path = resolver.submit(container, subpath).result()
        except ResolutionError as exc:
            typer.echo(f"{exc.code}: {exc}", err=True)
            raise typer.Exit(code=1)
    typer.echo(str(path))


@app.command()
def call(
    method: str = typer.Argument(..., help="Method name, e.g. getICloudDocumentsPath"),
    arguments: Optional[str] = typer.Option(None, help="JSON-encoded call arguments"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Config file (YAML/TOML/JSON)"),
    assignments: Optional[List[str]] = typer.Option(None, "--set", help="Override a setting, e.g. resolver.subpath=Inbox"),
) -> None:
    """Invoke a method over the channel and print the JSON reply."""

    cfg = _load(config_path, assignments)
    try:
        parsed = json.loads(arguments) if arguments else None
    except json.JSONDecodeError as exc:
        typer.echo(f"Invalid --arguments: {exc}", err=True)
        raise typer.Exit(code=2)

    with StorageRootResolver.from_config(cfg.resolver) as resolver:
        channel = build_channel(resolver, name=cfg.channel.name)
        reply = channel.invoke_and_wait(MethodCall(method=method, arguments=parsed))
    typer.echo(json.dumps(encode_reply(reply)))


@app.command()
def serve(
    config_path: Optional[Path] = typer.Option(None, "--config", help="Config file (YAML/TOML/JSON)"),
    assignments: Optional[List[str]] = typer.Option(None, "--set", help="Override a setting, e.g. resolver.subpath=Inbox"),
) -> None:
    """Answer JSON-lines method calls from stdin on stdout."""

    cfg = _load(config_path, assignments)
    with StorageRootResolver.from_config(cfg.resolver) as resolver:
        channel = build_channel(resolver, name=cfg.channel.name)
        for line in sys.stdin:
            if not line.strip():
                continue
            try:
                reply = channel.invoke_and_wait(decode_call(line))
            except InvalidRequest as exc:
                reply = ChannelError(code=INVALID_REQUEST, message="Malformed method call", details=str(exc))
            typer.echo(json.dumps(encode_reply(reply)))


@app.command("dump-config")
def dump_config(dest: Path = typer.Argument(..., help="Destination (.yaml or .json)")) -> None:
    """Write the default configuration to DEST."""

    try:
        dump_example_config(dest)
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)
    typer.echo(f"Wrote {dest}")


def main() -> None:
    app()


__all__ = ["main", "app"]
