# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Command line entry point generating a manifest for a built public directory."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any

import typer

from .config import AppCacheConfig, ConfigError
from .config_loader import load_config
from .errors import AppCacheError
from .gate import read_committed_manifest
from .logging import fail, info
from .models import AssetFile
from .plugin import AppCachePlugin

app = typer.Typer(
    name="appcache",
    help="Fingerprint built assets and write an application-cache manifest.",
    no_args_is_help=True,
    add_completion=False,
)

ROOT_OPTION = Annotated[
    Path,
    typer.Option("--root", "-r", help="Project root holding pyproject.toml / appcache.toml."),
]
PUBLIC_OPTION = Annotated[
    Path | None,
    typer.Option("--public", "-p", help="Public output directory (overrides publicPath)."),
]
CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Explicit TOML configuration file."),
]
FORCE_OPTION = Annotated[
    bool,
    typer.Option("--force", help="Rewrite the manifest even when its content is unchanged."),
]
DRY_RUN_OPTION = Annotated[
    bool,
    typer.Option("--dry-run", help="Print the manifest instead of writing it."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]


@dataclass(slots=True)
class BuildCLIOptions:
    """Capture CLI inputs supplied to the ``build`` command."""

    root: Path
    public: Path | None
    config_file: Path | None
    force: bool
    dry_run: bool
    emoji: bool


def discover_assets(public_dir: Path) -> list[AssetFile]:
    """Return every file below ``public_dir`` as an asset with a relative POSIX path."""

    if not public_dir.is_dir():
        return []
    return [
        AssetFile(path=candidate.relative_to(public_dir).as_posix(), source=candidate)
        for candidate in sorted(public_dir.rglob("*"))
        if candidate.is_file()
    ]


def _resolve_public_dir(options: BuildCLIOptions, config: AppCacheConfig) -> Path:
    if options.public is not None:
        return options.public.resolve()
    public = Path(config.public_path)
    return public if public.is_absolute() else (options.root / public).resolve()


def _load_or_exit(root: Path, config_file: Path | None, *, use_emoji: bool) -> AppCacheConfig:
    try:
        return load_config(root, config_file=config_file)
    except ConfigError as exc:
        fail(str(exc), use_emoji=use_emoji)
        raise typer.Exit(code=1) from exc


@app.command("build")
def build(
    root: ROOT_OPTION = Path("."),
    public: PUBLIC_OPTION = None,
    config_file: CONFIG_OPTION = None,
    force: FORCE_OPTION = False,
    dry_run: DRY_RUN_OPTION = False,
    emoji: EMOJI_OPTION = True,
) -> None:
    """Fingerprint the public directory and write its manifest when it changed."""

    options = BuildCLIOptions(
        root=root.resolve(),
        public=public,
        config_file=config_file,
        force=force,
        dry_run=dry_run,
        emoji=emoji,
    )
    config = _load_or_exit(options.root, options.config_file, use_emoji=options.emoji)
    public_dir = _resolve_public_dir(options, config)
    plugin = AppCachePlugin(config, public_dir=public_dir, use_emoji=options.emoji)
    assets = discover_assets(public_dir)
    info(f"Fingerprinting {len(assets)} files in {public_dir}", use_emoji=options.emoji)

    try:
        plugin.digest_batch(assets)
        result = plugin.result
        if result is not None:
            rendered = plugin.writer.render(result)
            if options.dry_run:
                typer.echo(rendered, nl=False)
                raise typer.Exit(code=0)
            if not options.force and read_committed_manifest(plugin.manifest_path) == rendered:
                plugin.gate.commit(result.fingerprint)
        plugin.complete_batch()
    except AppCacheError as exc:
        fail(str(exc), use_emoji=options.emoji)
        raise typer.Exit(code=1) from exc
    raise typer.Exit(code=0)


@app.command("show-config")
def show_config(
    root: ROOT_OPTION = Path("."),
    config_file: CONFIG_OPTION = None,
) -> None:
    """Print the effective configuration as JSON."""

    config = _load_or_exit(root.resolve(), config_file, use_emoji=False)
    payload: dict[str, Any] = config.to_dict()
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))


def main() -> None:
    """Invoke the Typer application."""

    app()


__all__ = ["BuildCLIOptions", "app", "discover_assets", "main"]
