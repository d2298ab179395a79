from __future__ import annotations

import logging
import os
from pathlib import Path

import typer
from rich.console import Console

from tauri_latest_json.cli_utils import clean_path
from tauri_latest_json.config import AppConfig, default_config, detect_bundle_dir
from tauri_latest_json.errors import ManifestError, NoPlatformsResolved
from tauri_latest_json.manifest.assemble import assemble_release
from tauri_latest_json.manifest.io import manifest_digest, render_manifest, write_manifest
from tauri_latest_json.manifest.models import DroppedArtifact
from tauri_latest_json.platforms import classify
from tauri_latest_json.runtime import configure_logging
from tauri_latest_json.signing import (
    ArtifactSigner,
    Ed25519Signer,
    SidecarSigner,
    generate_keypair,
)
from tauri_latest_json.version import resolve_version_source

app = typer.Typer(help="Build a signed latest.json update manifest from bundle output")

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)
logger = logging.getLogger(__name__)

URL_OPTION = typer.Option(..., "--url", help="Base URL the installers are served from")
NOTES_OPTION = typer.Option("", "--notes", help="Release notes text")
BUNDLE_DIR_OPTION = typer.Option(None, "--bundle-dir", file_okay=False)
PROJECT_ROOT_OPTION = typer.Option(None, "--project-root", file_okay=False)
OUTPUT_OPTION = typer.Option(None, "--output", "-o", dir_okay=False)
KEY_OPTION = typer.Option(None, "--key", help="Base64 Ed25519 private seed")
KEY_FILE_OPTION = typer.Option(None, "--key-file", dir_okay=False)
SIDECAR_OPTION = typer.Option(
    False, "--use-sidecar-signatures", help="Reuse <installer>.sig files instead of signing"
)
VERSION_SOURCE_OPTION = typer.Option(None, "--version-source", help="native or js")
WORKERS_OPTION = typer.Option(None, "--workers", min=1)
RECURSIVE_OPTION = typer.Option(False, "--recursive", help="Scan bundle subdirectories too")
STDOUT_OPTION = typer.Option(False, "--stdout", help="Print the manifest instead of writing it")
OUT_DIR_OPTION = typer.Option(Path("keys"), "--out-dir", file_okay=False)
FORCE_OPTION = typer.Option(False, "--force")


def _configure_logging() -> None:
    try:
        configure_logging()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _load_config(root: Path | None) -> AppConfig:
    _configure_logging()
    try:
        return default_config(root)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _select_signer(
    config: AppConfig, key: str | None, key_file: Path | None, use_sidecar: bool
) -> ArtifactSigner:
    if use_sidecar:
        return SidecarSigner()
    if key:
        return Ed25519Signer(key)
    if key_file is not None:
        return Ed25519Signer(key_file)
    if config.signing.inline_key:
        return Ed25519Signer(config.signing.inline_key)
    if config.paths.key_file is not None:
        return Ed25519Signer(config.paths.key_file)
    raise typer.BadParameter(
        "no signing key: pass --key/--key-file, set TAURI_SIGNING_PRIVATE_KEY, "
        "or use --use-sidecar-signatures"
    )


def _report_dropped(dropped: list[DroppedArtifact]) -> None:
    for item in dropped:
        err_console.print(
            f"Dropped {item.filename} ({item.platform}): {item.kind} - {item.reason}",
            markup=False,
        )


@app.command("generate")
def generate(
    url: str = URL_OPTION,
    notes: str = NOTES_OPTION,
    bundle_dir: Path | None = BUNDLE_DIR_OPTION,
    project_root: Path | None = PROJECT_ROOT_OPTION,
    output: Path | None = OUTPUT_OPTION,
    key: str | None = KEY_OPTION,
    key_file: Path | None = KEY_FILE_OPTION,
    use_sidecar: bool = SIDECAR_OPTION,
    version_source: str | None = VERSION_SOURCE_OPTION,
    workers: int | None = WORKERS_OPTION,
    recursive: bool = RECURSIVE_OPTION,
    stdout: bool = STDOUT_OPTION,
) -> None:
    root = clean_path(project_root)
    config = _load_config(root)
    signer = _select_signer(config, key, clean_path(key_file), use_sidecar)
    try:
        source = (
            resolve_version_source(version_source)
            if version_source is not None
            else config.version_source
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    try:
        target = clean_path(bundle_dir) or config.paths.bundle_dir
        if target is None:
            # the bundler nests installers per format under the detected dir
            target = detect_bundle_dir(config.paths.root)
            recursive = True
        logger.info("generate start bundle_dir=%s url=%s", target, url)
        result = assemble_release(
            target,
            url,
            notes,
            signer=signer,
            project_root=config.paths.root,
            version_source=source,
            workers=workers or config.signing.workers,
            recursive=recursive,
        )
    except NoPlatformsResolved as exc:
        _report_dropped(exc.dropped)
        err_console.print(f"Error: {exc}", markup=False)
        raise typer.Exit(code=1) from exc
    except ManifestError as exc:
        err_console.print(f"Error: {exc}", markup=False)
        raise typer.Exit(code=1) from exc

    _report_dropped(result.dropped)
    manifest = result.manifest
    if stdout:
        typer.echo(render_manifest(manifest), nl=False)
        return
    destination = clean_path(output) or config.paths.output
    write_manifest(manifest, destination)
    console.print(f"Manifest: {destination}", markup=False)
    console.print(f"Version: {manifest.version}", markup=False)
    console.print(f"Platforms: {', '.join(manifest.platforms)}", markup=False)
    console.print(f"Digest: {manifest_digest(manifest)}", markup=False)


@app.command("classify")
def classify_files(filenames: list[str]) -> None:
    for name in filenames:
        key = classify(name)
        typer.echo(f"{name}\t{key or 'unrecognized'}")


@app.command("keygen")
def keygen(out_dir: Path = OUT_DIR_OPTION, force: bool = FORCE_OPTION) -> None:
    _configure_logging()
    private_path = out_dir / "ed25519_private.key"
    public_path = out_dir / "ed25519_public.key"
    if private_path.exists() and not force:
        console.print(f"Refusing to overwrite {private_path} (use --force)", markup=False)
        raise typer.Exit(code=1)
    out_dir.mkdir(parents=True, exist_ok=True)
    private_b64, public_b64 = generate_keypair()
    # create owner-only before the seed is written
    fd = os.open(private_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="ascii") as handle:
        handle.write(private_b64)
    os.chmod(private_path, 0o600)
    public_path.write_text(public_b64, encoding="ascii")
    logger.info("keygen complete out_dir=%s", out_dir)
    console.print(f"Private key: {private_path}", markup=False)
    console.print(f"Public key: {public_path}", markup=False)
    console.print(f"Public key (base64): {public_b64}", markup=False)


if __name__ == "__main__":
    app()
