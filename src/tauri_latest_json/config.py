from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from tauri_latest_json.errors import DirectoryNotFound
from tauri_latest_json.version import VersionSource, resolve_version_source

_BUNDLE_SUBPATH = Path("target") / "release" / "bundle"
_BUNDLE_PARENTS = (".", "src-tauri")


@dataclass(frozen=True)
class Paths:
    root: Path
    bundle_dir: Path | None
    output: Path
    key_file: Path | None


@dataclass(frozen=True)
class SigningConfig:
    inline_key: str | None
    workers: int


@dataclass(frozen=True)
class AppConfig:
    paths: Paths
    signing: SigningConfig
    version_source: VersionSource


def default_paths(root: Path | None = None) -> Paths:
    base = root or Path.cwd()
    bundle_env = os.getenv("LATEST_JSON_BUNDLE_DIR", "").strip()
    output_env = os.getenv("LATEST_JSON_OUTPUT", "").strip()
    key_path_env = os.getenv("TAURI_SIGNING_PRIVATE_KEY_PATH", "").strip()
    return Paths(
        root=base,
        bundle_dir=Path(bundle_env) if bundle_env else None,
        output=Path(output_env) if output_env else base / "latest.json",
        key_file=Path(key_path_env) if key_path_env else None,
    )


def default_signing() -> SigningConfig:
    inline_key = os.getenv("TAURI_SIGNING_PRIVATE_KEY", "").strip() or None
    workers_env = os.getenv("LATEST_JSON_WORKERS", "").strip()
    workers = 1
    if workers_env:
        try:
            workers = int(workers_env)
        except ValueError:
            raise ValueError(f"LATEST_JSON_WORKERS must be an integer: {workers_env}") from None
        if workers < 1:
            raise ValueError(f"LATEST_JSON_WORKERS must be >= 1: {workers_env}")
    return SigningConfig(inline_key=inline_key, workers=workers)


def default_config(root: Path | None = None) -> AppConfig:
    source_env = os.getenv("LATEST_JSON_VERSION_SOURCE")
    try:
        version_source = resolve_version_source(source_env)
    except ValueError:
        raise ValueError(f"LATEST_JSON_VERSION_SOURCE is invalid: {source_env}") from None
    return AppConfig(
        paths=default_paths(root),
        signing=default_signing(),
        version_source=version_source,
    )


def detect_bundle_dir(root: Path) -> Path:
    for parent in _BUNDLE_PARENTS:
        candidate = root / parent / _BUNDLE_SUBPATH
        if candidate.is_dir():
            return candidate.resolve()
    raise DirectoryNotFound(root / _BUNDLE_SUBPATH)
