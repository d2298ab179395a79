from __future__ import annotations

import json
import logging
import re
import tomllib
from pathlib import Path
from typing import Any, Literal, Protocol, get_args

from tauri_latest_json.errors import VersionNotFound

logger = logging.getLogger(__name__)

VersionSource = Literal["native", "js"]

VERSION_SOURCES: tuple[VersionSource, ...] = get_args(VersionSource)

_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)

_NATIVE_DESCRIPTOR = "Cargo.toml"
_JS_DESCRIPTOR = "package.json"
_NATIVE_SUBDIRS = (".", "src-tauri")


class ProjectMetadataReader(Protocol):
    def native_version(self, root: Path) -> str | None:
        ...

    def js_version(self, root: Path) -> str | None:
        ...


class FileMetadataReader:
    def native_version(self, root: Path) -> str | None:
        # a malformed root manifest must not shadow a valid src-tauri one
        first_seen: str | None = None
        for subdir in _NATIVE_SUBDIRS:
            path = root / subdir / _NATIVE_DESCRIPTOR
            if not path.is_file():
                continue
            version = _cargo_version(path)
            if version is None:
                continue
            if is_usable_version(version):
                return version
            if first_seen is None:
                first_seen = version
        return first_seen

    def js_version(self, root: Path) -> str | None:
        path = root / _JS_DESCRIPTOR
        if not path.is_file():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("package.json unreadable path=%s error=%s", path, exc)
            return None
        if not isinstance(data, dict):
            return None
        value = data.get("version")
        return value if isinstance(value, str) else None


def resolve_version_source(value: str | None) -> VersionSource:
    if value is None:
        return "native"
    normalized = value.strip().lower()
    if normalized in {"", "native", "cargo", "rust"}:
        return "native"
    if normalized in {"js", "javascript", "node", "npm", "package.json"}:
        return "js"
    raise ValueError(f"invalid version source: {value}")


def is_usable_version(value: str | None) -> bool:
    if value is None:
        return False
    return _SEMVER_RE.match(value.strip()) is not None


def resolve_version(
    project_root: Path,
    *,
    prefer: VersionSource = "native",
    reader: ProjectMetadataReader | None = None,
) -> str:
    if prefer not in VERSION_SOURCES:
        raise ValueError(f"invalid version source: {prefer}")
    reader = reader or FileMetadataReader()
    order: list[VersionSource] = [prefer] + [s for s in VERSION_SOURCES if s != prefer]
    tried: list[str] = []
    for source in order:
        if source == "native":
            candidate = reader.native_version(project_root)
            tried.append(_NATIVE_DESCRIPTOR)
        else:
            candidate = reader.js_version(project_root)
            tried.append(_JS_DESCRIPTOR)
        if candidate is None:
            continue
        if not is_usable_version(candidate):
            logger.warning("version rejected source=%s value=%r", source, candidate)
            continue
        version = candidate.strip()
        logger.info("version resolved source=%s version=%s", source, version)
        return version
    raise VersionNotFound(project_root, tried)


def _cargo_version(path: Path) -> str | None:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Cargo.toml unreadable path=%s error=%s", path, exc)
        return None
    package = _table(data, "package")
    value = package.get("version")
    if isinstance(value, dict) and value.get("workspace") is True:
        value = _table(_table(data, "workspace"), "package").get("version")
    return value if isinstance(value, str) else None


def _table(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}
