from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from tauri_latest_json.errors import DirectoryNotFound
from tauri_latest_json.platforms import PlatformKey, classify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Artifact:
    path: Path
    filename: str
    platform: PlatformKey | None

    @classmethod
    def from_path(cls, path: Path) -> Artifact:
        return cls(path=path, filename=path.name, platform=classify(path.name))


def scan(directory: Path, *, recursive: bool = False) -> Iterator[Path]:
    if not directory.is_dir():
        raise DirectoryNotFound(directory)
    return _iter_files(directory, recursive)


def discover(directory: Path, *, recursive: bool = False) -> list[Artifact]:
    artifacts = [Artifact.from_path(path) for path in scan(directory, recursive=recursive)]
    artifacts.sort(key=lambda item: (item.filename, item.path.as_posix()))
    logger.info(
        "scan complete dir=%s files=%s recognized=%s",
        directory,
        len(artifacts),
        sum(1 for item in artifacts if item.platform is not None),
    )
    return artifacts


def _iter_files(directory: Path, recursive: bool) -> Iterator[Path]:
    entries = directory.rglob("*") if recursive else directory.iterdir()
    for path in entries:
        if path.is_file():
            yield path
