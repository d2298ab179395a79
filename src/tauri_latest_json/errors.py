from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any


class ManifestError(Exception):
    """Base class for failures surfaced by manifest assembly."""


class DirectoryNotFound(ManifestError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"bundle directory not found: {path}")


class VersionNotFound(ManifestError):
    def __init__(self, root: Path, tried: Sequence[str]) -> None:
        self.root = root
        self.tried = list(tried)
        sources = ", ".join(self.tried) or "none"
        super().__init__(f"no usable version under {root} (tried: {sources})")


class SigningFailed(ManifestError):
    def __init__(self, artifact: Path, reason: str) -> None:
        self.artifact = artifact
        self.reason = reason
        super().__init__(f"signing failed for {artifact.name}: {reason}")


class NoPlatformsResolved(ManifestError):
    def __init__(self, dropped: Sequence[Any] = ()) -> None:
        self.dropped = list(dropped)
        message = "no artifact was classified and signed"
        if self.dropped:
            message += f" ({len(self.dropped)} dropped)"
        super().__init__(message)
