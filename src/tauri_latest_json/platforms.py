from __future__ import annotations

from typing import Literal, get_args

PlatformKey = Literal["windows-x86_64", "darwin-x86_64", "darwin-aarch64", "linux-x86_64"]

PLATFORM_KEYS: tuple[PlatformKey, ...] = get_args(PlatformKey)

_WINDOWS_SUFFIXES = (".msi", ".exe")
_ARM_MARKERS = ("aarch64", "arm64")


def classify(filename: str) -> PlatformKey | None:
    # only the final component counts; callers may pass a path string
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    if name.endswith(_WINDOWS_SUFFIXES):
        return "windows-x86_64"
    if name.endswith(".AppImage"):
        return "linux-x86_64"
    if name.endswith(".dmg"):
        return "darwin-aarch64" if _has_arm_marker(name) else "darwin-x86_64"
    if name.endswith(".tar.gz") and _has_arm_marker(name):
        return "darwin-aarch64"
    return None


def is_platform_key(value: str) -> bool:
    return value in PLATFORM_KEYS


def _has_arm_marker(name: str) -> bool:
    return any(marker in name for marker in _ARM_MARKERS)
