from __future__ import annotations

import pytest

from tauri_latest_json.platforms import PLATFORM_KEYS, classify, is_platform_key


@pytest.mark.parametrize(
    "filename",
    ["app.msi", "app.exe", "MyApp_1.0.0_x64_en-US.msi", "MyApp_1.0.0_x64-setup.exe"],
)
def test_windows_installers(filename: str) -> None:
    assert classify(filename) == "windows-x86_64"


@pytest.mark.parametrize(
    "filename",
    ["app_1.0.0_aarch64.dmg", "app_1.0.0_arm64.dmg", "arm64-build.dmg"],
)
def test_dmg_with_arm_marker_is_apple_silicon(filename: str) -> None:
    assert classify(filename) == "darwin-aarch64"


@pytest.mark.parametrize("filename", ["app_1.0.0_x64.dmg", "app.dmg", "app_universal.dmg"])
def test_dmg_without_arm_marker_is_intel(filename: str) -> None:
    assert classify(filename) == "darwin-x86_64"


def test_appimage_is_linux() -> None:
    assert classify("app_1.0.0_amd64.AppImage") == "linux-x86_64"


def test_tar_gz_needs_arm_marker() -> None:
    assert classify("app_aarch64.app.tar.gz") == "darwin-aarch64"
    assert classify("app_x64.app.tar.gz") is None


@pytest.mark.parametrize(
    "filename",
    [
        "notes.txt",
        "app.msi.sig",
        "app_1.0.0_amd64.deb",
        "app.appimage",
        "app.MSI",
        "",
    ],
)
def test_unrecognized_returns_none(filename: str) -> None:
    assert classify(filename) is None


def test_windows_rule_wins_over_arm_marker() -> None:
    assert classify("app_arm64.msi") == "windows-x86_64"


def test_only_final_component_is_inspected() -> None:
    assert classify("builds/arm64/app_x64.dmg") == "darwin-x86_64"
    assert classify("C:\\out\\aarch64\\app.dmg") == "darwin-x86_64"


def test_platform_keys_closed_set() -> None:
    assert set(PLATFORM_KEYS) == {
        "windows-x86_64",
        "darwin-x86_64",
        "darwin-aarch64",
        "linux-x86_64",
    }
    assert is_platform_key("linux-x86_64")
    assert not is_platform_key("linux-aarch64")
