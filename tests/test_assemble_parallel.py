from __future__ import annotations

import threading
from pathlib import Path

from tauri_latest_json.errors import SigningFailed
from tauri_latest_json.manifest.assemble import assemble_release

BASE_URL = "https://example.com/dl"

NAMES = (
    "app.exe",
    "app.msi",
    "app_x64.dmg",
    "app_arm64.dmg",
    "app_aarch64.app.tar.gz",
    "app.AppImage",
    "z_arm64.dmg",
)


class ThreadedSigner:
    def __init__(self, failing: set[str]) -> None:
        self.failing = failing
        self.threads: set[str] = set()
        self._lock = threading.Lock()

    def sign(self, artifact_path: Path) -> str:
        with self._lock:
            self.threads.add(threading.current_thread().name)
        if artifact_path.name in self.failing:
            raise SigningFailed(artifact_path, "unavailable")
        return f"sig:{artifact_path.name}"


def _setup(tmp_path: Path) -> tuple[Path, Path]:
    root = tmp_path / "root"
    root.mkdir()
    (root / "package.json").write_text('{"version": "0.9.0"}')
    bundle = tmp_path / "bundle"
    bundle.mkdir()
    for name in NAMES:
        (bundle / name).write_bytes(b"data")
    return root, bundle


def test_parallel_matches_sequential(tmp_path: Path) -> None:
    root, bundle = _setup(tmp_path)
    failing = {"app.exe", "app_aarch64.app.tar.gz"}
    sequential = assemble_release(
        bundle, BASE_URL, "", signer=ThreadedSigner(failing), project_root=root, workers=1
    )
    parallel = assemble_release(
        bundle, BASE_URL, "", signer=ThreadedSigner(failing), project_root=root, workers=4
    )
    assert parallel.manifest.platforms == sequential.manifest.platforms
    assert parallel.dropped == sequential.dropped
    assert parallel.manifest.platforms["windows-x86_64"].signature == "sig:app.msi"
    assert parallel.manifest.platforms["darwin-aarch64"].signature == "sig:app_arm64.dmg"


def test_parallel_failure_does_not_cancel_siblings(tmp_path: Path) -> None:
    root, bundle = _setup(tmp_path)
    signer = ThreadedSigner({"app.exe", "app.msi"})
    result = assemble_release(bundle, BASE_URL, "", signer=signer, project_root=root, workers=3)
    assert "windows-x86_64" not in result.manifest.platforms
    assert set(result.manifest.platforms) == {"darwin-aarch64", "darwin-x86_64", "linux-x86_64"}
    assert [item.filename for item in result.failed()] == ["app.exe", "app.msi"]
    assert any(name != threading.main_thread().name for name in signer.threads)
