from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from tauri_latest_json.manifest.io import manifest_digest, read_manifest, render_manifest, write_manifest
from tauri_latest_json.manifest.models import PlatformEntry, ReleaseManifest


def _manifest() -> ReleaseManifest:
    return ReleaseManifest(
        version="1.0.0",
        notes="Initial release",
        pub_date="2025-08-10T14:15:22Z",
        platforms={
            "windows-x86_64": PlatformEntry(signature="c2ln", url="https://x.io/app.msi"),
            "darwin-aarch64": PlatformEntry(signature="c2lnMg==", url="https://x.io/app.dmg"),
        },
    )


def test_render_has_fixed_shape() -> None:
    text = render_manifest(_manifest())
    payload = json.loads(text)
    assert list(payload) == ["version", "notes", "pub_date", "platforms"]
    assert list(payload["platforms"]) == ["darwin-aarch64", "windows-x86_64"]
    assert payload["platforms"]["windows-x86_64"] == {
        "signature": "c2ln",
        "url": "https://x.io/app.msi",
    }
    assert text.endswith("\n")
    assert '\n  "version"' in text


def test_write_creates_parents(tmp_path: Path) -> None:
    target = tmp_path / "out" / "nested" / "latest.json"
    write_manifest(_manifest(), target)
    assert read_manifest(target) == _manifest()


def test_digest_ignores_platform_insertion_order() -> None:
    first = _manifest()
    second = ReleaseManifest(
        version=first.version,
        notes=first.notes,
        pub_date=first.pub_date,
        platforms=dict(reversed(list(first.platforms.items()))),
    )
    assert manifest_digest(first) == manifest_digest(second)
    assert len(manifest_digest(first)) == 64


def test_unknown_platform_key_rejected() -> None:
    with pytest.raises(ValidationError):
        ReleaseManifest(
            version="1.0.0",
            notes="",
            pub_date="2025-08-10T14:15:22Z",
            platforms={"linux-aarch64": PlatformEntry(signature="c2ln", url="https://x.io/a")},
        )


def test_blank_entry_fields_rejected() -> None:
    with pytest.raises(ValidationError):
        PlatformEntry(signature=" ", url="https://x.io/a")


def test_digest_tracks_content() -> None:
    first = _manifest()
    changed = first.model_copy(update={"notes": "Übersetzung"})
    assert manifest_digest(changed) != manifest_digest(first)
    assert manifest_digest(changed) == manifest_digest(changed.model_copy())
