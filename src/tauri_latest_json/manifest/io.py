from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path

from tauri_latest_json.manifest.models import ReleaseManifest

logger = logging.getLogger(__name__)


def render_manifest(manifest: ReleaseManifest) -> str:
    payload = manifest.model_dump(mode="json")
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def write_manifest(manifest: ReleaseManifest, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_manifest(manifest), encoding="utf-8")
    logger.info("manifest written path=%s", path)
    return path


def read_manifest(path: Path) -> ReleaseManifest:
    return ReleaseManifest.model_validate_json(path.read_text(encoding="utf-8"))


def manifest_digest(manifest: ReleaseManifest) -> str:
    # key-sorted compact JSON
    payload = manifest.model_dump(mode="json")
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()
