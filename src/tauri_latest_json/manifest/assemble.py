from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from tauri_latest_json.errors import NoPlatformsResolved, SigningFailed
from tauri_latest_json.manifest.models import (
    AssemblyResult,
    DropKind,
    DroppedArtifact,
    PlatformEntry,
    ReleaseManifest,
)
from tauri_latest_json.platforms import PlatformKey
from tauri_latest_json.scanner import Artifact, discover
from tauri_latest_json.signing import ArtifactSigner
from tauri_latest_json.version import ProjectMetadataReader, VersionSource, resolve_version

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass
class _GroupOutcome:
    entry: PlatformEntry | None = None
    dropped: list[tuple[Artifact, DroppedArtifact]] = field(default_factory=list)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_pub_date(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc).replace(microsecond=0)
    return moment.isoformat().replace("+00:00", "Z")


def artifact_url(download_base_url: str, filename: str) -> str:
    return f"{download_base_url.rstrip('/')}/{filename}"


def assemble_release(
    bundle_dir: Path,
    download_base_url: str,
    notes: str,
    *,
    signer: ArtifactSigner,
    project_root: Path | None = None,
    version_source: VersionSource = "native",
    metadata_reader: ProjectMetadataReader | None = None,
    clock: Clock | None = None,
    workers: int = 1,
    recursive: bool = False,
) -> AssemblyResult:
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")
    root = project_root or Path.cwd()
    logger.info("assemble start bundle_dir=%s root=%s workers=%s", bundle_dir, root, workers)
    version = resolve_version(root, prefer=version_source, reader=metadata_reader)
    artifacts = discover(bundle_dir, recursive=recursive)

    groups: dict[PlatformKey, list[Artifact]] = {}
    for artifact in artifacts:
        if artifact.platform is None:
            logger.debug("artifact skipped name=%s reason=unrecognized", artifact.filename)
            continue
        groups.setdefault(artifact.platform, []).append(artifact)

    outcomes = _sign_groups(groups, signer, download_base_url, workers)

    platforms: dict[PlatformKey, PlatformEntry] = {}
    ranked: list[tuple[Artifact, DroppedArtifact]] = []
    for key, outcome in outcomes.items():
        if outcome.entry is not None:
            platforms[key] = outcome.entry
        ranked.extend(outcome.dropped)
    ranked.sort(key=lambda pair: (pair[0].filename, pair[0].path.as_posix()))
    dropped = [item for _artifact, item in ranked]

    if not platforms:
        logger.error("assemble failed reason=no_platforms dropped=%s", len(dropped))
        raise NoPlatformsResolved(dropped)

    manifest = ReleaseManifest(
        version=version,
        notes=notes,
        pub_date=format_pub_date((clock or utc_now)()),
        platforms=platforms,
    )
    logger.info(
        "assemble complete version=%s platforms=%s dropped=%s",
        version,
        ",".join(manifest.platforms),
        len(dropped),
    )
    return AssemblyResult(manifest=manifest, dropped=dropped)


def assemble(
    bundle_dir: Path,
    download_base_url: str,
    notes: str,
    **kwargs: Any,
) -> ReleaseManifest:
    return assemble_release(bundle_dir, download_base_url, notes, **kwargs).manifest


def _sign_groups(
    groups: dict[PlatformKey, list[Artifact]],
    signer: ArtifactSigner,
    download_base_url: str,
    workers: int,
) -> dict[PlatformKey, _GroupOutcome]:
    if workers == 1 or len(groups) <= 1:
        return {
            key: _sign_group(key, candidates, signer, download_base_url)
            for key, candidates in groups.items()
        }
    with ThreadPoolExecutor(max_workers=min(workers, len(groups))) as pool:
        futures = {
            key: pool.submit(_sign_group, key, candidates, signer, download_base_url)
            for key, candidates in groups.items()
        }
        return {key: future.result() for key, future in futures.items()}


def _sign_group(
    platform: PlatformKey,
    candidates: list[Artifact],
    signer: ArtifactSigner,
    download_base_url: str,
) -> _GroupOutcome:
    # candidates arrive in sorted order; the first one that signs wins the key
    outcome = _GroupOutcome()
    for artifact in candidates:
        if outcome.entry is not None:
            logger.info(
                "artifact skipped name=%s platform=%s reason=duplicate_platform",
                artifact.filename,
                platform,
            )
            outcome.dropped.append(
                (
                    artifact,
                    _drop(artifact, platform, "duplicate_platform", "platform already provided"),
                )
            )
            continue
        try:
            signature = signer.sign(artifact.path)
            if not signature.strip():
                raise SigningFailed(artifact.path, "signer returned an empty signature")
        except SigningFailed as exc:
            logger.warning(
                "artifact dropped name=%s platform=%s reason=%s",
                artifact.filename,
                platform,
                exc.reason,
            )
            outcome.dropped.append(
                (artifact, _drop(artifact, platform, "signing_failed", exc.reason))
            )
            continue
        outcome.entry = PlatformEntry(
            signature=signature,
            url=artifact_url(download_base_url, artifact.filename),
        )
        logger.info("artifact signed name=%s platform=%s", artifact.filename, platform)
    return outcome


def _drop(
    artifact: Artifact, platform: PlatformKey, kind: DropKind, reason: str
) -> DroppedArtifact:
    return DroppedArtifact(
        path=str(artifact.path),
        filename=artifact.filename,
        platform=platform,
        kind=kind,
        reason=reason,
    )
