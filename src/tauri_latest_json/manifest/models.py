from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from tauri_latest_json.platforms import PlatformKey

DropKind = Literal["signing_failed", "duplicate_platform"]


class PlatformEntry(BaseModel):
    signature: str
    url: str

    @field_validator("signature", "url")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class ReleaseManifest(BaseModel):
    version: str
    notes: str
    pub_date: str
    platforms: dict[PlatformKey, PlatformEntry] = Field(default_factory=dict)

    @field_validator("platforms")
    @classmethod
    def _sorted_platforms(
        cls, value: dict[PlatformKey, PlatformEntry]
    ) -> dict[PlatformKey, PlatformEntry]:
        return {key: value[key] for key in sorted(value)}


class DroppedArtifact(BaseModel):
    path: str
    filename: str
    platform: PlatformKey
    kind: DropKind
    reason: str


class AssemblyResult(BaseModel):
    manifest: ReleaseManifest
    dropped: list[DroppedArtifact] = Field(default_factory=list)

    def failed(self) -> list[DroppedArtifact]:
        return [item for item in self.dropped if item.kind == "signing_failed"]
