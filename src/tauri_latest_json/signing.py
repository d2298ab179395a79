from __future__ import annotations

import base64
import binascii
import logging
from pathlib import Path
from typing import Protocol

from nacl.encoding import Base64Encoder
from nacl.exceptions import CryptoError
from nacl.signing import SigningKey

from tauri_latest_json.errors import SigningFailed

logger = logging.getLogger(__name__)

KeySource = SigningKey | Path | str | bytes

SIDECAR_SUFFIX = ".sig"


class ArtifactSigner(Protocol):
    def sign(self, artifact_path: Path) -> str:
        ...


class Ed25519Signer:
    """Signs artifacts with an Ed25519 key that is re-read on every call.

    Only the key source is kept on the instance. A path source therefore picks
    up key rotation between calls, and decoded seed bytes never outlive a
    single ``sign`` call.
    """

    def __init__(self, key_source: KeySource) -> None:
        self._key_source = key_source

    def sign(self, artifact_path: Path) -> str:
        return sign(artifact_path, self._key_source)

    def __repr__(self) -> str:
        return f"Ed25519Signer(key_source=<{type(self._key_source).__name__}>)"


class SidecarSigner:
    """Reuses the ``<artifact>.sig`` file the bundler already wrote."""

    def sign(self, artifact_path: Path) -> str:
        sidecar = artifact_path.with_name(artifact_path.name + SIDECAR_SUFFIX)
        try:
            signature = sidecar.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            raise SigningFailed(artifact_path, f"signature file missing: {sidecar.name}") from None
        except (OSError, UnicodeDecodeError) as exc:
            raise SigningFailed(artifact_path, f"signature file unreadable: {exc}") from exc
        if not signature:
            raise SigningFailed(artifact_path, f"signature file empty: {sidecar.name}")
        return signature


def load_signing_key(key_source: KeySource) -> SigningKey:
    if isinstance(key_source, SigningKey):
        return key_source
    if isinstance(key_source, Path):
        try:
            raw = key_source.read_bytes()
        except OSError as exc:
            raise ValueError(f"key file unreadable: {key_source.name}: {exc.strerror}") from exc
    elif isinstance(key_source, str):
        raw = key_source.encode("ascii", errors="replace")
    else:
        raw = key_source
    try:
        return SigningKey(raw.strip(), encoder=Base64Encoder)
    except (binascii.Error, CryptoError, TypeError, ValueError) as exc:
        raise ValueError("key is not a base64-encoded 32-byte Ed25519 seed") from exc


def sign(artifact_path: Path, private_key: KeySource) -> str:
    try:
        key = load_signing_key(private_key)
    except ValueError as exc:
        raise SigningFailed(artifact_path, f"unreadable key: {exc}") from exc
    try:
        data = artifact_path.read_bytes()
    except OSError as exc:
        raise SigningFailed(artifact_path, f"unreadable artifact: {exc.strerror or exc}") from exc
    try:
        signed = key.sign(data)
    except Exception as exc:
        raise SigningFailed(artifact_path, f"signing primitive error: {exc}") from exc
    finally:
        del key
    signature = base64.b64encode(signed.signature).decode("ascii")
    logger.debug("artifact signed name=%s bytes=%s", artifact_path.name, len(data))
    return signature


def generate_keypair() -> tuple[str, str]:
    private_key = SigningKey.generate()
    private_b64 = private_key.encode(encoder=Base64Encoder).decode("ascii")
    public_b64 = private_key.verify_key.encode(encoder=Base64Encoder).decode("ascii")
    return private_b64, public_b64
