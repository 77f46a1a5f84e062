"""Verification of minisign signatures attached to update packages.

The manifest ``signature`` field is the base64 encoding of a complete minisign
signature file; the configured public key is the base64 encoding of a minisign
public key file.  Both the package signature and the trusted-comment signature
are checked before anything is installed.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path

from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from services.update.constants import SIGNATURE_ALGORITHM_PREHASHED, SIGNATURE_ALGORITHM_PURE
from services.update.models import SignatureError

_LOGGER = logging.getLogger(__name__)

_UNTRUSTED_PREFIX = "untrusted comment:"
_TRUSTED_PREFIX = "trusted comment: "


@dataclass(frozen=True)
class PublicKey:
    key_id: bytes
    verify_key: VerifyKey


@dataclass(frozen=True)
class Signature:
    algorithm: bytes
    key_id: bytes
    signature: bytes
    trusted_comment: str
    global_signature: bytes


def _b64decode(value: str, what: str) -> bytes:
    try:
        return base64.b64decode(value.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise SignatureError(f"Invalid base64 in {what}") from exc


def _unwrap_text(value: str, what: str) -> list[str]:
    """Return the lines of a minisign document given raw or base64-wrapped text."""

    text = value.strip()
    if not text.startswith(_UNTRUSTED_PREFIX):
        try:
            text = _b64decode(text, what).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SignatureError(f"{what} is not a minisign document") from exc
    return [line.strip() for line in text.splitlines() if line.strip()]


def parse_public_key(value: str) -> PublicKey:
    lines = _unwrap_text(value, "public key")
    key_lines = [line for line in lines if not line.startswith(_UNTRUSTED_PREFIX)]
    if not key_lines:
        raise SignatureError("Public key document is empty")
    raw = _b64decode(key_lines[0], "public key")
    if len(raw) != 42 or raw[:2] != SIGNATURE_ALGORITHM_PURE:
        raise SignatureError("Unsupported public key format")
    return PublicKey(key_id=raw[2:10], verify_key=VerifyKey(raw[10:]))


def parse_signature(value: str) -> Signature:
    lines = _unwrap_text(value, "signature")
    if len(lines) < 4 or not lines[2].startswith(_TRUSTED_PREFIX):
        raise SignatureError("Signature document is incomplete")
    raw = _b64decode(lines[1], "signature")
    if len(raw) != 74:
        raise SignatureError("Signature has an unexpected length")
    algorithm = raw[:2]
    if algorithm not in (SIGNATURE_ALGORITHM_PURE, SIGNATURE_ALGORITHM_PREHASHED):
        raise SignatureError(f"Unsupported signature algorithm {algorithm!r}")
    global_signature = _b64decode(lines[3], "trusted comment signature")
    if len(global_signature) != 64:
        raise SignatureError("Trusted comment signature has an unexpected length")
    return Signature(
        algorithm=algorithm,
        key_id=raw[2:10],
        signature=raw[10:],
        trusted_comment=lines[2][len(_TRUSTED_PREFIX):],
        global_signature=global_signature,
    )


def _signed_message(path: Path, algorithm: bytes) -> bytes:
    if algorithm == SIGNATURE_ALGORITHM_PURE:
        return path.read_bytes()
    digest = hashlib.blake2b(digest_size=64)
    with path.open("rb") as source:
        for chunk in iter(lambda: source.read(65536), b""):
            digest.update(chunk)
    return digest.digest()


def verify_file_signature(path: Path, signature: str, public_key: str) -> None:
    """Raise :class:`SignatureError` unless ``path`` is signed by ``public_key``."""

    if not public_key.strip():
        raise SignatureError("No updater public key is configured")
    key = parse_public_key(public_key)
    parsed = parse_signature(signature)
    if parsed.key_id != key.key_id:
        raise SignatureError("Package was signed with a different key")

    try:
        key.verify_key.verify(_signed_message(path, parsed.algorithm), parsed.signature)
        key.verify_key.verify(
            parsed.signature + parsed.trusted_comment.encode("utf-8"),
            parsed.global_signature,
        )
    except BadSignatureError as exc:
        raise SignatureError(f"Signature verification failed for {path.name}") from exc
    _LOGGER.info("Verified signature for %s (%s)", path.name, parsed.trusted_comment)


__all__ = ["PublicKey", "Signature", "parse_public_key", "parse_signature", "verify_file_signature"]
