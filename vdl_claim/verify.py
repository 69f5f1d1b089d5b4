"""
Local ADR-36 signature verification.

A claim is only ever submitted after this check passes. It rebuilds the sign
document from scratch, so a signature is accepted only if it covers exactly
(signer_address, sha256(destination_address)) and comes from the key whose
hash160 is the signer address.

Signature format (base64):
  r(32) + s(32), s in the lower half of the curve order
"""

from __future__ import annotations

import base64
import binascii
from typing import Optional

import structlog
from coincurve import PublicKey

from .address import address_from_public_key
from .errors import InvalidCredentialError, SignatureInvalidError
from .keys import SECP256K1_ORDER
from .signdoc import build_sign_doc

logger = structlog.get_logger()

REASON_PUBKEY_MISMATCH = "pubkey_mismatch"
REASON_SIGNATURE = "signature"
REASON_SIGNER = "signer_address"

_REASON_MESSAGES = {
    REASON_PUBKEY_MISMATCH: "Public key does not match the signer address.",
    REASON_SIGNER: "Invalid signer address.",
}


def _decode_b64(value: str) -> Optional[bytes]:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return None


def _check(
    prefix: str,
    signer_address: str,
    destination_address: str,
    public_key: bytes,
    signature_b64: str,
) -> Optional[str]:
    """Return None when valid, otherwise the failure reason."""
    try:
        doc = build_sign_doc(prefix, signer_address, destination_address)
    except InvalidCredentialError:
        return REASON_SIGNER

    if len(public_key) != 33 or public_key[0] not in (2, 3):
        return REASON_PUBKEY_MISMATCH
    if address_from_public_key(public_key, prefix) != doc.signer_address:
        return REASON_PUBKEY_MISMATCH

    sig = _decode_b64(signature_b64)
    if sig is None or len(sig) != 64:
        return REASON_SIGNATURE

    r = int.from_bytes(sig[:32], "big")
    s = int.from_bytes(sig[32:], "big")
    if not (0 < r < SECP256K1_ORDER) or not (0 < s <= SECP256K1_ORDER // 2):
        return REASON_SIGNATURE

    digest = doc.sign_bytes()
    for recid in range(4):
        try:
            recovered = PublicKey.from_signature_and_message(sig + bytes([recid]), digest, hasher=None)
        except Exception:
            # coincurve raises a bare Exception when no key recovers for this id.
            continue
        if recovered.format(compressed=True) == public_key:
            return None

    return REASON_SIGNATURE


def verify_adr36_signature(
    prefix: str,
    signer_address: str,
    destination_address: str,
    public_key: bytes,
    signature_b64: str,
) -> bool:
    """True iff `signature_b64` is a valid claim signature by `signer_address`."""
    reason = _check(prefix, signer_address, destination_address, public_key, signature_b64)
    if reason is not None:
        logger.warning("local_verification_failed", signer=signer_address, reason=reason)
        return False
    return True


def verify_or_raise(
    prefix: str,
    signer_address: str,
    destination_address: str,
    public_key: bytes,
    signature_b64: str,
) -> None:
    """
    Like verify_adr36_signature, but raise with the failure reason.

    Raises:
        SignatureInvalidError: reason is "pubkey_mismatch", "signer_address" or "signature"
    """
    reason = _check(prefix, signer_address, destination_address, public_key, signature_b64)
    if reason is None:
        return
    logger.warning("local_verification_failed", signer=signer_address, reason=reason)
    raise SignatureInvalidError(_REASON_MESSAGES.get(reason), reason=reason)
