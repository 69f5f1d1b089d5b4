"""
Detached secp256k1 signatures over ADR-36 sign documents.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

import structlog
from coincurve import PrivateKey

from .errors import ClaimError, SigningFailedError
from .signdoc import SignableDocument

if TYPE_CHECKING:
    from .credentials import KeyMaterial

logger = structlog.get_logger()


class ClaimSigner(Protocol):
    """Anything that can produce a base64 signature for a sign document."""

    async def sign(self, document: SignableDocument) -> str: ...


def sign_document(private_key: bytes, document: SignableDocument) -> bytes:
    """
    Sign a document with a local key.

    Returns:
        64-byte signature (r || s), s normalized to the lower half of the order
    """
    key = PrivateKey(private_key)
    # libsecp256k1 always emits low-s; drop the trailing recovery id.
    recoverable = key.sign_recoverable(document.sign_bytes(), hasher=None)
    return recoverable[:64]


@dataclass(frozen=True)
class LocalSigner:
    """Signer holding a derived private key in memory."""

    private_key: bytes = field(repr=False)

    async def sign(self, document: SignableDocument) -> str:
        return base64.b64encode(sign_document(self.private_key, document)).decode("ascii")


async def sign(key_material: "KeyMaterial", document: SignableDocument) -> str:
    """
    Produce one detached signature for `document` with `key_material`.

    Callers must not assume repeated calls return identical bytes.

    Raises:
        SigningFailedError: the document is not for this key, or the signer failed
        UserRejectedError: the user cancelled in an external signer
        StaleKeyMaterialError: extension account changed since derivation
    """
    if document.signer_address != key_material.address:
        raise SigningFailedError("Sign document is not addressed to this account.")

    try:
        signature = await key_material.signer.sign(document)
    except ClaimError:
        raise
    except Exception as e:
        logger.error("sign_failed", address=key_material.address, error=str(e))
        raise SigningFailedError() from e

    logger.info("document_signed", address=key_material.address, source=key_material.source.value)
    return signature
