"""
Credential adapters.

Three ways to supply a signing key, one result: a KeyMaterial holding the
account address, its compressed public key and a signer. Raw keys and
mnemonics are turned into a LocalSigner; extension sessions keep the key in
the wallet and hand back an ExtensionSigner.

Credential values are never logged and never sent anywhere.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence, Union

import structlog

from .config import DEFAULT_HD_PATH
from .extension import ExtensionSession, ExtensionSigner
from .keys import DerivedKey, derive_from_mnemonic, derive_from_private_key, normalize_mnemonic
from .signer import ClaimSigner, LocalSigner

logger = structlog.get_logger()


class CredentialSource(str, Enum):
    PRIVATE_KEY = "private_key"
    MNEMONIC = "mnemonic"
    EXTENSION = "extension"


@dataclass(frozen=True)
class PrivateKeyCredential:
    key_hex: str = field(repr=False)


@dataclass(frozen=True)
class MnemonicCredential:
    words: tuple[str, ...] = field(repr=False)

    @classmethod
    def from_phrase(cls, phrase: str | Sequence[str]) -> "MnemonicCredential":
        return cls(words=tuple(normalize_mnemonic(phrase)))


@dataclass(frozen=True)
class ExtensionCredential:
    session: ExtensionSession


Credential = Union[PrivateKeyCredential, MnemonicCredential, ExtensionCredential]


@dataclass(frozen=True)
class KeyMaterial:
    """Derived account handle. Replaced, never mutated."""

    address: str
    public_key: bytes
    signer: ClaimSigner = field(repr=False, compare=False)
    source: CredentialSource
    epoch: int = 0

    @property
    def public_key_b64(self) -> str:
        return base64.b64encode(self.public_key).decode("ascii")

    def is_current(self) -> bool:
        """False once an extension account change has superseded this handle."""
        if isinstance(self.signer, ExtensionSigner):
            return self.signer.session.epoch == self.epoch
        return True


def _local_key_material(derived: DerivedKey, source: CredentialSource) -> KeyMaterial:
    return KeyMaterial(
        address=derived.address,
        public_key=derived.public_key,
        signer=LocalSigner(derived.private_key),
        source=source,
    )


def key_material_from_private_key(key_hex: str, prefix: str = "vdl") -> KeyMaterial:
    """
    Raises:
        InvalidCredentialError: not a 64-char hex key in the secp256k1 range
    """
    derived = derive_from_private_key(key_hex, prefix)
    logger.info("address_derived", source=CredentialSource.PRIVATE_KEY.value, address=derived.address)
    return _local_key_material(derived, CredentialSource.PRIVATE_KEY)


def key_material_from_mnemonic(
    words: str | Sequence[str],
    prefix: str = "vdl",
    hd_path: str = DEFAULT_HD_PATH,
) -> KeyMaterial:
    """
    Raises:
        InvalidCredentialError: not 12/24 words, or invalid BIP-39 phrase
    """
    derived = derive_from_mnemonic(words, prefix, hd_path)
    logger.info("address_derived", source=CredentialSource.MNEMONIC.value, address=derived.address)
    return _local_key_material(derived, CredentialSource.MNEMONIC)


async def key_material_from_extension(session: ExtensionSession) -> KeyMaterial:
    """
    Read the active extension account (connecting first if needed).

    Raises:
        ExtensionUnavailableError, UserRejectedError, InvalidCredentialError
    """
    key = session.key or await session.connect()
    epoch = session.epoch
    logger.info("address_derived", source=CredentialSource.EXTENSION.value, address=key.address)
    return KeyMaterial(
        address=key.address,
        public_key=key.public_key,
        signer=ExtensionSigner(session=session, epoch=epoch),
        source=CredentialSource.EXTENSION,
        epoch=epoch,
    )


async def connect(
    credential: Credential,
    prefix: str = "vdl",
    hd_path: str = DEFAULT_HD_PATH,
) -> KeyMaterial:
    """Turn any supported credential into KeyMaterial."""
    if isinstance(credential, PrivateKeyCredential):
        return key_material_from_private_key(credential.key_hex, prefix)
    if isinstance(credential, MnemonicCredential):
        return key_material_from_mnemonic(credential.words, prefix, hd_path)
    if isinstance(credential, ExtensionCredential):
        return await key_material_from_extension(credential.session)
    raise TypeError(f"Unsupported credential: {type(credential).__name__}")
