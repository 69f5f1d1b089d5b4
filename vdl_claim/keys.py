"""
secp256k1 key derivation.

Two inputs lead to the same `DerivedKey` shape:
  - a raw 32-byte private key
  - a BIP-39 mnemonic, expanded to a seed and walked down a BIP-32 path
    (m/44'/118'/0'/0/0 for Cosmos-SDK chains)

Seeds, mnemonics and private keys never leave this module except inside
`DerivedKey.private_key`, and are never logged.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Sequence

from coincurve import PrivateKey
from eth_account.hdaccount import key_from_seed, seed_from_mnemonic
from mnemonic import Mnemonic

from .address import address_from_public_key
from .config import DEFAULT_HD_PATH
from .errors import InvalidCredentialError

SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

MNEMONIC_WORD_COUNTS = (12, 24)

_HEX_KEY_RE = re.compile(r"^[0-9a-fA-F]{64}$")


@dataclass(frozen=True)
class DerivedKey:
    """Address and public key derived from a secret."""

    address: str
    public_key: bytes  # 33-byte compressed
    private_key: bytes = field(repr=False)


# ============================================================================
# Raw private key
# ============================================================================


def parse_private_key(key_hex: str) -> bytes:
    """
    Parse a 64-character hex private key (optional 0x prefix).

    Raises:
        InvalidCredentialError: wrong length, non-hex characters, or out of range
    """
    key_hex = key_hex.strip()
    if key_hex.startswith(("0x", "0X")):
        key_hex = key_hex[2:]

    if not _HEX_KEY_RE.match(key_hex):
        raise InvalidCredentialError("Invalid private key. Ensure it is a 64-character hex string.")

    secret = bytes.fromhex(key_hex)
    scalar = int.from_bytes(secret, "big")
    if scalar == 0 or scalar >= SECP256K1_ORDER:
        raise InvalidCredentialError("Invalid private key. Key is outside the secp256k1 range.")
    return secret


def derive_from_secret(secret: bytes, prefix: str) -> DerivedKey:
    """Derive the compressed public key and bech32 address for a 32-byte secret."""
    if len(secret) != 32:
        raise InvalidCredentialError("Invalid private key. Expected 32 bytes.")
    try:
        key = PrivateKey(secret)
    except ValueError as e:
        raise InvalidCredentialError("Invalid private key.") from e

    public_key = key.public_key.format(compressed=True)
    return DerivedKey(
        address=address_from_public_key(public_key, prefix),
        public_key=public_key,
        private_key=key.secret,
    )


# ============================================================================
# Mnemonic
# ============================================================================


def normalize_mnemonic(words: str | Sequence[str]) -> list[str]:
    """Split a phrase (or re-split a word list) on any whitespace, lowercased."""
    if isinstance(words, str):
        return words.strip().lower().split()
    return " ".join(words).strip().lower().split()



def mnemonic_to_seed(words: str | Sequence[str], passphrase: str = "") -> bytes:
    """
    Validate a BIP-39 mnemonic and return its 64-byte seed.

    Word count is checked before anything else is computed.

    Raises:
        InvalidCredentialError: word count is not 12/24, unknown word, or bad checksum
    """
    normalized = normalize_mnemonic(words)
    if len(normalized) not in MNEMONIC_WORD_COUNTS:
        raise InvalidCredentialError("Invalid mnemonic. Ensure it is a 12 or 24-word phrase.")

    phrase = " ".join(normalized)
    if not Mnemonic("english").check(phrase):
        raise InvalidCredentialError("Error generating address. Ensure the mnemonic is valid.")

    return seed_from_mnemonic(phrase, passphrase=passphrase)


def derive_path(seed: bytes, hd_path: str = DEFAULT_HD_PATH) -> bytes:
    """Private key at `hd_path` (e.g. m/44'/118'/0'/0/0) below the seed's master key."""
    return key_from_seed(seed, hd_path)


# ============================================================================
# Entry points
# ============================================================================


def derive_from_private_key(key_hex: str, prefix: str) -> DerivedKey:
    """Address and public key for a hex private key."""
    return derive_from_secret(parse_private_key(key_hex), prefix)


def derive_from_mnemonic(
    words: str | Sequence[str],
    prefix: str,
    hd_path: str = DEFAULT_HD_PATH,
) -> DerivedKey:
    """Address and public key for the account at `hd_path` of a mnemonic."""
    seed = mnemonic_to_seed(words)
    return derive_from_secret(derive_path(seed, hd_path), prefix)
