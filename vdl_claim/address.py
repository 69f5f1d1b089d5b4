"""
Bech32 account address utilities.

Cosmos-style accounts: bech32(hrp, hash160(compressed_pubkey)), with no
witness version byte and a fixed 20-byte payload.
"""

import hashlib
from typing import Optional

from .errors import InvalidCredentialError

# Bech32 charset
BECH32_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"

ADDRESS_PAYLOAD_LENGTH = 20


def _bech32_polymod(values: list[int]) -> int:
    """Internal Bech32 polymod calculation."""
    GEN = [0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3]
    chk = 1
    for v in values:
        b = chk >> 25
        chk = ((chk & 0x1FFFFFF) << 5) ^ v
        for i in range(5):
            if (b >> i) & 1:
                chk ^= GEN[i]
    return chk


def _bech32_hrp_expand(hrp: str) -> list[int]:
    """Expand HRP for checksum calculation."""
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _bech32_verify_checksum(hrp: str, data: list[int]) -> bool:
    """Verify Bech32 checksum."""
    return _bech32_polymod(_bech32_hrp_expand(hrp) + data) == 1


def _bech32_create_checksum(hrp: str, data: list[int]) -> list[int]:
    """Compute the 6-symbol Bech32 checksum."""
    polymod = _bech32_polymod(_bech32_hrp_expand(hrp) + data + [0] * 6) ^ 1
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]


def bech32_encode(hrp: str, data: list[int]) -> str:
    """Encode 5-bit groups under `hrp`."""
    combined = data + _bech32_create_checksum(hrp, data)
    return hrp + "1" + "".join(BECH32_CHARSET[d] for d in combined)


def bech32_decode(addr: str) -> Optional[tuple[str, list[int]]]:
    """
    Decode a bech32 string.

    Returns (hrp, data) or None if invalid.
    """
    if any(ord(c) < 33 or ord(c) > 126 for c in addr):
        return None

    # Mixed case is invalid per BIP-173
    if addr.lower() != addr and addr.upper() != addr:
        return None

    addr = addr.lower()
    pos = addr.rfind("1")
    if pos < 1 or pos + 7 > len(addr) or len(addr) > 90:
        return None

    hrp = addr[:pos]
    data_part = addr[pos + 1 :]

    if not all(c in BECH32_CHARSET for c in data_part):
        return None

    data = [BECH32_CHARSET.index(c) for c in data_part]

    if not _bech32_verify_checksum(hrp, data):
        return None

    return hrp, data[:-6]  # Remove checksum


def convertbits(data: bytes | list[int], frombits: int, tobits: int, pad: bool = True) -> Optional[list[int]]:
    """Convert between bit sizes."""
    acc = 0
    bits = 0
    ret = []
    maxv = (1 << tobits) - 1
    max_acc = (1 << (frombits + tobits - 1)) - 1

    for value in data:
        if value < 0 or (value >> frombits):
            return None
        acc = ((acc << frombits) | value) & max_acc
        bits += frombits
        while bits >= tobits:
            bits -= tobits
            ret.append((acc >> bits) & maxv)

    if pad:
        if bits:
            ret.append((acc << (tobits - bits)) & maxv)
    elif bits >= frombits or ((acc << (tobits - bits)) & maxv):
        return None

    return ret


def hash160(data: bytes) -> bytes:
    h = hashlib.sha256(data).digest()
    r = hashlib.new("ripemd160")
    r.update(h)
    return r.digest()


def encode_address(prefix: str, payload: bytes) -> str:
    """Encode a 20-byte account payload as a bech32 address."""
    if len(payload) != ADDRESS_PAYLOAD_LENGTH:
        raise ValueError(f"address payload must be {ADDRESS_PAYLOAD_LENGTH} bytes, got {len(payload)}")
    words = convertbits(payload, 8, 5)
    if words is None:
        raise ValueError("address payload must be bytes")
    return bech32_encode(prefix, words)


def decode_address(addr: str, prefix: str) -> Optional[bytes]:
    """
    Decode an account address and return its 20-byte payload.

    Returns None unless the address is valid bech32 under exactly `prefix`
    with a 20-byte payload.
    """
    result = bech32_decode(addr)
    if result is None:
        return None

    hrp, data = result
    if hrp != prefix:
        return None

    decoded = convertbits(data, 5, 8, False)
    if decoded is None or len(decoded) != ADDRESS_PAYLOAD_LENGTH:
        return None

    return bytes(decoded)


def address_from_public_key(public_key: bytes, prefix: str) -> str:
    """Account address for a compressed secp256k1 public key."""
    return encode_address(prefix, hash160(public_key))


def validate_address(addr: str, prefix: str) -> str:
    """
    Check that `addr` is a well-formed account address under `prefix`.

    Returns the address stripped of surrounding whitespace.

    Raises:
        InvalidCredentialError: prefix, checksum or payload is wrong
    """
    addr = addr.strip()
    if not addr.startswith(prefix + "1"):
        raise InvalidCredentialError(f"Invalid {prefix.upper()} address.")
    if decode_address(addr, prefix) is None:
        raise InvalidCredentialError(f"Invalid {prefix.upper()} address.")
    return addr
