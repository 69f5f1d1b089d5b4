"""
Tests for bech32 account addresses.
"""

import pytest

from vdl_claim.address import (
    bech32_decode,
    bech32_encode,
    convertbits,
    decode_address,
    encode_address,
    hash160,
    validate_address,
)
from vdl_claim.errors import InvalidCredentialError


class TestBech32:
    """Tests for the raw bech32 codec."""

    def test_encode_matches_reference_vector(self) -> None:
        """BIP-173 P2WPKH example encodes to the published address."""
        program = bytes.fromhex("751e76e8199196d454941c45d1b3a323f1433bd6")
        data = [0] + convertbits(program, 8, 5)
        assert bech32_encode("bc", data) == "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4"

    def test_decode_reference_vector(self) -> None:
        """BIP-173 example decodes back to its program."""
        hrp, data = bech32_decode("BC1QW508D6QEJXTDG4Y5R3ZARVARY0C5XW7KV8F3T4")
        assert hrp == "bc"
        assert bytes(convertbits(data[1:], 5, 8, False)).hex() == "751e76e8199196d454941c45d1b3a323f1433bd6"

    def test_decode_rejects_mixed_case(self) -> None:
        """Mixed-case strings are not bech32."""
        assert bech32_decode("bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3T4") is None

    def test_decode_rejects_bad_checksum(self) -> None:
        """A changed final character breaks the checksum."""
        assert bech32_decode("bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t5") is None


class TestAccountAddress:
    """Tests for Cosmos-style account addresses."""

    def test_encode_decode_payload(self) -> None:
        """A 20-byte payload survives encoding under its prefix."""
        payload = bytes(range(20))
        addr = encode_address("vdl", payload)
        assert addr.startswith("vdl1")
        assert decode_address(addr, "vdl") == payload

    def test_encode_rejects_wrong_payload_length(self) -> None:
        """Only 20-byte payloads are account addresses."""
        with pytest.raises(ValueError):
            encode_address("vdl", bytes(32))

    def test_encode_rejects_out_of_range_values(self) -> None:
        """Payload values that do not fit in a byte raise ValueError."""
        with pytest.raises(ValueError) as exc_info:
            encode_address("vdl", [256] + [0] * 19)
        assert "must be bytes" in str(exc_info.value)

    def test_decode_rejects_other_prefix(self) -> None:
        """A bze address is not a vdl address."""
        addr = encode_address("bze", bytes(range(20)))
        assert decode_address(addr, "vdl") is None

    def test_decode_rejects_32_byte_payload(self) -> None:
        """Contract-style addresses are not account addresses."""
        addr = bech32_encode("vdl", convertbits(bytes(32), 8, 5))
        assert decode_address(addr, "vdl") is None

    def test_hash160_generator_point(self) -> None:
        """hash160 of the compressed generator point is the well-known key hash."""
        g = bytes.fromhex("0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798")
        assert hash160(g).hex() == "751e76e8199196d454941c45d1b3a323f1433bd6"


class TestValidateAddress:
    """Tests for validate_address."""

    def test_valid_bze_address(self, bze_address: str) -> None:
        """A well-formed bze address is returned unchanged."""
        assert validate_address(bze_address, "bze") == bze_address

    def test_strips_whitespace(self, bze_address: str) -> None:
        """Surrounding whitespace is ignored."""
        assert validate_address(f"  {bze_address}\n", "bze") == bze_address

    def test_wrong_prefix(self) -> None:
        """A vdl address is refused where a bze address is expected."""
        addr = encode_address("vdl", bytes(20))
        with pytest.raises(InvalidCredentialError) as exc_info:
            validate_address(addr, "bze")
        assert exc_info.value.user_message == "Invalid BZE address."

    def test_corrupted_checksum(self, bze_address: str) -> None:
        """A typo in the address is caught by the checksum."""
        corrupted = bze_address[:-1] + ("q" if bze_address[-1] != "q" else "p")
        with pytest.raises(InvalidCredentialError):
            validate_address(corrupted, "bze")

    def test_garbage(self) -> None:
        """Short strings are refused."""
        with pytest.raises(InvalidCredentialError):
            validate_address("bze1xyz", "bze")

    def test_empty(self) -> None:
        """An empty address is refused."""
        with pytest.raises(InvalidCredentialError):
            validate_address("", "bze")
