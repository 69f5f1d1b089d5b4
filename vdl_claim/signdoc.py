"""
ADR-36 "arbitrary message" sign documents.

The signed payload is sha256(utf8(destination_address)), wrapped in an amino
StdSignDoc with zeroed account number, sequence, fee and an empty chain id:

    {"account_number":"0","chain_id":"","fee":{"amount":[],"gas":"0"},"memo":"",
     "msgs":[{"type":"sign/MsgSignData",
              "value":{"data":"<base64 payload>","signer":"<address>"}}],
     "sequence":"0"}

Any wallet that implements ADR-36 (a local key or an extension) signs the
same bytes for the same (signer, destination) pair.
"""

from __future__ import annotations

import base64
import hashlib
import json
from dataclasses import dataclass
from typing import Any

from .address import validate_address

MSG_SIGN_DATA_TYPE = "sign/MsgSignData"

# Amino JSON escapes these so the document is safe to embed in HTML.
_AMINO_ESCAPES = (("&", "\\u0026"), ("<", "\\u003c"), (">", "\\u003e"))


def payload_digest(destination_address: str) -> bytes:
    """32-byte digest that the claim signature commits to."""
    return hashlib.sha256(destination_address.encode("utf-8")).digest()


def serialize_sign_doc(doc: dict[str, Any]) -> bytes:
    """Canonical amino JSON: sorted keys, no whitespace, HTML-sensitive chars escaped."""
    # IMPORTANT: must stay byte-identical to what wallets sign.
    raw = json.dumps(doc, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
    for char, escaped in _AMINO_ESCAPES:
        raw = raw.replace(char, escaped)
    return raw.encode("utf-8")


@dataclass(frozen=True)
class SignableDocument:
    signer_prefix: str
    signer_address: str
    data: bytes

    def to_dict(self) -> dict[str, Any]:
        return {
            "chain_id": "",
            "account_number": "0",
            "sequence": "0",
            "fee": {"gas": "0", "amount": []},
            "msgs": [
                {
                    "type": MSG_SIGN_DATA_TYPE,
                    "value": {
                        "signer": self.signer_address,
                        "data": base64.b64encode(self.data).decode("ascii"),
                    },
                }
            ],
            "memo": "",
        }

    def serialize(self) -> bytes:
        return serialize_sign_doc(self.to_dict())

    def sign_bytes(self) -> bytes:
        """sha256 of the serialized document; this is what secp256k1 signs."""
        return hashlib.sha256(self.serialize()).digest()


def build_sign_doc(signer_prefix: str, signer_address: str, destination_address: str) -> SignableDocument:
    """
    Build the document binding `destination_address` to `signer_address`.

    Raises:
        InvalidCredentialError: signer address is not a valid `signer_prefix` address
    """
    signer_address = validate_address(signer_address, signer_prefix)
    return SignableDocument(
        signer_prefix=signer_prefix,
        signer_address=signer_address,
        data=payload_digest(destination_address),
    )
