"""
Shared fixtures: a fake wallet extension and a fake claim backend.
"""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
import pytest

from vdl_claim.address import encode_address
from vdl_claim.api import ClaimApiClient, ClaimApiConfig
from vdl_claim.config import Settings
from vdl_claim.errors import UserRejectedError
from vdl_claim.extension import ProviderKey, ProviderSignature
from vdl_claim.keys import derive_from_private_key
from vdl_claim.signdoc import SignableDocument
from vdl_claim.signer import sign_document
from vdl_claim.verify import verify_adr36_signature

TEST_PRIVATE_KEY = "a1" * 32


@pytest.fixture
def settings() -> Settings:
    return Settings(api_url="https://claim.test/api")


@pytest.fixture
def bze_address() -> str:
    return encode_address("bze", bytes(range(20)))


# ============================================================================
# Fake wallet extension
# ============================================================================


class FakeWalletProvider:
    """In-memory stand-in for a Keplr-like extension."""

    def __init__(self, private_key_hex: str, prefix: str = "vdl"):
        self.prefix = prefix
        self.enabled: list[str] = []
        self.reject_enable = False
        self.reject_sign = False
        self.fail_sign: Optional[Exception] = None
        self.sign_calls = 0
        self.on_sign = None
        # Sign with this key instead of the active account.
        self.signing_key: Optional[str] = None
        self.switch_account(private_key_hex)

    def switch_account(self, private_key_hex: str) -> None:
        self._derived = derive_from_private_key(private_key_hex, self.prefix)

    @property
    def address(self) -> str:
        return self._derived.address

    async def enable(self, chain_id: str) -> None:
        if self.reject_enable:
            raise Exception("Request rejected")
        self.enabled.append(chain_id)

    async def get_key(self, chain_id: str) -> ProviderKey:
        return ProviderKey(address=self._derived.address, public_key=self._derived.public_key, name="test")

    async def sign_arbitrary(self, chain_id: str, signer: str, data: bytes) -> ProviderSignature:
        self.sign_calls += 1
        if self.on_sign is not None:
            await self.on_sign()
        if self.reject_sign:
            raise UserRejectedError()
        if self.fail_sign is not None:
            raise self.fail_sign
        key = derive_from_private_key(self.signing_key, self.prefix) if self.signing_key else self._derived
        doc = SignableDocument(signer_prefix=self.prefix, signer_address=signer, data=data)
        sig = sign_document(key.private_key, doc)
        return ProviderSignature(public_key=key.public_key, signature=base64.b64encode(sig).decode())


@pytest.fixture
def make_provider():
    def _make(private_key_hex: str = TEST_PRIVATE_KEY) -> FakeWalletProvider:
        return FakeWalletProvider(private_key_hex)

    return _make


@pytest.fixture
def provider(make_provider) -> FakeWalletProvider:
    return make_provider()


# ============================================================================
# Fake claim backend
# ============================================================================


@dataclass
class FakeBackend:
    """Claim backend served through httpx.MockTransport."""

    amounts: dict[str, Any] = field(default_factory=dict)
    statuses: dict[str, dict[str, Any]] = field(default_factory=dict)
    submissions: list[dict[str, Any]] = field(default_factory=list)
    down: bool = False
    reject_with: Optional[str] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.down:
            raise httpx.ConnectError("backend down", request=request)

        path = request.url.path.removeprefix("/api")
        if request.method == "GET" and path.startswith("/amount/"):
            address = path.split("/")[-1]
            return httpx.Response(200, json={"amount": self.amounts.get(address)})

        if request.method == "GET" and path.startswith("/status/"):
            address = path.split("/")[-1]
            return httpx.Response(200, json=self.statuses.get(address, {}))

        if request.method == "POST" and path == "/verify":
            body = json.loads(request.content)
            self.submissions.append(body)
            if self.reject_with:
                return httpx.Response(200, json={"error": self.reject_with})
            ok = verify_adr36_signature(
                "vdl",
                body["vdlAddress"],
                body["bzeAddress"],
                base64.b64decode(body["vdlPubKey"]),
                body["signature"],
            )
            if not ok:
                return httpx.Response(200, json={"error": "Invalid signature"})
            self.statuses[body["vdlAddress"]] = {
                "bzeAddress": body["bzeAddress"],
                "amount": str(self.amounts.get(body["vdlAddress"], "")),
                "submit": "2024-01-01T00:00:00Z",
            }
            return httpx.Response(200, json={"error": None})

        return httpx.Response(404)

    def pay_out(self, vdl_address: str, txid: str) -> None:
        status = self.statuses[vdl_address]
        status["completed"] = "2024-01-02T12:00:00Z"
        status["txid"] = txid

    def client(self) -> ClaimApiClient:
        return ClaimApiClient(
            ClaimApiConfig(base_url="https://claim.test/api"),
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def backend() -> FakeBackend:
    backend = FakeBackend()
    address = derive_from_private_key(TEST_PRIVATE_KEY, "vdl").address
    backend.amounts[address] = "1250.5"
    return backend
