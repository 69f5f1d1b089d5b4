"""
Claim flow: the operations a host (CLI, UI) drives, and the session that
decides which of them is currently allowed.

    connect -> confirm address / load amount -> destination -> sign -> submit

A session holds at most one KeyMaterial. Entering a new credential, or an
account change in the wallet extension, throws away the key material and
everything built on it.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence

import structlog

from .address import validate_address
from .api import ClaimApiClient
from .config import Settings, get_settings
from .credentials import (
    Credential,
    ExtensionCredential,
    KeyMaterial,
    connect,
    key_material_from_extension,
    key_material_from_mnemonic,
    key_material_from_private_key,
)
from .errors import ClaimStepError, StaleKeyMaterialError, StatusUnavailableError
from .extension import ExtensionSession, WalletProvider
from .models import ClaimStatus, VerifyRequest
from .signdoc import build_sign_doc
from .signer import sign
from .status import amount_display
from .verify import verify_or_raise

logger = structlog.get_logger()


# ============================================================================
# Host operations
# ============================================================================


def derive_from_private_key(key_hex: str, settings: Optional[Settings] = None) -> KeyMaterial:
    settings = settings or get_settings()
    return key_material_from_private_key(key_hex, settings.source_prefix)


def derive_from_mnemonic(words: str | Sequence[str], settings: Optional[Settings] = None) -> KeyMaterial:
    settings = settings or get_settings()
    return key_material_from_mnemonic(words, settings.source_prefix, settings.hd_path)


async def derive_from_extension(session: ExtensionSession) -> KeyMaterial:
    return await key_material_from_extension(session)


async def sign_claim(
    key_material: KeyMaterial,
    dest_address: str,
    *,
    source_prefix: str = "vdl",
    dest_prefix: str = "bze",
) -> str:
    """
    Sign the claim binding `dest_address` to the key material's address.

    Returns the base64 signature. It is not verified here; see submit_claim.

    Raises:
        InvalidCredentialError: destination is not a valid `dest_prefix` address
        StaleKeyMaterialError, UserRejectedError, SigningFailedError
    """
    dest_address = validate_address(dest_address, dest_prefix)
    if not key_material.is_current():
        raise StaleKeyMaterialError()
    document = build_sign_doc(source_prefix, key_material.address, dest_address)
    return await sign(key_material, document)


async def submit_claim(
    api: ClaimApiClient,
    *,
    source_address: str,
    dest_address: str,
    public_key: bytes,
    signature: str,
    source_prefix: str = "vdl",
) -> bool:
    """
    Verify the claim locally and, only if that passes, submit it.

    Returns True once the backend accepts the claim.

    Raises:
        SignatureInvalidError: local verification failed; nothing was sent
        SubmissionFailedError: backend rejected the claim or was unreachable
    """
    verify_or_raise(source_prefix, source_address, dest_address, public_key, signature)

    request = VerifyRequest(
        bze_address=dest_address,
        vdl_pub_key=base64.b64encode(public_key).decode("ascii"),
        signature=signature,
        vdl_address=source_address,
    )
    await api.verify(request)
    return True


async def fetch_status(api: ClaimApiClient, source_address: str, source_prefix: str = "vdl") -> ClaimStatus:
    """
    Raises:
        InvalidCredentialError: not a valid source address
        StatusUnavailableError: lookup failed
    """
    source_address = validate_address(source_address, source_prefix)
    return await api.get_status(source_address)


# ============================================================================
# Session
# ============================================================================


class ClaimStep(str, Enum):
    CONNECT = "connect"
    CONFIRM_ADDRESS = "confirm_address"
    NO_FUNDS = "no_funds"
    ENTER_DESTINATION = "enter_destination"
    SIGN = "sign"
    SUBMIT = "submit"
    SUBMITTED = "submitted"


@dataclass(frozen=True)
class SignedClaim:
    """A claim whose signature passed local verification."""

    source_address: str
    dest_address: str
    public_key: bytes
    signature: str


@dataclass(frozen=True)
class ClaimReceipt:
    """What the user should keep after a successful submission."""

    source_address: str
    dest_address: str
    signature: str


class ClaimSession:
    """
    Single-user claim flow.

    Not safe for concurrent use: one session, one active credential.
    """

    def __init__(self, api: ClaimApiClient, settings: Optional[Settings] = None):
        self.api = api
        self.settings = settings or get_settings()
        self._extension: Optional[ExtensionSession] = None
        self._clear()

    def _clear(self) -> None:
        self.key_material: Optional[KeyMaterial] = None
        self.address_confirmed = False
        self.amount: Optional[Decimal] = None
        self.amount_fetch_failed = False
        self.dest_address: Optional[str] = None
        self.signed: Optional[SignedClaim] = None
        self.receipt: Optional[ClaimReceipt] = None

    @property
    def step(self) -> ClaimStep:
        km = self.key_material
        if km is None or not km.is_current():
            return ClaimStep.CONNECT
        if self.receipt is not None:
            return ClaimStep.SUBMITTED
        if not self.address_confirmed:
            return ClaimStep.CONFIRM_ADDRESS
        if not self.amount:
            return ClaimStep.NO_FUNDS
        if self.dest_address is None:
            return ClaimStep.ENTER_DESTINATION
        if self.signed is None:
            return ClaimStep.SIGN
        return ClaimStep.SUBMIT

    @property
    def amount_display(self) -> str:
        return amount_display(self.amount, self.amount_fetch_failed, self.settings.coin_denom)

    def _require(self, *steps: ClaimStep, message: str) -> KeyMaterial:
        km = self.key_material
        if km is None or self.step not in steps:
            raise ClaimStepError(message)
        return km

    # -- credential lifecycle ------------------------------------------------

    def reset(self) -> None:
        """Drop the credential and everything derived from it."""
        if self._extension is not None:
            self._extension.remove_keystore_listener(self._on_keystore_change)
            self._extension = None
        self._clear()

    async def connect(self, credential: Credential) -> KeyMaterial:
        self.reset()
        key_material = await connect(credential, self.settings.source_prefix, self.settings.hd_path)
        if isinstance(credential, ExtensionCredential):
            self._extension = credential.session
            self._extension.add_keystore_listener(self._on_keystore_change)
        self.key_material = key_material
        return key_material

    async def connect_extension(self, provider: Optional[WalletProvider]) -> KeyMaterial:
        """Connect a wallet extension on the configured chain."""
        session = ExtensionSession.from_settings(provider, self.settings)
        return await self.connect(ExtensionCredential(session=session))

    def _on_keystore_change(self) -> None:
        logger.info("claim_draft_invalidated", address=self.key_material.address if self.key_material else None)
        self._clear()

    async def handle_keystore_change(self) -> KeyMaterial:
        """Forward the wallet's account-change event and re-derive."""
        if self._extension is None:
            raise ClaimStepError("No wallet extension is connected.")
        await self._extension.handle_keystore_change()
        self.key_material = await key_material_from_extension(self._extension)
        return self.key_material

    # -- steps -----------------------------------------------------------------

    async def confirm_address(self) -> str:
        """Confirm the derived address and look up its claim amount."""
        self._require(ClaimStep.CONFIRM_ADDRESS, ClaimStep.NO_FUNDS, message="Connect a wallet first.")
        self.address_confirmed = True
        await self.load_amount()
        return self.amount_display

    async def load_amount(self) -> Optional[Decimal]:
        """Amount lookup; a failure degrades to the "Try Again Later" display."""
        km = self._require(
            ClaimStep.CONFIRM_ADDRESS,
            ClaimStep.NO_FUNDS,
            ClaimStep.ENTER_DESTINATION,
            ClaimStep.SIGN,
            ClaimStep.SUBMIT,
            message="Connect a wallet first.",
        )
        try:
            self.amount = await self.api.get_amount(km.address)
            self.amount_fetch_failed = False
        except StatusUnavailableError:
            self.amount = None
            self.amount_fetch_failed = True
        return self.amount

    def set_destination(self, dest_address: str) -> str:
        self._require(
            ClaimStep.ENTER_DESTINATION,
            ClaimStep.SIGN,
            ClaimStep.SUBMIT,
            message="No claimable amount for this address.",
        )
        dest_address = validate_address(dest_address, self.settings.dest_prefix)
        self.dest_address = dest_address
        self.signed = None
        return dest_address

    async def sign(self) -> SignedClaim:
        """Sign the claim and check the signature locally."""
        km = self._require(ClaimStep.SIGN, ClaimStep.SUBMIT, message="Please enter a valid BZE address.")
        dest_address = self.dest_address
        if dest_address is None:
            raise ClaimStepError("Please enter a valid BZE address.")

        signature = await sign_claim(
            km,
            dest_address,
            source_prefix=self.settings.source_prefix,
            dest_prefix=self.settings.dest_prefix,
        )
        verify_or_raise(self.settings.source_prefix, km.address, dest_address, km.public_key, signature)

        if self.key_material is not km or self.dest_address != dest_address:
            # Draft edited while the signer was waiting on the user.
            raise ClaimStepError("The claim changed while it was being signed. Sign again.")

        self.signed = SignedClaim(
            source_address=km.address,
            dest_address=dest_address,
            public_key=km.public_key,
            signature=signature,
        )
        return self.signed

    async def submit(self) -> ClaimReceipt:
        self._require(ClaimStep.SUBMIT, message="Sign the claim first.")
        signed = self.signed
        if signed is None:
            raise ClaimStepError("Sign the claim first.")

        await submit_claim(
            self.api,
            source_address=signed.source_address,
            dest_address=signed.dest_address,
            public_key=signed.public_key,
            signature=signed.signature,
            source_prefix=self.settings.source_prefix,
        )
        self.receipt = ClaimReceipt(
            source_address=signed.source_address,
            dest_address=signed.dest_address,
            signature=signed.signature,
        )
        return self.receipt

    async def sign_and_submit(self) -> ClaimReceipt:
        await self.sign()
        return await self.submit()

    async def fetch_status(self, source_address: Optional[str] = None) -> ClaimStatus:
        """Status for `source_address`, defaulting to the connected account."""
        if source_address is None:
            if self.key_material is None:
                raise ClaimStepError("Please enter a VDL address.")
            source_address = self.key_material.address
        return await fetch_status(self.api, source_address, self.settings.source_prefix)
