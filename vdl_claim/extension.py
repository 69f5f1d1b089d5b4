"""
Browser-extension wallet boundary (Keplr-compatible).

The host owns the provider object and passes it in; nothing here reaches for
global state. The provider keeps the private key: this side only ever sees
the account address, its public key, and detached signatures.

Account switches inside the wallet are forwarded by the host as explicit
`handle_keystore_change()` calls. Each switch bumps the session epoch, which
makes every KeyMaterial handed out earlier unusable for signing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

import structlog

from .address import address_from_public_key, validate_address
from .config import Settings, get_settings
from .errors import (
    ExtensionUnavailableError,
    InvalidCredentialError,
    SigningFailedError,
    StaleKeyMaterialError,
    UserRejectedError,
)
from .signdoc import SignableDocument

logger = structlog.get_logger()

# Substrings wallets use when the user dismisses a request.
_REJECTION_MARKERS = ("request rejected", "rejected by user", "user rejected", "user denied")


@dataclass(frozen=True)
class ProviderKey:
    """Account exposed by the extension for a chain."""

    address: str
    public_key: bytes  # 33-byte compressed
    name: str = ""


@dataclass(frozen=True)
class ProviderSignature:
    """ADR-36 StdSignature returned by the extension."""

    public_key: bytes
    signature: str  # base64 r || s


class WalletProvider(Protocol):
    """What the host's extension object must offer."""

    async def enable(self, chain_id: str) -> None: ...

    async def get_key(self, chain_id: str) -> ProviderKey: ...

    async def sign_arbitrary(self, chain_id: str, signer: str, data: bytes) -> ProviderSignature: ...


def is_user_rejection(exc: BaseException) -> bool:
    if isinstance(exc, UserRejectedError):
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _REJECTION_MARKERS)


class ExtensionSession:
    """
    One connection to a wallet extension for a single chain.

    Not thread-safe; meant to be driven from one event loop.
    """

    def __init__(
        self,
        provider: Optional[WalletProvider],
        chain_id: str = "vidulum-1",
        prefix: str = "vdl",
    ):
        self.provider = provider
        self.chain_id = chain_id
        self.prefix = prefix
        self.epoch = 0
        self._key: Optional[ProviderKey] = None
        self._listeners: list[Callable[[], None]] = []

    @classmethod
    def from_settings(
        cls, provider: Optional[WalletProvider], settings: Optional[Settings] = None
    ) -> "ExtensionSession":
        """Session for the configured chain id and account prefix."""
        settings = settings or get_settings()
        return cls(provider, chain_id=settings.chain_id, prefix=settings.source_prefix)

    @property
    def key(self) -> Optional[ProviderKey]:
        return self._key

    def _require_provider(self) -> WalletProvider:
        if self.provider is None:
            raise ExtensionUnavailableError()
        return self.provider

    async def connect(self) -> ProviderKey:
        """
        Request account access and read the active account.

        Raises:
            ExtensionUnavailableError: no provider, or the provider failed
            UserRejectedError: the user declined access
            InvalidCredentialError: provider returned an inconsistent account
        """
        provider = self._require_provider()
        try:
            await provider.enable(self.chain_id)
            key = await provider.get_key(self.chain_id)
        except Exception as e:
            if is_user_rejection(e):
                raise UserRejectedError("Connection request rejected in the wallet.") from e
            logger.warning("extension_connect_failed", chain_id=self.chain_id, error=str(e))
            raise ExtensionUnavailableError("Failed to connect to Keplr") from e

        validate_address(key.address, self.prefix)
        if address_from_public_key(key.public_key, self.prefix) != key.address:
            raise InvalidCredentialError("Wallet returned a public key that does not match its address.")

        self._key = key
        logger.info("extension_connected", chain_id=self.chain_id, address=key.address, epoch=self.epoch)
        return key

    def disconnect(self) -> None:
        self.epoch += 1
        self._key = None

    def add_keystore_listener(self, listener: Callable[[], None]) -> None:
        """Register a callback fired when the wallet account changes."""
        self._listeners.append(listener)

    def remove_keystore_listener(self, listener: Callable[[], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def handle_keystore_change(self) -> ProviderKey:
        """
        React to the extension's keystore-change event.

        Invalidates outstanding key material, notifies listeners, then
        re-reads the active account.
        """
        self.epoch += 1
        self._key = None
        logger.info("extension_keystore_changed", chain_id=self.chain_id, epoch=self.epoch)
        for listener in list(self._listeners):
            listener()
        return await self.connect()

    async def sign_arbitrary(self, epoch: int, document: SignableDocument) -> str:
        """
        Ask the extension to sign `document`; waits for the user with no timeout.

        Raises:
            StaleKeyMaterialError: the account changed since `epoch`
            UserRejectedError: the user cancelled in the wallet
            SigningFailedError: any other provider failure, or the wallet signed
                with a key other than the connected one
        """
        key = self._key
        if epoch != self.epoch or key is None:
            raise StaleKeyMaterialError()

        provider = self._require_provider()
        try:
            response = await provider.sign_arbitrary(self.chain_id, document.signer_address, document.data)
        except Exception as e:
            if is_user_rejection(e):
                raise UserRejectedError() from e
            logger.error("extension_sign_failed", chain_id=self.chain_id, error=str(e))
            raise SigningFailedError() from e

        if epoch != self.epoch:
            # Account switched while the approval dialog was open.
            raise StaleKeyMaterialError()
        if response.public_key != key.public_key:
            logger.error("extension_signer_mismatch", chain_id=self.chain_id, address=key.address)
            raise SigningFailedError("Wallet signed with a different key than the connected account.")
        return response.signature


@dataclass(frozen=True)
class ExtensionSigner:
    """Signing capability bound to one session epoch."""

    session: ExtensionSession = field(repr=False)
    epoch: int

    async def sign(self, document: SignableDocument) -> str:
        return await self.session.sign_arbitrary(self.epoch, document)
