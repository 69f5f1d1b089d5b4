"""
VDL Claim

Proves ownership of a Vidulum (VDL) address and binds it to a BeeZee (BZE)
payout address with an ADR-36 signature, checked locally before it is sent
to the claim backend.

Usage:
    # Show the address and claim amount for a private key
    vdl-claim address

    # Sign and submit a claim from a mnemonic
    vdl-claim claim --mnemonic --bze-address bze1...

    # Check claim status
    vdl-claim status vdl1...
"""

__version__ = "0.1.0"

from .api import ClaimApiClient, ClaimApiConfig
from .config import Settings, get_settings
from .credentials import (
    ExtensionCredential,
    KeyMaterial,
    MnemonicCredential,
    PrivateKeyCredential,
    connect,
)
from .errors import (
    ClaimError,
    ClaimStepError,
    ExtensionUnavailableError,
    InvalidCredentialError,
    SignatureInvalidError,
    SigningFailedError,
    StaleKeyMaterialError,
    StatusUnavailableError,
    SubmissionFailedError,
    UserRejectedError,
)
from .extension import ExtensionSession, WalletProvider
from .flow import (
    ClaimSession,
    ClaimStep,
    derive_from_extension,
    derive_from_mnemonic,
    derive_from_private_key,
    fetch_status,
    sign_claim,
    submit_claim,
)
from .models import ClaimStatus
from .signdoc import SignableDocument, build_sign_doc
from .status import ClaimState, claim_state
from .verify import verify_adr36_signature

__all__ = [
    "__version__",
    "ClaimApiClient",
    "ClaimApiConfig",
    "Settings",
    "get_settings",
    "ExtensionCredential",
    "KeyMaterial",
    "MnemonicCredential",
    "PrivateKeyCredential",
    "connect",
    "ClaimError",
    "ClaimStepError",
    "ExtensionUnavailableError",
    "InvalidCredentialError",
    "SignatureInvalidError",
    "SigningFailedError",
    "StaleKeyMaterialError",
    "StatusUnavailableError",
    "SubmissionFailedError",
    "UserRejectedError",
    "ExtensionSession",
    "WalletProvider",
    "ClaimSession",
    "ClaimStep",
    "derive_from_extension",
    "derive_from_mnemonic",
    "derive_from_private_key",
    "fetch_status",
    "sign_claim",
    "submit_claim",
    "ClaimStatus",
    "SignableDocument",
    "build_sign_doc",
    "ClaimState",
    "claim_state",
    "verify_adr36_signature",
]
