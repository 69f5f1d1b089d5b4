"""
Error taxonomy for the claim flow.

Every error is terminal for the step that raised it and carries a
`user_message` that the host can show as-is. Nothing here is retried
automatically.
"""


class ClaimError(Exception):
    """Base class for claim flow failures."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        self.user_message = message or self.default_message
        super().__init__(self.user_message)


class InvalidCredentialError(ClaimError):
    """Malformed private key, mnemonic or address."""

    default_message = "Invalid credential."


class StaleKeyMaterialError(InvalidCredentialError):
    """Key material was derived before an account change and must be re-derived."""

    default_message = "Wallet account changed. Reconnect before signing."


class ExtensionUnavailableError(ClaimError):
    """No wallet extension provider was detected."""

    default_message = "Keplr extension is not installed"


class UserRejectedError(ClaimError):
    """The user cancelled the request in the external signer."""

    default_message = "Request rejected in the wallet."


class SigningFailedError(ClaimError):
    """The signer failed for a reason other than user cancellation."""

    default_message = "Failed to sign the message."


class SignatureInvalidError(ClaimError):
    """Local verification rejected the signature."""

    default_message = "Signature verification failed."

    def __init__(self, message: str | None = None, *, reason: str = "signature"):
        # "signature" or "pubkey_mismatch"
        self.reason = reason
        super().__init__(message)


class SubmissionFailedError(ClaimError):
    """The backend rejected the claim or could not be reached."""

    default_message = "Error while trying to verifying your claim."


class StatusUnavailableError(ClaimError):
    """Amount or status lookup failed. Transient."""

    default_message = "Failed to fetch status. Try again later."


class ClaimStepError(ClaimError):
    """A step was invoked before the steps it depends on completed."""

    default_message = "Complete the previous step first."
