"""
Pydantic models for the claim backend wire format.
"""

from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# Backends send "" for unset fields.
OptionalText = Annotated[Optional[str], BeforeValidator(_blank_to_none)]
OptionalAmount = Annotated[Optional[Decimal], BeforeValidator(_blank_to_none)]


# ============================================================================
# Amount
# ============================================================================


class AmountResponse(BaseModel):
    """GET /amount/{vdlAddress}"""

    amount: OptionalAmount = Field(None, description="Claimable amount (null or 0 when nothing is eligible)")


# ============================================================================
# Status
# ============================================================================


class ClaimStatus(BaseModel):
    """
    GET /status/{vdlAddress}

    Written only by the backend; the client reads and displays it.
    """

    model_config = ConfigDict(populate_by_name=True)

    source_address: str = Field("", description="VDL address the status was requested for")
    dest_address: OptionalText = Field(None, alias="bzeAddress", description="BZE payout address")
    amount: OptionalAmount = Field(None, description="Claimed amount")
    submitted_at: OptionalText = Field(None, alias="submit", description="When the claim was accepted")
    completed_at: OptionalText = Field(None, alias="completed", description="When the payout was sent")
    tx_id: OptionalText = Field(None, alias="txid", description="Payout transaction id")


# ============================================================================
# Verify (claim submission)
# ============================================================================


class VerifyRequest(BaseModel):
    """POST /verify"""

    bze_address: str = Field(..., alias="bzeAddress", description="Destination BZE address")
    vdl_pub_key: str = Field(..., alias="vdlPubKey", description="Compressed secp256k1 public key (base64)")
    signature: str = Field(..., description="ADR-36 signature (base64)")
    vdl_address: str = Field(..., alias="vdlAddress", description="Source VDL address")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "bzeAddress": "bze1...",
                    "vdlPubKey": "A1b2...",
                    "signature": "c3d4...",
                    "vdlAddress": "vdl1...",
                }
            ]
        },
    )


class VerifyResponse(BaseModel):
    """Backend verdict; any error string means the claim was rejected."""

    error: Optional[str] = Field(None, description="Rejection reason, null on success")
