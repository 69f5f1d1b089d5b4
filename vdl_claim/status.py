"""
Claim lifecycle as reported by the backend.

    UNSUBMITTED -> SUBMITTED -> COMPLETED

The state is read off the backend's timestamps; nothing here moves a claim
forward. A failed lookup is StatusUnavailableError, not a state.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from .models import ClaimStatus


class ClaimState(str, Enum):
    UNSUBMITTED = "unsubmitted"
    SUBMITTED = "submitted"
    COMPLETED = "completed"


def claim_state(status: ClaimStatus) -> ClaimState:
    # A completion timestamp implies the claim was submitted, even if the
    # backend omitted the submit field.
    if status.completed_at:
        return ClaimState.COMPLETED
    if status.submitted_at:
        return ClaimState.SUBMITTED
    return ClaimState.UNSUBMITTED


def format_status_date(value: Optional[str]) -> Optional[str]:
    """Render an ISO timestamp as a date; pass other strings through unchanged."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(value), datetime.min.time())
        except ValueError:
            return value
    return parsed.date().isoformat()


@dataclass(frozen=True)
class StatusStep:
    label: str
    done: bool
    detail: Optional[str] = None


@dataclass(frozen=True)
class StatusView:
    """What the status page shows for one source address."""

    source_address: str
    dest_address: Optional[str]
    amount: Optional[Decimal]
    state: ClaimState
    steps: tuple[StatusStep, ...]

    @classmethod
    def from_status(cls, status: ClaimStatus) -> "StatusView":
        steps = (
            StatusStep("Submit", bool(status.submitted_at), format_status_date(status.submitted_at)),
            StatusStep("Complete", bool(status.completed_at), format_status_date(status.completed_at)),
            StatusStep("Claimed VDL TXID", bool(status.tx_id), status.tx_id),
        )
        return cls(
            source_address=status.source_address,
            dest_address=status.dest_address,
            amount=status.amount,
            state=claim_state(status),
            steps=steps,
        )


def amount_display(amount: Optional[Decimal], fetch_failed: bool, denom: str = "VDL") -> str:
    """
    Claim amount banner text.

    The backend does not distinguish "nothing eligible" from "unknown address".
    """
    if amount:
        return f"{amount} {denom}"
    if fetch_failed:
        return "Try Again Later"
    return f"No {denom} Found"
