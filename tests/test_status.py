"""
Tests for claim status mapping and the backend wire models.
"""

from decimal import Decimal
from typing import Optional

import pytest

from vdl_claim.models import AmountResponse, ClaimStatus, VerifyRequest
from vdl_claim.status import (
    ClaimState,
    StatusView,
    amount_display,
    claim_state,
    format_status_date,
)


class TestClaimState:
    """Tests for claim_state."""

    @pytest.mark.parametrize(
        "submit,completed,expected",
        [
            (None, None, ClaimState.UNSUBMITTED),
            ("", "", ClaimState.UNSUBMITTED),
            ("2024-01-01", None, ClaimState.SUBMITTED),
            ("2024-01-01", "2024-01-02", ClaimState.COMPLETED),
            (None, "2024-01-02", ClaimState.COMPLETED),
        ],
    )
    def test_mapping(self, submit: Optional[str], completed: Optional[str], expected: ClaimState) -> None:
        """Completion wins over submission and blanks count as missing."""
        status = ClaimStatus.model_validate({"submit": submit, "completed": completed})
        assert claim_state(status) is expected


class TestModels:
    """Tests for wire model parsing."""

    def test_status_aliases(self) -> None:
        """Backend field names map onto the status model."""
        status = ClaimStatus.model_validate(
            {
                "bzeAddress": "bze1abc",
                "amount": "12.5",
                "submit": "2024-01-01T00:00:00Z",
                "completed": None,
                "txid": "",
            }
        )
        assert status.dest_address == "bze1abc"
        assert status.amount == Decimal("12.5")
        assert status.submitted_at == "2024-01-01T00:00:00Z"
        assert status.completed_at is None
        assert status.tx_id is None

    def test_status_ignores_unknown_fields(self) -> None:
        """Extra backend fields are dropped."""
        status = ClaimStatus.model_validate({"vdlAddress": "vdl1abc", "extra": 1})
        assert status.dest_address is None

    def test_blank_amount(self) -> None:
        """Blank and missing amounts parse as None, zero stays zero."""
        assert AmountResponse.model_validate({"amount": ""}).amount is None
        assert AmountResponse.model_validate({}).amount is None
        assert AmountResponse.model_validate({"amount": 0}).amount == 0

    def test_verify_request_wire_names(self) -> None:
        """The verify body uses the backend's camelCase names."""
        request = VerifyRequest(
            bze_address="bze1abc",
            vdl_pub_key="QUJD",
            signature="c2ln",
            vdl_address="vdl1abc",
        )
        assert request.model_dump(by_alias=True) == {
            "bzeAddress": "bze1abc",
            "vdlPubKey": "QUJD",
            "signature": "c2ln",
            "vdlAddress": "vdl1abc",
        }


class TestStatusView:
    """Tests for the status page view."""

    def test_completed_view(self) -> None:
        """A paid claim shows every step done with its detail."""
        status = ClaimStatus(
            source_address="vdl1abc",
            dest_address="bze1abc",
            amount=Decimal("100"),
            submitted_at="2024-01-01T10:00:00Z",
            completed_at="2024-01-02T12:00:00Z",
            tx_id="deadbeef",
        )
        view = StatusView.from_status(status)

        assert view.state is ClaimState.COMPLETED
        assert [step.label for step in view.steps] == ["Submit", "Complete", "Claimed VDL TXID"]
        assert all(step.done for step in view.steps)
        assert view.steps[0].detail == "2024-01-01"
        assert view.steps[1].detail == "2024-01-02"
        assert view.steps[2].detail == "deadbeef"

    def test_unsubmitted_view(self) -> None:
        """An unknown claim shows no step done."""
        view = StatusView.from_status(ClaimStatus(source_address="vdl1abc"))
        assert view.state is ClaimState.UNSUBMITTED
        assert not any(step.done for step in view.steps)

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, None),
            ("", None),
            ("2024-03-05", "2024-03-05"),
            ("2024-03-05T23:10:00Z", "2024-03-05"),
            ("yesterday", "yesterday"),
        ],
    )
    def test_format_status_date(self, value: Optional[str], expected: Optional[str]) -> None:
        """Timestamps are cut to the date and other text passes through."""
        assert format_status_date(value) == expected


class TestAmountDisplay:
    """Tests for the claim amount banner."""

    def test_amount(self) -> None:
        """A positive amount is shown with the denomination."""
        assert amount_display(Decimal("1250.5"), False) == "1250.5 VDL"

    def test_zero_amount(self) -> None:
        """Zero means nothing to claim."""
        assert amount_display(Decimal("0"), False) == "No VDL Found"

    def test_no_amount(self) -> None:
        """A missing amount means nothing to claim."""
        assert amount_display(None, False) == "No VDL Found"

    def test_lookup_failed(self) -> None:
        """A failed lookup asks the user to retry."""
        assert amount_display(None, True) == "Try Again Later"
