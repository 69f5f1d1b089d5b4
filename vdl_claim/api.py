"""
Claim backend client.

Only addresses, the public key and signatures are ever sent. The backend
repeats the signature check on /verify and is authoritative for amounts,
status and payouts.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

import httpx
import structlog
from pydantic import ValidationError

from .errors import StatusUnavailableError, SubmissionFailedError
from .models import AmountResponse, ClaimStatus, VerifyRequest, VerifyResponse

logger = structlog.get_logger()


@dataclass
class ClaimApiConfig:
    """Claim backend configuration."""

    base_url: str = "https://claim.vidulum.app/api"
    timeout: float = 20.0


class ClaimApiClient:
    """Async client for the claim backend."""

    def __init__(self, config: ClaimApiConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url.rstrip("/"),
                timeout=self.config.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ClaimApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_json(self, path: str) -> Any:
        client = await self._get_client()
        response = await client.get(path)
        response.raise_for_status()
        return response.json()

    async def get_amount(self, vdl_address: str) -> Optional[Decimal]:
        """
        Claimable amount for a source address (None/0 when nothing is eligible).

        Raises:
            StatusUnavailableError: network failure or malformed response
        """
        try:
            data = await self._get_json(f"/amount/{vdl_address}")
            return AmountResponse.model_validate(data).amount
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.warning("amount_lookup_failed", address=vdl_address, error=str(e))
            raise StatusUnavailableError("Failed to fetch amount. Try again later.") from e

    async def get_status(self, vdl_address: str) -> ClaimStatus:
        """
        Raises:
            StatusUnavailableError: network failure or malformed response
        """
        try:
            data = await self._get_json(f"/status/{vdl_address}")
            if not isinstance(data, dict):
                raise ValueError("Invalid response from /status endpoint")
            status = ClaimStatus.model_validate(data)
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.warning("status_lookup_failed", address=vdl_address, error=str(e))
            raise StatusUnavailableError(
                "Error fetching status. Please ensure the VDL address is correct."
            ) from e
        return status.model_copy(update={"source_address": vdl_address})

    async def verify(self, request: VerifyRequest) -> None:
        """
        Submit a locally verified claim for server-side verification.

        Raises:
            SubmissionFailedError: backend returned an error or was unreachable
        """
        client = await self._get_client()
        try:
            response = await client.post("/verify", json=request.model_dump(by_alias=True))
            result = VerifyResponse.model_validate(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.error("claim_submission_failed", address=request.vdl_address, error=str(e))
            raise SubmissionFailedError() from e

        if result.error or response.is_error:
            logger.warning(
                "claim_rejected",
                address=request.vdl_address,
                status_code=response.status_code,
                error=result.error,
            )
            raise SubmissionFailedError(result.error)

        logger.info("claim_submitted", address=request.vdl_address, bze_address=request.bze_address)
