"""Face comparison adapter: strict response schema, match threshold, timeout."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

MATCH_THRESHOLD = 80.0
DEFAULT_TIMEOUT_SECONDS = 30.0


class FaceComparisonOracle(Protocol):
    """External capability comparing a reference photo with a live capture.

    Implementations return the raw payload (JSON text or a mapping) and may
    raise on transport or format errors.
    """

    async def compare_faces(self, reference_image: bytes, captured_image: bytes) -> str | dict[str, Any]:
        ...


class OracleResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    same_identity: bool = Field(
        validation_alias=AliasChoices("isSamePerson", "same_identity", "sameIdentity"),
        strict=True,
    )
    confidence: float = Field(
        ge=0,
        le=100,
        validation_alias=AliasChoices("confidenceScore", "confidence"),
    )
    explanation: str = Field(
        default="",
        validation_alias=AliasChoices("analysis", "explanation"),
    )
    liveness_check: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("livenessCheck", "liveness_check"),
    )


class VerificationResult(BaseModel):
    is_match: bool
    confidence: float = 0.0
    explanation: str = ""
    failed: bool = False

    @classmethod
    def failure(cls, explanation: str) -> "VerificationResult":
        return cls(is_match=False, confidence=0.0, explanation=explanation, failed=True)


class VerificationAdapter:
    """Wraps a :class:`FaceComparisonOracle` and normalizes what it says.

    The oracle's same-person judgment is advisory: a comparison only counts as a
    match when it is positive *and* the confidence is strictly above the
    threshold. Every oracle failure (exception, timeout, empty or malformed
    payload) comes back as ``failed=True``; nothing is retried or cached here.
    """

    def __init__(
        self,
        oracle: FaceComparisonOracle,
        *,
        threshold: float = MATCH_THRESHOLD,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.oracle = oracle
        self.threshold = threshold
        self.timeout = timeout

    async def compare(self, reference_image: bytes, captured_image: bytes) -> VerificationResult:
        try:
            raw = await asyncio.wait_for(
                self.oracle.compare_faces(reference_image, captured_image),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Face comparison timed out after {self.timeout}s")
            return VerificationResult.failure(f"Verification timed out after {self.timeout:g} seconds.")
        except Exception as e:
            logger.error(f"Face comparison failed: {e!r}")
            return VerificationResult.failure(str(e) or "System error during verification. Please try again.")

        try:
            response = self.parse(raw)
        except ValueError as e:
            logger.error(f"Rejected face comparison payload: {e}")
            return VerificationResult.failure(str(e))

        return VerificationResult(
            is_match=response.same_identity and response.confidence > self.threshold,
            confidence=response.confidence,
            explanation=response.explanation,
        )

    @staticmethod
    def parse(raw: str | bytes | dict[str, Any] | None) -> OracleResponse:
        """Validate an oracle payload, raising ValueError when it is unusable."""
        if raw is None or (isinstance(raw, (str, bytes)) and not raw.strip()):
            raise ValueError("Empty response from verification service")
        try:
            if isinstance(raw, (str, bytes)):
                return OracleResponse.model_validate_json(raw)
            return OracleResponse.model_validate(raw)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) or "payload" for err in e.errors())
            raise ValueError(f"Malformed response from verification service ({fields})") from e
