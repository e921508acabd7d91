import asyncio

import pytest

from eduface.checkin.oracle import VerificationAdapter

from conftest import ScriptedOracle, match


async def compare(answer, threshold=80.0, timeout=5.0):
    adapter = VerificationAdapter(ScriptedOracle(answer), threshold=threshold, timeout=timeout)
    return await adapter.compare(b"reference", b"capture")


@pytest.mark.parametrize(
    "confidence, expected",
    [(80, False), (80.0001, True), (81, True), (79, False), (100, True)],
)
async def test_threshold_is_exclusive(confidence, expected):
    result = await compare(match(confidence=confidence))
    assert result.is_match is expected
    assert result.failed is False
    assert result.confidence == confidence


async def test_negative_judgment_never_matches():
    result = await compare(match(confidence=99, same=False, analysis="Different jawline"))
    assert result.is_match is False
    assert result.failed is False
    assert result.explanation == "Different jawline"


async def test_json_text_payload():
    result = await compare('{"isSamePerson": true, "confidenceScore": 92, "analysis": "ok"}')
    assert result.is_match
    assert result.confidence == 92


async def test_snake_case_payload():
    result = await compare({"same_identity": True, "confidence": 90, "explanation": "ok"})
    assert result.is_match


async def test_oracle_exception_is_a_failure():
    result = await compare(ConnectionError("upstream reset"))
    assert result.is_match is False
    assert result.failed is True
    assert "upstream reset" in result.explanation


async def test_timeout_is_a_failure():
    class SlowOracle:
        async def compare_faces(self, reference_image, captured_image):
            await asyncio.sleep(1)
            return match()

    adapter = VerificationAdapter(SlowOracle(), timeout=0.01)
    result = await adapter.compare(b"reference", b"capture")
    assert result.failed
    assert "timed out" in result.explanation


@pytest.mark.parametrize("payload", [None, "", "   "])
async def test_empty_payload_is_a_failure(payload):
    result = await compare(payload)
    assert result.failed
    assert result.explanation == "Empty response from verification service"


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        {"confidenceScore": 95},
        {"isSamePerson": True},
        {"isSamePerson": "yes", "confidenceScore": 95},
        {"isSamePerson": True, "confidenceScore": 150},
        {"isSamePerson": True, "confidenceScore": -1},
    ],
)
async def test_malformed_payload_is_a_failure(payload):
    result = await compare(payload)
    assert result.is_match is False
    assert result.failed
    assert result.explanation.startswith("Malformed response")


async def test_adapter_passes_images_through_in_order():
    oracle = ScriptedOracle(match())
    await VerificationAdapter(oracle).compare(b"ref", b"live")
    assert oracle.calls == [(b"ref", b"live")]
