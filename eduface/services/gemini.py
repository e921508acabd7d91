"""Google Gemini as the face comparison oracle."""
import asyncio
import logging

from google import genai
from google.genai import types

from eduface.config import Settings
from eduface.services.images import sniff_content_type

logger = logging.getLogger(__name__)

COMPARISON_PROMPT = """
You are a biometric security expert.
Analyze the two provided images.
Image 1 is the Reference ID Photo.
Image 2 is the Live Camera Capture.

Compare facial features, bone structure, and landmarks.
Ignore differences in lighting, background, or minor aging.
Also, check Image 2 for signs of spoofing (holding a phone up, moire patterns, flat 2D look).

Return JSON.
"""

COMPARISON_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "isSamePerson": types.Schema(
            type=types.Type.BOOLEAN,
            description="Whether the two faces belong to the same person.",
        ),
        "confidenceScore": types.Schema(
            type=types.Type.NUMBER,
            description="Confidence score between 0 and 100.",
        ),
        "analysis": types.Schema(
            type=types.Type.STRING,
            description="Brief explanation of the comparison.",
        ),
        "livenessCheck": types.Schema(
            type=types.Type.BOOLEAN,
            description="True if the second image appears to be a real person, false if it looks like "
            "a photo of a screen or printed photo.",
        ),
    },
    required=["isSamePerson", "confidenceScore", "analysis"],
)


class GeminiFaceOracle:
    def __init__(self, api_key: str, model: str):
        self.model = model
        self._client = genai.Client(api_key=api_key)

    async def compare_faces(self, reference_image: bytes, captured_image: bytes) -> str:
        response = await self._client.aio.models.generate_content(
            model=self.model,
            contents=[
                COMPARISON_PROMPT,
                types.Part.from_bytes(data=reference_image, mime_type=sniff_content_type(reference_image)),
                types.Part.from_bytes(data=captured_image, mime_type=sniff_content_type(captured_image)),
            ],
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=COMPARISON_SCHEMA,
            ),
        )
        if not response.text:
            raise RuntimeError("Empty response from Gemini")
        return response.text


class DemoFaceOracle:
    """Accepts every face. Used when no Gemini API key is configured."""

    def __init__(self, delay: float = 1.5, confidence: float = 95):
        self.delay = delay
        self.confidence = confidence

    async def compare_faces(self, reference_image: bytes, captured_image: bytes) -> dict:
        if self.delay:
            await asyncio.sleep(self.delay)
        return {"isSamePerson": True, "confidenceScore": self.confidence, "analysis": "Mock Success"}


def build_oracle(settings: Settings):
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY not set. Face verification runs in demo mode and accepts every face.")
        return DemoFaceOracle()
    return GeminiFaceOracle(settings.gemini_api_key, settings.gemini_model)
