"""Camera captures arrive as base64 data URLs (``data:image/jpeg;base64,...``)."""
import base64
import binascii

MAX_IMAGE_BYTES = 8 * 1024 * 1024
ALLOWED_TYPES = {"image/jpeg", "image/png", "image/webp"}


class InvalidImage(ValueError):
    pass


def decode_data_url(data: str) -> tuple[bytes, str]:
    """Return (image_bytes, content_type). A bare base64 string is taken as JPEG."""
    if not data or not data.strip():
        raise InvalidImage("Image is empty")
    data = data.strip()
    content_type = "image/jpeg"
    if data.startswith("data:"):
        header, sep, payload = data.partition(",")
        if not sep or ";base64" not in header:
            raise InvalidImage("Image must be a base64 data URL")
        content_type = header[5:].split(";", 1)[0] or content_type
        data = payload
    if content_type not in ALLOWED_TYPES:
        raise InvalidImage(f"Unsupported image type: {content_type}")
    try:
        body = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidImage("Image is not valid base64")
    if not body:
        raise InvalidImage("Image is empty")
    if len(body) > MAX_IMAGE_BYTES:
        raise InvalidImage("Image is too large")
    return body, content_type


def sniff_content_type(body: bytes) -> str:
    if body.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if body[:4] == b"RIFF" and body[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
