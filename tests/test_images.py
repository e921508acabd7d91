import base64

import pytest

from eduface.services.images import MAX_IMAGE_BYTES, InvalidImage, decode_data_url, sniff_content_type

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def test_decodes_data_url():
    body, content_type = decode_data_url("data:image/png;base64," + base64.b64encode(PNG).decode())
    assert body == PNG
    assert content_type == "image/png"


def test_bare_base64_is_jpeg():
    body, content_type = decode_data_url(base64.b64encode(b"jpeg-bytes").decode())
    assert body == b"jpeg-bytes"
    assert content_type == "image/jpeg"


@pytest.mark.parametrize(
    "data",
    [
        "",
        "   ",
        "data:image/png,rawbytes",
        "data:application/pdf;base64,aGk=",
        "data:image/jpeg;base64,not*base64",
    ],
)
def test_rejects_bad_input(data):
    with pytest.raises(InvalidImage):
        decode_data_url(data)


def test_rejects_oversized_image():
    data = base64.b64encode(b"\x00" * (MAX_IMAGE_BYTES + 1)).decode()
    with pytest.raises(InvalidImage, match="too large"):
        decode_data_url(data)


def test_sniff_content_type():
    assert sniff_content_type(PNG) == "image/png"
    assert sniff_content_type(b"RIFF\x00\x00\x00\x00WEBPVP8 ") == "image/webp"
    assert sniff_content_type(b"\xff\xd8\xff") == "image/jpeg"
