import base64
import binascii
import re
from typing import Tuple

from .exceptions import MalformedEncoding

DEFAULT_CONTENT_TYPE = "image/jpeg"

_DATA_URL_HEADER_RE = re.compile(r"^data:(?P<type>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^;,]*)*);base64$", re.IGNORECASE)


def encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode(text: str) -> bytes:
    """Strict base64 decode. Anything outside the base64 alphabet or badly padded is rejected."""
    try:
        return base64.b64decode(text.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedEncoding(f"Invalid base64 data: {e}")


def is_data_url(text: str) -> bool:
    return text.startswith("data:")


def to_data_url(data: bytes, content_type: str) -> str:
    return f"data:{content_type};base64,{encode(data)}"


def parse_data_url(text: str) -> Tuple[str, bytes]:
    """
    Split a `data:<type>;base64,<payload>` string into its content type and bytes.
    Bare base64 is accepted too and assumed to be JPEG.
    """
    if not is_data_url(text):
        return DEFAULT_CONTENT_TYPE, decode(text)

    if "," not in text:
        raise MalformedEncoding("Data URL has no payload")
    header, payload = text.split(",", 1)
    match = _DATA_URL_HEADER_RE.match(header)
    if not match:
        raise MalformedEncoding("Data URL must be base64 encoded")
    content_type = (match.group("type") or DEFAULT_CONTENT_TYPE).lower()
    return content_type, decode(payload)
