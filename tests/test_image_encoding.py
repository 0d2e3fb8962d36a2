import pytest

from app.exceptions import MalformedEncoding
from app.image_encoding import decode, encode, is_data_url, parse_data_url, to_data_url


@pytest.mark.parametrize("data", [b"", b"\x00", b"hello", bytes(range(256)), b"\xff\xd8\xff" * 1000])
def test_round_trip(data):
    assert decode(encode(data)) == data


def test_encode_empty_is_empty_string():
    assert encode(b"") == ""


@pytest.mark.parametrize("text", ["not base64!!", "abc", "aGVsbG8=x", "ünïcode"])
def test_decode_rejects_malformed_input(text):
    with pytest.raises(MalformedEncoding):
        decode(text)


def test_data_url_round_trip():
    url = to_data_url(b"\x89PNG", "image/png")
    assert url.startswith("data:image/png;base64,")
    assert is_data_url(url)
    assert parse_data_url(url) == ("image/png", b"\x89PNG")


def test_parse_bare_base64_defaults_to_jpeg():
    assert parse_data_url(encode(b"abc")) == ("image/jpeg", b"abc")


def test_parse_data_url_with_extra_params():
    content_type, data = parse_data_url("data:image/webp;charset=binary;base64," + encode(b"xyz"))
    assert content_type == "image/webp"
    assert data == b"xyz"


@pytest.mark.parametrize("text", [
    "data:image/png;base64",
    "data:image/png," + encode(b"abc"),
    "data:image/png;base64,***",
])
def test_parse_data_url_rejects_malformed(text):
    with pytest.raises(MalformedEncoding):
        parse_data_url(text)
