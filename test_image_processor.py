import base64

from utils import split_data_uri, decode_base64_payload, save_screenshot, describe_image


def test_split_data_uri_returns_media_type_and_payload():
    assert split_data_uri("data:image/png;base64,AAAA") == ("image/png", "AAAA")
    assert split_data_uri("data:image/jpeg;base64,/9j/") == ("image/jpeg", "/9j/")


def test_split_data_uri_without_data_prefix():
    assert split_data_uri("base64,AAAA") == (None, "AAAA")


def test_split_data_uri_without_marker():
    assert split_data_uri("Screenshot failed: no window") is None
    assert split_data_uri("") is None


def test_save_screenshot_writes_exact_decoded_bytes(tmp_path):
    output = tmp_path / "shots" / "screenshot.png"
    data = save_screenshot("AAAA", str(output))

    assert data == base64.b64decode("AAAA") == b"\x00\x00\x00"
    assert output.read_bytes() == data


def test_decode_tolerates_missing_padding_and_whitespace():
    assert decode_base64_payload("aGVsbG8") == b"hello"
    assert decode_base64_payload("aGVs\nbG8=") == b"hello"


def test_decode_drops_stray_characters_and_dangling_tail():
    assert decode_base64_payload("AAAAA") == b"\x00\x00\x00"
    assert decode_base64_payload("QUJD,X") == b"ABC"
    assert decode_base64_payload("QUJD\x00!!") == b"ABC"


def test_decode_stops_at_padding_and_accepts_urlsafe():
    assert decode_base64_payload("aGk=trailing") == b"hi"
    assert decode_base64_payload("-_-_") == base64.b64decode("+/+/")
    assert decode_base64_payload("") == b""


def test_describe_image_reads_png(png_bytes):
    info = describe_image(png_bytes)
    assert info["format"] == "PNG"
    assert (info["width"], info["height"]) == (3, 2)
    assert info["bytes"] == len(png_bytes)


def test_describe_image_returns_none_for_garbage():
    assert describe_image(b"\x00\x00\x00") is None
