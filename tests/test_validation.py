import re

import pytest

from pinvault.errors import ValidationError
from pinvault.validation import (
    MAX_FILE_SIZE,
    is_valid_object_id,
    is_valid_pin,
    sanitize_filename,
    validate_file_size,
    validate_filename,
    validate_mime_type,
    validate_object_id,
    validate_pin,
)

SAFE_NAME = re.compile(r"^[A-Za-z0-9._-]+$")


@pytest.mark.parametrize("pin", ["0000", "1234", "9999"])
def test_pin_accepts_four_digits(pin):
    assert is_valid_pin(pin)
    assert validate_pin(pin) == pin


@pytest.mark.parametrize(
    "pin", ["123", "12345", "abcd", "", " 123", "12 4", None, 1234, "1234\n", "\u0661\u0662\u0663\u0664", "\uff11\uff12\uff13\uff14"]
)
def test_pin_rejects_everything_else(pin):
    assert not is_valid_pin(pin)
    with pytest.raises(ValidationError) as exc:
        validate_pin(pin, field="currentPassword")
    assert exc.value.field == "currentPassword"
    assert exc.value.status_code == 400


def test_sanitize_strips_traversal():
    out = sanitize_filename("../../etc/passwd")
    assert SAFE_NAME.match(out)
    assert "/" not in out and "\\" not in out and ".." not in out


@pytest.mark.parametrize(
    "raw",
    ["..", "a..b.txt", "C:\\Users\\me\\..\\secret.doc", "weird name (1).pdf", "ünïcødé.txt", "", "...."],
)
def test_sanitize_always_yields_safe_name(raw):
    out = sanitize_filename(raw)
    assert SAFE_NAME.match(out)
    assert ".." not in out


def test_sanitize_keeps_simple_names():
    assert sanitize_filename("report-2024_v1.pdf") == "report-2024_v1.pdf"
    assert sanitize_filename("my report.pdf") == "my_report.pdf"


def test_sanitize_truncates_but_keeps_extension():
    out = sanitize_filename("a" * 300 + ".pdf")
    assert len(out) == 255
    assert out.endswith(".pdf")


def test_object_id():
    assert is_valid_object_id("65a1b2c3d4e5f60718293a4b")
    assert is_valid_object_id("65A1B2C3D4E5F60718293A4B")
    for bad in [
        "65a1b2c3d4e5f60718293a4",
        "65a1b2c3d4e5f60718293a4b0",
        "zza1b2c3d4e5f60718293a4b",
        "65a1b2c3d4e5f60718293a4b\n",
        "",
        None,
    ]:
        assert not is_valid_object_id(bad)


def test_validate_object_id_messages():
    with pytest.raises(ValidationError, match="required"):
        validate_object_id(None)
    with pytest.raises(ValidationError, match="Invalid ID format"):
        validate_object_id("nope")


@pytest.mark.parametrize("name", ["", "   ", "../x", "a/b", "a\\b", "x" * 256, None, 42])
def test_filename_rejects(name):
    with pytest.raises(ValidationError) as exc:
        validate_filename(name)
    assert exc.value.field == "filename"


def test_filename_accepts_spaces_and_unicode():
    assert validate_filename("Vacation photo ü.jpg") == "Vacation photo ü.jpg"


@pytest.mark.parametrize("size", [1, 1024, 1.5, MAX_FILE_SIZE])
def test_size_accepts(size):
    assert validate_file_size(size) == size


@pytest.mark.parametrize("size", [0, -1, MAX_FILE_SIZE + 1, "10", True, float("nan"), None])
def test_size_rejects(size):
    with pytest.raises(ValidationError) as exc:
        validate_file_size(size)
    assert exc.value.field == "size"


@pytest.mark.parametrize("mime", ["image/png", "application/vnd.ms-excel", "text/plain", "application/x-7z-compressed"])
def test_mime_accepts(mime):
    assert validate_mime_type(mime) == mime


@pytest.mark.parametrize("mime", ["", "image", "image/", "/png", "image/png; charset=x", "text/plain/extra", "text/plain\n", None])
def test_mime_rejects(mime):
    with pytest.raises(ValidationError) as exc:
        validate_mime_type(mime)
    assert exc.value.field == "mimeType"
