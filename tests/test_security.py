import pytest

from mediarelay.core.errors import ValidationError
from mediarelay.core.security import MAX_URL_LENGTH, UrlSanitizer, require_url


@pytest.mark.parametrize("value", [
    None,
    123,
    ["https://example.com"],
    {"url": "https://example.com"},
    "",
    "   ",
    "ftp://example.com/file",
    "HTTPS://example.com",
    "example.com/watch?v=1",
    "https://example.com/" + "a" * MAX_URL_LENGTH,
])
def test_sanitize_rejects(value):
    assert UrlSanitizer.sanitize(value) is None


@pytest.mark.parametrize("value, expected", [
    ("https://example.com/watch?v=1", "https://example.com/watch?v=1"),
    ("  http://example.com/a  \n", "http://example.com/a"),
    ("httpjunk", "httpjunk"),
])
def test_sanitize_returns_trimmed_url(value, expected):
    assert UrlSanitizer.sanitize(value) == expected


def test_sanitize_length_boundary():
    url = "https://x.io/" + "a" * (MAX_URL_LENGTH - len("https://x.io/"))
    assert len(url) == MAX_URL_LENGTH
    assert UrlSanitizer.sanitize(url) == url
    assert UrlSanitizer.sanitize(url + "a") is None


def test_require_url_raises_with_message():
    with pytest.raises(ValidationError) as exc_info:
        require_url("nope", message="Bad post url")
    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Bad post url"
