from typing import Any, NewType, Optional

from mediarelay.core.errors import ValidationError

MAX_URL_LENGTH = 2000

ValidatedUrl = NewType("ValidatedUrl", str)


class UrlSanitizer:
    """
    Cheap structural check on caller supplied URLs.
    yt-dlp does the real validation; this only keeps obvious junk
    (and anything that is not http(s)) away from the subprocess.
    """

    @staticmethod
    def sanitize(value: Any) -> Optional[ValidatedUrl]:
        if not isinstance(value, str):
            return None

        trimmed = value.strip()
        if not trimmed:
            return None
        if not trimmed.startswith("http"):
            return None
        if len(trimmed) > MAX_URL_LENGTH:
            return None

        return ValidatedUrl(trimmed)


def require_url(value: Any, message: str = "Bad URL") -> ValidatedUrl:
    """Sanitize or raise ValidationError"""
    url = UrlSanitizer.sanitize(value)
    if url is None:
        raise ValidationError(message)
    return url
