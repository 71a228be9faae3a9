from typing import Any

from pydantic import BaseModel, Field

class UrlRequest(BaseModel):
    """
    JSON body carrying a page URL.
    Left untyped on purpose: shape checks happen in UrlSanitizer so that a
    missing or non-string url is a 400, not a schema error.
    """
    url: Any = Field(None, description="Media page URL")
