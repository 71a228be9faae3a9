import base64
import binascii
import logging
import os
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from mediarelay.config.settings import CookieConfig
from mediarelay.utils.tempfiles import remove_file, unique_temp_file

logger = logging.getLogger(__name__)

COOKIE_FILE_PREFIX = "ytdlp-cookies-"


@dataclass
class CookieContext:
    """Extra yt-dlp arguments plus the obligation to release what backs them"""
    args: List[str] = field(default_factory=list)
    temp_path: Optional[str] = None
    _on_release: Optional[Callable[[], None]] = field(default=None, repr=False)
    _released: bool = field(default=False, repr=False)

    def release(self) -> None:
        """Idempotent; never raises."""
        if self._released:
            return
        self._released = True
        if self._on_release is not None:
            self._on_release()


class CredentialProvisioner:
    """Turn configured cookie material into a per-request CookieContext"""

    @staticmethod
    def provision(cookies: CookieConfig) -> CookieContext:
        """
        First configured source wins: file path, raw data, base64 data.
        Raw and base64 data are materialized into a temp file owned by the
        returned context; nothing is shared between requests.
        """
        if cookies.path:
            if not os.path.exists(cookies.path):
                logger.warning("Cookie file %s does not exist", cookies.path)
            return CookieContext(args=["--cookies", cookies.path])

        if cookies.data:
            return CredentialProvisioner._materialize(cookies.data)

        if cookies.data_b64:
            try:
                decoded = CredentialProvisioner._decode_b64(cookies.data_b64)
            except (binascii.Error, ValueError) as e:
                logger.warning("Ignoring undecodable base64 cookies: %s", e)
                return CookieContext()

            if not decoded:
                return CookieContext()
            return CredentialProvisioner._materialize(f"{decoded}\n")

        return CookieContext()

    @staticmethod
    def _decode_b64(data: str) -> str:
        # Env values often lose their "=" padding or pick up line breaks
        data = "".join(data.split())
        data += "=" * (-len(data) % 4)
        return base64.b64decode(data).decode("utf-8", errors="replace").strip()

    @staticmethod
    def _materialize(contents: str) -> CookieContext:
        path = unique_temp_file(COOKIE_FILE_PREFIX, suffix=".txt")
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(contents)
        except OSError:
            remove_file(path)
            raise

        return CookieContext(
            args=["--cookies", path],
            temp_path=path,
            _on_release=lambda: remove_file(path),
        )
