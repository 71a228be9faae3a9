import re
from dataclasses import dataclass, field
from typing import Any, Dict, List

IMAGE_URL_PATTERN = re.compile(r"\.(jpg|jpeg|png|webp)(\?|$)", re.IGNORECASE)


def is_image_url(url: str) -> bool:
    return bool(IMAGE_URL_PATTERN.search(url))


def guess_extension(url: str) -> str:
    """Archive entry extension; plain substring match, jpg when unsure"""
    if ".png" in url:
        return "png"
    if ".webp" in url:
        return "webp"
    return "jpg"


@dataclass
class MediaSet:
    """Image and video URLs in first-seen order, exact-string de-duplicated"""
    _images: Dict[str, None] = field(default_factory=dict)
    _videos: Dict[str, None] = field(default_factory=dict)

    def add_image(self, url: str) -> None:
        self._images.setdefault(url)

    def add_video(self, url: str) -> None:
        self._videos.setdefault(url)

    @property
    def images(self) -> List[str]:
        return list(self._images)

    @property
    def videos(self) -> List[str]:
        return list(self._videos)


class MediaTreeCollector:
    """
    Harvest media URLs from a yt-dlp -J document.

    Extractors disagree on shape: single videos carry ``formats`` and
    ``thumbnails`` at the top, playlists and galleries nest them under
    ``entries``, and some bury direct image ``url`` fields in extractor
    specific objects. The walk therefore visits every dict and list in the
    tree instead of relying on a schema.
    """

    @staticmethod
    def collect(document: Any) -> MediaSet:
        media = MediaSet()
        MediaTreeCollector._walk(document, media)
        return media

    @staticmethod
    def _walk(node: Any, media: MediaSet) -> None:
        if isinstance(node, list):
            for item in node:
                MediaTreeCollector._walk(item, media)
            return

        if not isinstance(node, dict):
            return

        formats = node.get("formats")
        if isinstance(formats, list):
            for fmt in formats:
                if isinstance(fmt, dict) and isinstance(fmt.get("url"), str):
                    media.add_video(fmt["url"])

        thumbnails = node.get("thumbnails")
        if isinstance(thumbnails, list):
            for thumb in thumbnails:
                if isinstance(thumb, dict) and isinstance(thumb.get("url"), str):
                    media.add_image(thumb["url"])

        url = node.get("url")
        if isinstance(url, str) and is_image_url(url):
            media.add_image(url)

        entries = node.get("entries")
        if isinstance(entries, list):
            for entry in entries:
                MediaTreeCollector._walk(entry, media)

        for key, value in node.items():
            # entries were walked above
            if key == "entries" and isinstance(value, list):
                continue
            MediaTreeCollector._walk(value, media)
