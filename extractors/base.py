"""
Abstract base for HTML extractors.

Pages come from an arbitrary retail site and are treated as untrusted,
possibly broken markup. Extractors never raise: a missing title is "" and a
missing image is None, which the strategies read as "try the next candidate".
"""
from __future__ import annotations

import html as html_lib
import re
from abc import ABC, abstractmethod
from typing import Iterator, Optional
from urllib.parse import urljoin

import config

# An <img> is a product picture when its class mentions one of these.
IMAGE_CLASS_KEYWORDS = ("product", "main", "image", "photo", "picture")

_ATTR_RE = re.compile(
    r"""([^\s"'<>/=]+)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""",
)


def iter_tags(html: str, tag: str) -> Iterator[dict[str, str]]:
    """
    Yield the attributes of every <tag ...> in document order.
    Attribute names are lower-cased, values are entity-unescaped. A ">" inside
    a quoted value does not end the tag.
    """
    pattern = re.compile(rf"""<{tag}\b((?:"[^"]*"|'[^']*'|[^'">])*)>""", re.IGNORECASE)
    for match in pattern.finditer(html or ""):
        attrs: dict[str, str] = {}
        for name, dq, sq, bare in _ATTR_RE.findall(match.group(1)):
            attrs.setdefault(name.lower(), html_lib.unescape(dq or sq or bare))
        yield attrs


def class_has_keyword(class_attr: str) -> bool:
    value = (class_attr or "").lower()
    return any(keyword in value for keyword in IMAGE_CLASS_KEYWORDS)


def absolutize(page_url: str, image_url: str) -> str:
    """
    Resolve image_url against the page it was found on.

    Absolute and protocol-relative (//cdn...) URLs are returned unchanged;
    /img/x.jpg on https://bringo.ma/p/123 becomes https://bringo.ma/img/x.jpg.
    """
    if image_url.startswith("//") or re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*:", image_url):
        return image_url
    try:
        return urljoin(page_url, image_url)
    except ValueError:
        return image_url


class HtmlExtractor(ABC):
    """All extractors must implement this interface."""

    @abstractmethod
    def extract_title(self, html: str) -> str:
        """og:title, else <title>, else ""."""
        ...

    @abstractmethod
    def find_image(self, html: str) -> Optional[str]:
        """Raw og:image or product <img> src as written in the page, or None."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    def extract_image(self, page_url: str, html: str) -> Optional[str]:
        """Product image URL, absolute where the page gave a relative one."""
        raw = self.find_image(html)
        if not raw:
            return None
        return absolutize(page_url, raw)


def get_extractor(kind: Optional[str] = None) -> HtmlExtractor:
    """Build the extractor named by config.HTML_EXTRACTOR (or *kind*)."""
    mode = (kind or config.HTML_EXTRACTOR).lower()
    if mode == "regex":
        from extractors.regex_extractor import RegexExtractor
        return RegexExtractor()
    if mode == "soup":
        from extractors.soup_extractor import SoupExtractor
        return SoupExtractor()
    raise RuntimeError(f"Unknown HTML_EXTRACTOR '{mode}' (expected regex or soup)")
