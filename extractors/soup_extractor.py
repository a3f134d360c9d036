"""
BeautifulSoup extractor.

Same contract as RegexExtractor, backed by a real (lenient) HTML parser.
Select it with HTML_EXTRACTOR=soup.
"""
from __future__ import annotations

import logging
from typing import Optional

from bs4 import BeautifulSoup

from extractors.base import HtmlExtractor, class_has_keyword

logger = logging.getLogger(__name__)


class SoupExtractor(HtmlExtractor):

    @property
    def name(self) -> str:
        return "soup"

    def extract_title(self, html: str) -> str:
        soup = _parse(html)
        if soup is None:
            return ""
        og = soup.find("meta", attrs={"property": "og:title"})
        if og and og.get("content"):
            return og["content"].strip()
        if soup.title and soup.title.string:
            return soup.title.string.strip()
        return ""

    def find_image(self, html: str) -> Optional[str]:
        soup = _parse(html)
        if soup is None:
            return None
        og = soup.find("meta", attrs={"property": "og:image"})
        if og and og.get("content"):
            return og["content"].strip()
        for img in soup.find_all("img", src=True):
            # bs4 returns class as a list of names
            classes = " ".join(img.get("class") or [])
            if img["src"].strip() and class_has_keyword(classes):
                return img["src"].strip()
        return None


def _parse(html: str) -> Optional[BeautifulSoup]:
    try:
        return BeautifulSoup(html or "", "html.parser")
    except Exception as exc:
        logger.warning("HTML parse failed: %s", exc)
        return None
