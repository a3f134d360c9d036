"""
Pattern-matching extractor — the default.

Works on the raw text without building a DOM, so a half-downloaded page or
unbalanced markup costs nothing. Attribute order inside a tag does not matter.
"""
from __future__ import annotations

import html as html_lib
import re
from typing import Optional

from extractors.base import HtmlExtractor, class_has_keyword, iter_tags

_TITLE_RE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)


class RegexExtractor(HtmlExtractor):

    @property
    def name(self) -> str:
        return "regex"

    def extract_title(self, html: str) -> str:
        og = _og_content(html, "og:title")
        if og:
            return og.strip()
        m = _TITLE_RE.search(html or "")
        return html_lib.unescape(m.group(1)).strip() if m else ""

    def find_image(self, html: str) -> Optional[str]:
        og = _og_content(html, "og:image")
        if og:
            return og.strip()
        for attrs in iter_tags(html, "img"):
            src = attrs.get("src", "").strip()
            if src and class_has_keyword(attrs.get("class", "")):
                return src
        return None


def _og_content(html: str, prop: str) -> Optional[str]:
    for attrs in iter_tags(html, "meta"):
        if attrs.get("property", "").lower() == prop and attrs.get("content"):
            return attrs["content"]
    return None
