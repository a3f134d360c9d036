"""
Central configuration — reads from .env file.

Every module reads config.X at call time, so tests (and anything else) can
monkeypatch a value without re-importing the module that uses it.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# ── Target site ───────────────────────────────────────────────────────────────
# Domain used when the request has no ?site= parameter. Search results whose
# hostname does not contain the requested site are discarded.
DEFAULT_SITE: str = os.getenv("DEFAULT_SITE", "bringo.ma").strip() or "bringo.ma"

# ── Search backend ────────────────────────────────────────────────────────────
# duckduckgo → DuckDuckGo HTML results page (no key needed)
SEARCH_BACKEND: str = os.getenv("SEARCH_BACKEND", "duckduckgo")

# ── HTML extraction ───────────────────────────────────────────────────────────
# regex → tolerant tag/attribute pattern matching (default, no parser needed)
# soup  → BeautifulSoup with the stdlib html.parser
HTML_EXTRACTOR: str = os.getenv("HTML_EXTRACTOR", "regex")

# ── Matching ──────────────────────────────────────────────────────────────────
# Minimum title similarity for the name strategy to accept a candidate.
NAME_MATCH_THRESHOLD: float = float(os.getenv("NAME_MATCH_THRESHOLD", "0.6"))
# How many search results are fetched per strategy (in engine rank order).
MAX_CANDIDATES: int = int(os.getenv("MAX_CANDIDATES", "8"))

# ── Outbound HTTP ─────────────────────────────────────────────────────────────
# Total budget in seconds for each outbound call (search page or candidate page).
FETCH_TIMEOUT: float = float(os.getenv("FETCH_TIMEOUT", "15"))
USER_AGENT: str = os.getenv("USER_AGENT", "Mozilla/5.0 (compatible; Stockify/1.1)")

# ── Inbound HTTP ──────────────────────────────────────────────────────────────
SERVER_HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT: int = int(os.getenv("SERVER_PORT", "8080"))
# Cache-Control max-age for every JSON response (one week).
CACHE_MAX_AGE: int = int(os.getenv("CACHE_MAX_AGE", "604800"))

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
