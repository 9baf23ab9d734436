"""
Link resolution pipeline.

Turns a URL into one of three outcomes:
- Cached: a rendering already exists on disk, nothing is fetched
- Fetched: the page was downloaded, converted and stored
- External: the editor should open the URL itself

Expected failures (denylisted hosts, network errors, thin extractions) are
outcomes, not exceptions.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union
from urllib.parse import ParseResult, urlparse

import requests

from src.crawl_ls.core.constants import EXTERNAL_HOSTS
from src.crawl_ls.core.context import LspContext
from src.crawl_ls.web.cache import ContentCache
from src.crawl_ls.web.markdown import Article, extract_article, fetch_html, render_document

# Configure logging
logger = logging.getLogger(__name__)

FETCHABLE_SCHEMES = ("http", "https")
SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")

# External reasons, used for logging
DENYLISTED = "denylisted"
UNSUPPORTED_SCHEME = "unsupported-scheme"
FETCH_FAILED = "fetch-failed"
TOO_SHORT = "too-short"
MALFORMED = "malformed"


@dataclass(frozen=True)
class Cached:
    path: Path


@dataclass(frozen=True)
class Fetched:
    path: Path


@dataclass(frozen=True)
class External:
    url: str
    reason: str


FetchOutcome = Union[Cached, Fetched, External]


def _split_url(url: str) -> Optional[ParseResult]:
    # urlparse rejects some hosts, e.g. an unterminated "[" IPv6 literal
    try:
        return urlparse(url)
    except ValueError:
        return None


def is_external_url(url: str) -> bool:
    """True if the URL's host is, or is a subdomain of, a denylisted media host."""
    parsed = _split_url(url)
    if parsed is None:
        return False
    host = (parsed.hostname or "").lower().rstrip(".")
    return any(host == blocked or host.endswith(f".{blocked}") for blocked in EXTERNAL_HOSTS)


def is_absolute_url(url: str) -> bool:
    """True if the URL starts with a scheme, so a client can open it on its own."""
    return SCHEME_PATTERN.match(url) is not None


def is_fetchable_url(url: str) -> bool:
    parsed = _split_url(url)
    return parsed is not None and parsed.scheme.lower() in FETCHABLE_SCHEMES and bool(parsed.netloc)


class LinkResolver:
    """Resolves URLs to cached Markdown renderings."""

    def __init__(
        self,
        context: LspContext,
        cache: Optional[ContentCache] = None,
        fetch: Callable[..., str] = fetch_html,
        convert: Callable[[str, str], Article] = extract_article,
    ):
        """
        Initialize the resolver.

        Args:
            context: Startup configuration (cache directory, fetch timeout, user agent)
            cache: Cache to use; defaults to one rooted at context.cache_dir
            fetch: URL -> HTML transform
            convert: (HTML, URL) -> Article transform
        """
        self._context = context
        self._cache = cache or ContentCache(context.cache_dir)
        self._fetch = fetch
        self._convert = convert

    @property
    def cache(self) -> ContentCache:
        return self._cache

    def resolve(self, url: str) -> FetchOutcome:
        """
        Resolve a URL.

        Args:
            url: Absolute URL taken from the document

        Returns:
            Cached, Fetched or External
        """
        if _split_url(url) is None:
            logger.info(f"Not fetching {url}: malformed URL")
            return External(url, MALFORMED)

        if not is_fetchable_url(url):
            logger.info(f"Not fetching {url}: unsupported scheme")
            return External(url, UNSUPPORTED_SCHEME)

        if is_external_url(url):
            logger.info(f"Not fetching {url}: host is on the external list")
            return External(url, DENYLISTED)

        # First caller fetches; later callers find the stored file
        with self._cache.lock(url):
            cached = self._cache.lookup(url)
            if cached is not None:
                return Cached(cached)
            return self._fetch_and_store(url)

    def _fetch_and_store(self, url: str) -> FetchOutcome:
        try:
            html = self._fetch(
                url,
                timeout=self._context.fetch_timeout,
                user_agent=self._context.user_agent,
            )
        except requests.RequestException as e:
            logger.warning(f"Fetching {url} failed: {e}")
            return External(url, FETCH_FAILED)

        try:
            article = self._convert(html, url)
        except Exception as e:
            logger.error(f"Converting {url} to Markdown failed: {e}", exc_info=True)
            return External(url, FETCH_FAILED)

        if len(article.content) < self._context.min_content_length:
            logger.info(
                f"Extraction of {url} is too short ({len(article.content)} < "
                f"{self._context.min_content_length} chars), opening externally"
            )
            return External(url, TOO_SHORT)

        path = self._cache.store(url, render_document(article))
        return Fetched(path)
