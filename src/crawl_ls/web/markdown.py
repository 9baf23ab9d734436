"""
Module for fetching web pages and converting them to Markdown articles.

Fetching uses requests with a browser user agent. Conversion uses a
rule-based approach: BeautifulSoup strips invisible elements and page chrome,
the main content element is picked, and html2text renders it as Markdown.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional
from urllib.parse import urlparse

import html2text
import requests
import yaml
from bs4 import BeautifulSoup
from bs4.element import Comment, Tag

from src.crawl_ls.core.constants import FETCH_TIMEOUT, USER_AGENT

# Configure logging
logger = logging.getLogger(__name__)

HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml", "text/plain")
HIDDEN_CLASSES = {"hidden", "hide", "invisible", "d-none", "sr-only"}
CHROME_TAGS = ["nav", "aside", "form", "header", "footer"]


class UnsupportedContentError(requests.RequestException):
    """The server answered with something that is not an HTML page."""


@dataclass
class Article:
    """Structured result of converting a page."""
    title: str = ""
    description: str = ""
    author: str = ""
    domain: str = ""
    content: str = ""

    def front_matter(self) -> Dict[str, str]:
        """Non-empty metadata fields, in the order they are written."""
        fields = {
            "title": self.title,
            "description": self.description,
            "domain": self.domain,
            "author": self.author,
        }
        return {key: value for key, value in fields.items() if value}


def fetch_html(url: str, timeout: float = FETCH_TIMEOUT, user_agent: str = USER_AGENT) -> str:
    """
    Fetch HTML content from a URL using requests.

    Args:
        url: URL to fetch HTML from
        timeout: Connect and read timeout in seconds
        user_agent: User-Agent header; some origins reject the requests default

    Returns:
        HTML content as a string

    Raises:
        requests.RequestException: On network errors, timeouts, non-2xx
            statuses and non-HTML responses
    """
    logger.info(f"Fetching HTML from {url}")

    headers = {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
    }
    response = requests.get(url, headers=headers, timeout=timeout)

    if not 200 <= response.status_code < 300:
        raise requests.HTTPError(f"HTTP {response.status_code} for {url}", response=response)

    content_type = response.headers.get("Content-Type", "")
    mime_type = content_type.split(";", 1)[0].strip().lower()
    if mime_type and mime_type not in HTML_CONTENT_TYPES:
        raise UnsupportedContentError(f"Unsupported content type {mime_type!r} for {url}", response=response)

    # Trust an explicit charset, otherwise let requests guess from the body
    if "charset=" in content_type.lower():
        encoding = response.encoding
    else:
        encoding = response.apparent_encoding
    logger.debug(f"Response encoding: {encoding}")

    try:
        return response.content.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        logger.warning(f"Unknown encoding {encoding!r} for {url}, falling back to UTF-8")
        return response.content.decode("utf-8", errors="replace")


def _collapse(text: Optional[str]) -> str:
    return " ".join(text.split()) if text else ""


def _meta(soup: BeautifulSoup, *names: str) -> str:
    """First non-empty <meta> content matching any of the given name/property values."""
    for name in names:
        for attr in ("property", "name"):
            tag = soup.find("meta", attrs={attr: name})
            if tag and tag.get("content"):
                return _collapse(tag["content"])
    return ""


def _decompose_all(elements: Iterable) -> int:
    removed = 0
    for element in list(elements):
        # Children of an already removed element are gone too
        if getattr(element, "decomposed", False):
            continue
        if isinstance(element, Tag):
            element.decompose()
        else:
            element.extract()
        removed += 1
    return removed


def filter_invisible_elements(soup: BeautifulSoup) -> None:
    """
    Remove invisible elements and page chrome from parsed HTML in place.

    Args:
        soup: Parsed document
    """
    _decompose_all(soup.find_all(["script", "style", "noscript", "template", "iframe", "svg"]))
    _decompose_all(soup.find_all(string=lambda text: isinstance(text, Comment)))

    hidden = []
    for element in soup.find_all(True):
        style = element.get("style", "").lower().replace(" ", "")
        classes = element.get("class") or []
        if (
            "display:none" in style
            or "visibility:hidden" in style
            or element.has_attr("hidden")
            or element.get("aria-hidden") == "true"
            or element.get("type") == "hidden"
            or HIDDEN_CLASSES.intersection(classes)
        ):
            hidden.append(element)
    _decompose_all(hidden)

    # Headers and footers inside the article usually carry its title and byline
    chrome = [
        element
        for element in soup.find_all(CHROME_TAGS)
        if element.name not in ("header", "footer") or element.find_parent(["article", "main"]) is None
    ]
    removed = _decompose_all(chrome)
    logger.debug(f"Removed {len(hidden)} hidden and {removed} chrome elements")


def _converter(base_url: str) -> html2text.HTML2Text:
    converter = html2text.HTML2Text(baseurl=base_url)
    converter.ignore_links = False
    converter.ignore_images = False
    converter.ignore_tables = False
    converter.body_width = 0  # No wrapping
    converter.unicode_snob = True  # Use Unicode characters instead of ASCII approximations
    converter.inline_links = True
    converter.wrap_links = False
    converter.protect_links = False
    converter.single_line_break = False
    return converter


def extract_article(html: str, url: str) -> Article:
    """
    Convert an HTML page into an Article with Markdown content.

    Args:
        html: Raw HTML of the page
        url: Address the page was fetched from, used to absolutize links

    Returns:
        Article with metadata and the Markdown body
    """
    logger.info(f"Converting HTML ({len(html)} chars) from {url} to Markdown")

    soup = BeautifulSoup(html, "html.parser")

    title = _meta(soup, "og:title", "twitter:title")
    if not title and soup.title and soup.title.string:
        title = _collapse(soup.title.string)

    host = (urlparse(url).hostname or "").lower()
    if host.startswith("www."):
        host = host[len("www."):]

    article = Article(
        title=title,
        description=_meta(soup, "description", "og:description", "twitter:description"),
        author=_meta(soup, "author", "article:author", "twitter:creator"),
        domain=host,
    )

    filter_invisible_elements(soup)
    root = soup.find("article") or soup.find("main") or soup.body or soup

    article.content = _converter(url).handle(str(root)).strip()
    logger.info(f"Converted {url} to Markdown ({len(article.content)} chars)")
    return article


class _Quoted(str):
    """String always written in double-quoted YAML style."""


class _FrontMatterDumper(yaml.SafeDumper):
    pass


_FrontMatterDumper.add_representer(
    _Quoted,
    lambda dumper, value: dumper.represent_scalar("tag:yaml.org,2002:str", str(value), style='"'),
)


def render_document(article: Article) -> str:
    """
    Render an article as a Markdown document with optional YAML front matter.

    Values are double-quoted, with embedded quotes escaped:

        ---
        title: "The \\"best\\" page"
        domain: "example.com"
        ---
    """
    fields = {key: _Quoted(value) for key, value in article.front_matter().items()}
    if not fields:
        return f"{article.content}\n"

    front_matter = yaml.dump(
        fields,
        Dumper=_FrontMatterDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=float("inf"),
    )
    return f"---\n{front_matter}---\n\n{article.content}\n"
