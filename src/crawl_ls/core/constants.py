"""
Constants used throughout crawl-ls.
"""

import tempfile
from pathlib import Path

JSONRPC_VERSION = "2.0"

# JSON-RPC reserved error codes
METHOD_NOT_FOUND = -32601
INTERNAL_ERROR = -32603

DEFAULT_CACHE_DIR = Path(tempfile.gettempdir()) / "crawl-ls"
CACHE_DIR_ENV = "CRAWL_LS_CACHE_DIR"

# Extractions shorter than this are usually paywalls or JS-only pages
MIN_CONTENT_LENGTH = 200

FETCH_TIMEOUT = 15.0  # seconds

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Hosts serving media that cannot be rendered as an article
EXTERNAL_HOSTS = (
    "youtube.com",
    "youtu.be",
    "vimeo.com",
    "twitter.com",
    "x.com",
)
