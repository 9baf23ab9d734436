"""
Context module providing the startup configuration shared by the server components.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from src.crawl_ls.core.constants import (
    CACHE_DIR_ENV,
    DEFAULT_CACHE_DIR,
    FETCH_TIMEOUT,
    MIN_CONTENT_LENGTH,
    USER_AGENT,
)


@dataclass(frozen=True)
class LspContext:
    """
    Process-wide configuration, created once at startup and never mutated.

    Components that touch the cache or the network receive it explicitly.
    """
    cache_dir: Path = field(default=DEFAULT_CACHE_DIR)
    fetch_timeout: float = FETCH_TIMEOUT
    user_agent: str = USER_AGENT
    min_content_length: int = MIN_CONTENT_LENGTH

    def __post_init__(self):
        # Accept plain strings from argparse or the environment
        object.__setattr__(self, "cache_dir", Path(self.cache_dir).expanduser())


def create_context(cache_dir: Optional[str] = None) -> LspContext:
    """Build the context from an explicit cache directory, the environment, or the default."""
    resolved = cache_dir or os.environ.get(CACHE_DIR_ENV) or DEFAULT_CACHE_DIR
    return LspContext(cache_dir=Path(resolved))
