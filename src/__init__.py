"""
crawl-ls - language server that turns links under the cursor into cached Markdown.

Importing this package configures logging for the whole process. The server
speaks JSON-RPC over stdout, so nothing here ever logs to stdout.
"""

import logging
import logging.handlers
import os
import sys
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# .env in the working directory may set CRAWL_LS_HOME, LOG_LEVEL, CRAWL_LS_CACHE_DIR
load_dotenv()

if "pytest" in sys.modules:
    CRAWL_LS_HOME = "/tmp/.crawl-ls"
else:
    CRAWL_LS_HOME = os.environ.get("CRAWL_LS_HOME", os.path.expanduser("~/.crawl-ls"))

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 3
QUIET_LIBRARIES = ("urllib3", "requests", "charset_normalizer")


def _file_handler(path: str, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8"
    )
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def setup_logging(level_name: Optional[str] = None) -> None:
    """
    Route every logger in the process to files under {CRAWL_LS_HOME}/logs.

    - stdout.log receives everything at the configured level
    - stderr.log receives warnings and errors only
    - with LOG_TO_CONSOLE=1, records are also echoed to stderr

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level_name: Level name taking precedence over the LOG_LEVEL variable
    """
    name = (level_name or os.environ.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, name, logging.INFO)

    log_dir = os.path.join(CRAWL_LS_HOME, "logs")
    os.makedirs(log_dir, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(level)

    root.addHandler(_file_handler(os.path.join(log_dir, "stdout.log"), level, formatter))
    root.addHandler(_file_handler(os.path.join(log_dir, "stderr.log"), logging.WARNING, formatter))

    # stdout is the protocol channel
    if os.environ.get("LOG_TO_CONSOLE", "0") == "1":
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(formatter)
        console.setLevel(level)
        root.addHandler(console)

    for library in QUIET_LIBRARIES:
        logging.getLogger(library).setLevel(logging.WARNING)

    logger.debug(f"Logging at {logging.getLevelName(level)} into {log_dir}")


setup_logging()
