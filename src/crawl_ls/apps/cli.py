"""
Command Line Interface module for crawl-ls.

Parses the command line, builds the startup context and runs the language
server on stdin/stdout until the editor closes the connection.
"""

import argparse
import logging
import sys
from typing import List, Optional

# Logging is configured in src/__init__.py when imported
from src import setup_logging
from src.crawl_ls import __version__
from src.crawl_ls.core.constants import CACHE_DIR_ENV, DEFAULT_CACHE_DIR
from src.crawl_ls.core.context import create_context
from src.crawl_ls.lsp.server import create_lsp_server

# Configure logger for this module
logger = logging.getLogger(__name__)


class CLI:
    """
    Encapsulates the CLI application logic.

    This class is responsible for:
    - Parsing command-line arguments
    - Creating the context shared by the server components
    - Running the server loop
    """

    @classmethod
    def start(cls, argv: Optional[List[str]] = None) -> int:
        """
        Start the language server.

        Returns:
            Process exit code
        """
        args = cls._parse_args(argv)

        if args.log_level:
            setup_logging(args.log_level)

        context = create_context(args.cache_dir)
        logger.info(f"Starting crawl-ls {__version__} with cache directory {context.cache_dir}")

        server = create_lsp_server(context)
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Server interrupted by user")
            server.shutdown()
        except BrokenPipeError:
            logger.info("Client went away while a response was being written")
        except Exception as e:
            logger.error(f"Server stopped unexpectedly: {e}", exc_info=True)
            return 1
        return 0

    @staticmethod
    def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
        parser = argparse.ArgumentParser(
            prog="crawl-ls",
            description="Language server resolving links under the cursor into cached Markdown pages",
        )
        parser.add_argument(
            "--cache-dir",
            help=f"Directory for rendered pages (default: ${CACHE_DIR_ENV} or {DEFAULT_CACHE_DIR})",
        )
        parser.add_argument(
            "--log-level",
            choices=["DEBUG", "INFO", "WARNING", "ERROR"],
            type=str.upper,
            help="Override the LOG_LEVEL environment variable",
        )
        # Editors commonly pass --stdio; stdio is the only transport
        parser.add_argument("--stdio", action="store_true", help=argparse.SUPPRESS)
        parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
        return parser.parse_args(argv)


def main() -> None:
    """Main entry point for the crawl-ls command."""
    sys.exit(CLI.start())


if __name__ == "__main__":
    main()
