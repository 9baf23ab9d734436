"""
Handler for the initialize request.
"""

import logging
from typing import Any, Dict

from src.crawl_ls.lsp.messages import HandlerOutput, make_response

# Configure logging
logger = logging.getLogger(__name__)


def handle_initialize(request: Dict[str, Any]) -> HandlerOutput:
    """Answer with the server capabilities; only go-to-definition is offered."""
    params = request.get("params")
    client_info = params.get("clientInfo") if isinstance(params, dict) else None
    client_name = client_info.get("name") if isinstance(client_info, dict) else None
    logger.info(f"Initializing for client {client_name or 'unknown'}")

    result = {
        "capabilities": {
            "definitionProvider": True,
        },
    }
    return HandlerOutput(response=make_response(request.get("id"), result))
