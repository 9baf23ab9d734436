"""
Handler for textDocument/definition requests.

The "definition" of a link is a local Markdown rendering of the page it
points to. When the page cannot be rendered, the response is null and the
client is asked to open the URL in its default handler.
"""

import logging
from typing import Any, Dict

from src.crawl_ls.core.exceptions import InvalidParamsError
from src.crawl_ls.lsp.links import find_link
from src.crawl_ls.lsp.messages import HandlerOutput, make_request, make_response
from src.crawl_ls.lsp.models import LspLocation, LspPosition
from src.crawl_ls.web.resolver import External, LinkResolver, is_absolute_url

# Configure logging
logger = logging.getLogger(__name__)

SHOW_DOCUMENT = "window/showDocument"


def _parse_params(params: Any):
    if not isinstance(params, dict):
        raise InvalidParamsError("params must be an object")

    text_document = params.get("textDocument")
    uri = text_document.get("uri") if isinstance(text_document, dict) else None
    if not isinstance(uri, str) or not uri:
        raise InvalidParamsError("textDocument.uri is required")

    return uri, LspPosition.from_dict(params.get("position"))


def handle_definition(request: Dict[str, Any], resolver: LinkResolver) -> HandlerOutput:
    """
    Resolve the link under the cursor.

    Args:
        request: textDocument/definition request
        resolver: Pipeline turning URLs into cached renderings

    Returns:
        A Location of the cached page, or null with a window/showDocument
        request when the page must be opened externally

    Raises:
        InvalidParamsError: If the document URI or position is missing
        FileNotFoundError: If the document does not exist on disk
    """
    request_id = request.get("id")
    uri, position = _parse_params(request.get("params"))

    link = find_link(uri, position)
    if link is None:
        logger.debug(f"No link at {uri}:{position.line}:{position.character}")
        return HandlerOutput(response=make_response(request_id, None))

    logger.info(f"Resolving {link.url} from {uri}:{position.line}")
    outcome = resolver.resolve(link.url)

    if isinstance(outcome, External):
        if not is_absolute_url(outcome.url):
            # window/showDocument only accepts absolute URIs
            logger.info(f"Link target {outcome.url} is relative, nothing to open")
            return HandlerOutput(response=make_response(request_id, None))

        logger.info(f"Asking client to open {outcome.url} externally ({outcome.reason})")
        return HandlerOutput(
            response=make_response(request_id, None),
            server_request=make_request(SHOW_DOCUMENT, {"uri": outcome.url, "external": True}),
        )

    location = LspLocation.file_start(outcome.path.resolve().as_uri())
    return HandlerOutput(response=make_response(request_id, location.to_dict()))
