# Copyright DataStax, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

import logging
from typing import Any

import httpx

from esscroll.exceptions import _TimeoutContext

logger = logging.getLogger(__name__)

# leading characters of a scroll id kept when logging it
SCROLL_ID_LOG_PREFIX_LENGTH = 8
# response bodies are cut to this length in the debug log
RESPONSE_LOG_MAX_LENGTH = 2000


class HttpMethod:
    POST = "POST"


def abbreviate_scroll_id(scroll_id: str) -> str:
    """
    Shorten a scroll id for logging: scroll ids are long opaque tokens, and
    whoever holds one can read the rest of the scroll.

    Example:
        >>> abbreviate_scroll_id("c2Nhbjs1OzE6ZHhNdFNhZ0lRbUtx")
        'c2Nhbjs1...(28 chars)'
    """
    if len(scroll_id) <= SCROLL_ID_LOG_PREFIX_LENGTH:
        return scroll_id
    return f"{scroll_id[:SCROLL_ID_LOG_PREFIX_LENGTH]}...({len(scroll_id)} chars)"


def log_search_request(
    *,
    http_method: str,
    full_url: str,
    request_params: dict[str, Any],
    redacted_request_headers: dict[str, str],
    encoded_payload: str | None,
    scroll_id: str | None,
    timeout_context: _TimeoutContext,
) -> None:
    """
    Log the details of a search or scroll request at DEBUG level.

    Args:
        http_method: the HTTP verb of the request.
        full_url: the URL of the request, without query parameters.
        request_params: the query parameters (search type, keep-alive, size).
        redacted_request_headers: caution, as these will be logged as they are.
        encoded_payload: the JSON body opening a scroll, if any.
        scroll_id: the scroll id sent as plain-text body, if any. It is abbreviated.
        timeout_context: the timeout information for the request.
    """
    logger.debug(f"Request: {http_method} {full_url}, params {request_params}")
    if redacted_request_headers:
        logger.debug(f"Request headers: '{redacted_request_headers}'")
    if scroll_id is not None:
        logger.debug(f"Request scroll id: {abbreviate_scroll_id(scroll_id)}")
    elif encoded_payload is not None:
        logger.debug(f"Request search body: '{encoded_payload}'")
    if timeout_context:
        logger.debug(f"Request timeout: {timeout_context.request_ms} ms")


def log_search_response(
    response: httpx.Response,
    response_json: dict[str, Any] | None,
) -> None:
    """
    Log a decoded search or scroll response at DEBUG level: a one-line page
    summary, then the body (cut to a maximum length) with the scroll id
    abbreviated.
    """
    logger.debug(f"Response status code: {response.status_code}")
    if response_json is None:
        logger.debug("Response is empty (null)")
        return
    scroll_id = response_json.get("_scroll_id")
    hits = response_json.get("hits")
    page_size = (
        len(hits["hits"])
        if isinstance(hits, dict) and isinstance(hits.get("hits"), list)
        else 0
    )
    logger.debug(
        f"Response page: took {response_json.get('took')} ms, "
        f"{page_size} hit(s), scroll id "
        f"{abbreviate_scroll_id(scroll_id) if isinstance(scroll_id, str) else None}"
    )
    response_text = response.text
    if isinstance(scroll_id, str) and scroll_id:
        response_text = response_text.replace(
            scroll_id, abbreviate_scroll_id(scroll_id)
        )
    if len(response_text) > RESPONSE_LOG_MAX_LENGTH:
        response_text = f"{response_text[:RESPONSE_LOG_MAX_LENGTH]}...(truncated)"
    logger.debug(f"Response text: '{response_text}'")


def to_httpx_timeout(timeout_context: _TimeoutContext) -> httpx.Timeout | None:
    if not timeout_context.request_ms:
        return None
    return httpx.Timeout(timeout_context.request_ms / 1000)
