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

import json
import logging
from types import TracebackType
from typing import Any, Dict, Iterable, Sequence, cast

import httpx

from esscroll import __version__
from esscroll.constants import CallerType
from esscroll.exceptions import (
    SearchAPIHttpException,
    UnexpectedSearchAPIResponseException,
    _TimeoutContext,
    to_searchapi_timeout_exception,
)
from esscroll.settings.defaults import (
    DEFAULT_REDACTED_HEADER_NAMES,
    FIXED_SECRET_PLACEHOLDER,
    JSON_CONTENT_TYPE,
    SCROLL_ID_CONTENT_TYPE,
)
from esscroll.utils.request_tools import (
    HttpMethod,
    log_search_request,
    log_search_response,
    to_httpx_timeout,
)

logger = logging.getLogger(__name__)


def compose_user_agent(callers: Sequence[CallerType]) -> str | None:
    """
    The User-Agent for the requests: the caller identities, in order, followed
    by esscroll itself, each as "name/version" (or just "name" if unversioned).
    Identities with no name are skipped.
    """
    identities = [*callers, ("esscroll", __version__)]
    pieces = [
        f"{name}/{version}" if version else name
        for name, version in identities
        if name
    ]
    return " ".join(pieces) or None


class APICommander:
    """
    The component that actually issues HTTP requests to the search API
    and turns their responses into decoded JSON (or raises the appropriate
    exception).

    A request body can be either a JSON payload (a dictionary), or a raw
    string sent as plain text (as is the case for scroll ids).
    """

    client = httpx.Client()

    def __init__(
        self,
        *,
        api_endpoint: str,
        headers: dict[str, str | None] = {},
        callers: Sequence[CallerType] = [],
        redacted_header_names: Iterable[str] | None = None,
    ) -> None:
        self.async_client = httpx.AsyncClient()
        self.api_endpoint = api_endpoint.rstrip("/")
        self.headers = headers
        self.callers = callers
        self.redacted_header_names = set(redacted_header_names or [])
        self.upper_full_redacted_header_names = {
            header_name.upper()
            for header_name in (
                self.redacted_header_names | DEFAULT_REDACTED_HEADER_NAMES
            )
        }

        full_user_agent_string = compose_user_agent(self.callers)
        self.caller_header: dict[str, str] = (
            {"User-Agent": full_user_agent_string} if full_user_agent_string else {}
        )
        self.full_headers: dict[str, str] = {
            k: v
            for k, v in {
                **{
                    "Content-Type": JSON_CONTENT_TYPE,
                    "Accept": JSON_CONTENT_TYPE,
                },
                **self.caller_header,
                **self.headers,
            }.items()
            if v is not None
        }
        self._loggable_headers = {
            k: v
            if k.upper() not in self.upper_full_redacted_header_names
            else FIXED_SECRET_PLACEHOLDER
            for k, v in self.full_headers.items()
        }

    def __repr__(self) -> str:
        pieces = [
            f"api_endpoint={self.api_endpoint}",
            f"callers={self.callers}",
        ]
        inner_desc = ", ".join(pieces)
        return f"{self.__class__.__name__}({inner_desc})"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, APICommander):
            return all(
                [
                    self.api_endpoint == other.api_endpoint,
                    self.headers == other.headers,
                    self.callers == other.callers,
                    self.redacted_header_names == other.redacted_header_names,
                ]
            )
        else:
            return False

    async def __aenter__(self) -> APICommander:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: TracebackType | None = None,
    ) -> None:
        await self.async_client.aclose()

    def _copy(
        self,
        api_endpoint: str | None = None,
        headers: dict[str, str | None] | None = None,
        callers: Sequence[CallerType] | None = None,
        redacted_header_names: Iterable[str] | None = None,
    ) -> APICommander:
        # some care in allowing e.g. {} to override (but not None):
        return APICommander(
            api_endpoint=(
                api_endpoint if api_endpoint is not None else self.api_endpoint
            ),
            headers=headers if headers is not None else self.headers,
            callers=callers if callers is not None else self.callers,
            redacted_header_names=(
                redacted_header_names
                if redacted_header_names is not None
                else self.redacted_header_names
            ),
        )

    def _compose_request_url(self, path: str) -> str:
        return "/".join([self.api_endpoint, path.lstrip("/")])

    def _compose_request_headers(self, raw_body: str | None) -> dict[str, str]:
        if raw_body is not None:
            return {**self.full_headers, "Content-Type": SCROLL_ID_CONTENT_TYPE}
        return self.full_headers

    def _compose_request_body(
        self,
        payload: dict[str, Any] | None,
        raw_body: str | None,
    ) -> str | None:
        if payload is not None and raw_body is not None:
            raise ValueError("Cannot send both a JSON payload and a raw body.")
        if raw_body is not None:
            return raw_body
        return self._encode_payload(payload)

    @staticmethod
    def _encode_payload(payload: dict[str, Any] | None) -> str | None:
        if payload is not None:
            return json.dumps(
                payload,
                allow_nan=False,
                separators=(",", ":"),
                ensure_ascii=False,
            )
        else:
            return None

    @staticmethod
    def _parse_json_response(response_text: str) -> dict[str, Any] | None:
        return cast(
            Dict[str, Any],
            json.loads(response_text),
        )

    def _raw_response_to_json(
        self,
        raw_response: httpx.Response,
        path: str,
    ) -> dict[str, Any] | None:
        # try to process the httpx raw response into a JSON or throw a failure
        raw_response_json: dict[str, Any] | None
        try:
            raw_response_json = self._parse_json_response(raw_response.text)
        except ValueError:
            # json() parsing has failed (e.g., empty body)
            raise UnexpectedSearchAPIResponseException(
                text=f"Unparseable response from API for '{path}'.",
                raw_response={
                    "raw_response": raw_response.text,
                },
            )
        if raw_response_json is not None and not isinstance(raw_response_json, dict):
            raise UnexpectedSearchAPIResponseException(
                text=f"Response from API for '{path}' is not a JSON object.",
                raw_response={
                    "raw_response": raw_response_json,
                },
            )

        log_search_response(raw_response, raw_response_json)
        if raw_response_json is not None:
            if raw_response_json.get("timed_out"):
                logger.warning(
                    f"The search API reports a timed out search for '{path}': "
                    "results may be partial."
                )
            shards = raw_response_json.get("_shards")
            if isinstance(shards, dict) and shards.get("failed"):
                logger.warning(
                    f"The search API reports {shards['failed']} failed shard(s) "
                    f"for '{path}': {shards.get('failures') or '(no details)'}"
                )

        return raw_response_json

    def raw_request(
        self,
        *,
        path: str,
        http_method: str = HttpMethod.POST,
        payload: dict[str, Any] | None = None,
        raw_body: str | None = None,
        request_params: dict[str, Any] = {},
        timeout_context: _TimeoutContext | None = None,
    ) -> httpx.Response:
        request_url = self._compose_request_url(path)
        _timeout_context = timeout_context or _TimeoutContext(request_ms=None)
        encoded_body = self._compose_request_body(payload, raw_body)
        log_search_request(
            http_method=http_method,
            full_url=request_url,
            request_params=request_params,
            redacted_request_headers=self._loggable_headers,
            encoded_payload=encoded_body,
            scroll_id=raw_body,
            timeout_context=_timeout_context,
        )
        httpx_timeout_s = to_httpx_timeout(_timeout_context)

        try:
            raw_response = self.client.request(
                method=http_method,
                url=request_url,
                content=encoded_body.encode() if encoded_body is not None else None,
                params=request_params,
                timeout=httpx_timeout_s,
                headers=self._compose_request_headers(raw_body),
            )
        except httpx.TimeoutException as timeout_exc:
            raise to_searchapi_timeout_exception(
                timeout_exc, timeout_context=_timeout_context
            ) from timeout_exc

        try:
            raw_response.raise_for_status()
        except httpx.HTTPStatusError as http_exc:
            raise SearchAPIHttpException.from_httpx_error(http_exc) from http_exc
        return raw_response

    async def async_raw_request(
        self,
        *,
        path: str,
        http_method: str = HttpMethod.POST,
        payload: dict[str, Any] | None = None,
        raw_body: str | None = None,
        request_params: dict[str, Any] = {},
        timeout_context: _TimeoutContext | None = None,
    ) -> httpx.Response:
        request_url = self._compose_request_url(path)
        _timeout_context = timeout_context or _TimeoutContext(request_ms=None)
        encoded_body = self._compose_request_body(payload, raw_body)
        log_search_request(
            http_method=http_method,
            full_url=request_url,
            request_params=request_params,
            redacted_request_headers=self._loggable_headers,
            encoded_payload=encoded_body,
            scroll_id=raw_body,
            timeout_context=_timeout_context,
        )
        httpx_timeout_s = to_httpx_timeout(_timeout_context)

        try:
            raw_response = await self.async_client.request(
                method=http_method,
                url=request_url,
                content=encoded_body.encode() if encoded_body is not None else None,
                params=request_params,
                timeout=httpx_timeout_s,
                headers=self._compose_request_headers(raw_body),
            )
        except httpx.TimeoutException as timeout_exc:
            raise to_searchapi_timeout_exception(
                timeout_exc, timeout_context=_timeout_context
            ) from timeout_exc

        try:
            raw_response.raise_for_status()
        except httpx.HTTPStatusError as http_exc:
            raise SearchAPIHttpException.from_httpx_error(http_exc) from http_exc
        return raw_response

    def request(
        self,
        *,
        path: str,
        http_method: str = HttpMethod.POST,
        payload: dict[str, Any] | None = None,
        raw_body: str | None = None,
        request_params: dict[str, Any] = {},
        timeout_context: _TimeoutContext | None = None,
    ) -> dict[str, Any] | None:
        raw_response = self.raw_request(
            path=path,
            http_method=http_method,
            payload=payload,
            raw_body=raw_body,
            request_params=request_params,
            timeout_context=timeout_context,
        )
        return self._raw_response_to_json(raw_response, path=path)

    async def async_request(
        self,
        *,
        path: str,
        http_method: str = HttpMethod.POST,
        payload: dict[str, Any] | None = None,
        raw_body: str | None = None,
        request_params: dict[str, Any] = {},
        timeout_context: _TimeoutContext | None = None,
    ) -> dict[str, Any] | None:
        raw_response = await self.async_raw_request(
            path=path,
            http_method=http_method,
            payload=payload,
            raw_body=raw_body,
            request_params=request_params,
            timeout_context=timeout_context,
        )
        return self._raw_response_to_json(raw_response, path=path)
