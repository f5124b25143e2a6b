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

from dataclasses import dataclass
from typing import Any

import httpx

from esscroll.exceptions.error_descriptors import SearchAPIErrorDescriptor


class SearchAPIException(Exception):
    """
    Any exception occurred while issuing requests to the search API
    and specific to it, such as:
      - the API returns a non-success HTTP status,
      - the API returns a body that cannot be decoded,
      - a cursor method is invoked in a state that does not allow it,
    but not, for instance,
      - a network error while sending an HTTP request to the API.
    """

    pass


@dataclass
class SearchAPIHttpException(SearchAPIException, httpx.HTTPStatusError):
    """
    A request to the search API resulted in an HTTP 4xx or 5xx response.

    The purpose of this class is to present the error details returned by the
    API in a structured way, while still raising (a subclass of)
    `httpx.HTTPStatusError`.

    Attributes:
        text: a text message about the exception.
        status_code: the HTTP status code of the response, if available.
        error_descriptors: a list of all SearchAPIErrorDescriptor objects
            found in the response.
    """

    text: str | None
    status_code: int | None
    error_descriptors: list[SearchAPIErrorDescriptor]

    def __init__(
        self,
        text: str | None,
        *,
        httpx_error: httpx.HTTPStatusError,
        error_descriptors: list[SearchAPIErrorDescriptor],
    ) -> None:
        SearchAPIException.__init__(self, text)
        httpx.HTTPStatusError.__init__(
            self,
            message=str(httpx_error),
            request=httpx_error.request,
            response=httpx_error.response,
        )
        self.text = text
        self.httpx_error = httpx_error
        self.error_descriptors = error_descriptors
        self.status_code = getattr(httpx_error.response, "status_code", None)

    def __str__(self) -> str:
        return self.text or str(self.httpx_error)

    @classmethod
    def from_httpx_error(
        cls,
        httpx_error: httpx.HTTPStatusError,
        **kwargs: Any,
    ) -> SearchAPIHttpException:
        """Parse a httpx status error into this exception."""

        raw_response: Any
        # the attempt to extract a response structure cannot afford failure.
        try:
            raw_response = httpx_error.response.json()
        except Exception:
            raw_response = None
        error_descriptors = SearchAPIErrorDescriptor.from_response(raw_response)
        if error_descriptors:
            text = f"{error_descriptors[0].summary()}. {str(httpx_error)}"
        else:
            text = str(httpx_error)

        return cls(
            text=text,
            httpx_error=httpx_error,
            error_descriptors=error_descriptors,
            **kwargs,
        )


@dataclass
class SearchAPITimeoutException(SearchAPIException):
    """
    A search API request timed out.

    Attributes:
        text: a textual description of the error
        timeout_type: this denotes the phase of the HTTP request when the event
            occurred ("connect", "read", "write", "pool") or "generic" if there is
            not a specific phase associated to the exception.
        endpoint: the URL that the request was targeting, if known.
        raw_payload: the payload of the request (as a string), if known.
    """

    text: str
    timeout_type: str
    endpoint: str | None
    raw_payload: str | None

    def __init__(
        self,
        text: str,
        *,
        timeout_type: str,
        endpoint: str | None,
        raw_payload: str | None,
    ) -> None:
        super().__init__(text)
        self.text = text
        self.timeout_type = timeout_type
        self.endpoint = endpoint
        self.raw_payload = raw_payload


@dataclass
class UnexpectedSearchAPIResponseException(SearchAPIException):
    """
    The search API response is malformed: it cannot be parsed as JSON,
    or it does not have the expected structure.

    Attributes:
        text: a text message about the exception.
        raw_response: what is known of the offending response.
    """

    text: str
    raw_response: dict[str, Any] | None

    def __init__(
        self,
        text: str,
        raw_response: dict[str, Any] | None,
    ) -> None:
        super().__init__(text)
        self.text = text
        self.raw_response = raw_response


@dataclass
class CursorException(SearchAPIException):
    """
    The cursor operation cannot be invoked in the current state of the cursor
    (e.g. changing the configuration of a cursor that has already fetched pages).

    Attributes:
        text: a text message about the exception.
        cursor_state: a string description of the current state
            of the cursor. See `esscroll.constants.CursorState`.
    """

    text: str
    cursor_state: str

    def __init__(
        self,
        text: str,
        *,
        cursor_state: str,
    ) -> None:
        super().__init__(text)
        self.text = text
        self.cursor_state = cursor_state


class NoScrollIdException(CursorException):
    """
    A continuation page was requested from a cursor that holds no scroll id.
    No request is issued to the API when this is raised.
    """

    pass


class EndOfScroll(Exception):
    """
    The scroll is exhausted: the last continuation page came back empty.

    This is not an error: it signals that iteration over the scroll completed
    successfully. It deliberately does not derive from `SearchAPIException`, so
    that catching API errors never catches the end of a scroll by mistake.

    Attributes:
        scroll_id: the last scroll id returned by the API, if any.
    """

    def __init__(self, scroll_id: str | None = None) -> None:
        super().__init__("The scroll has no more pages.")
        self.scroll_id = scroll_id
