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
from typing import Any, Iterable, Sequence

from esscroll.constants import CallerType
from esscroll.query import Query
from esscroll.scroll import AsyncScrollCursor, ScrollCursor
from esscroll.utils.api_commander import APICommander
from esscroll.utils.api_options import (
    APIOptions,
    FullAPIOptions,
    defaultAPIOptions,
)
from esscroll.utils.unset import _UNSET, UnsetType

logger = logging.getLogger(__name__)


class SearchClient:
    """
    A client for the scroll API of an Elasticsearch-compatible search engine.
    This is the entry point: it holds the endpoint and the API options, and
    creates scroll cursors sharing them.

    Args:
        api_endpoint: the base URL of the search engine,
            such as `"http://localhost:9200"`.
        api_key: an API key for authentication, sent in the "Authorization"
            header. Omit it for servers requiring no authentication.
        callers: a list of caller identities, i.e. applications, or frameworks,
            on behalf of which the requests are performed.
            These end up in the request user-agent.
            Each caller identity is a ("caller_name", "caller_version") pair.
        api_options: a specification - complete or partial - of the API Options
            to override the system defaults. If this is passed alongside the named
            parameters (api_key, callers), those will take precedence.

    Example:
        >>> from esscroll import SearchClient, TermQuery
        >>> client = SearchClient("http://localhost:9200")
        >>> cursor = (
        ...     client.scroll()
        ...     .index("logs")
        ...     .query(TermQuery("level", "error"))
        ...     .keep_alive("1m")
        ...     .size(50)
        ... )
        >>> for hit in cursor:
        ...     print(hit.id, hit.source)
    """

    def __init__(
        self,
        api_endpoint: str,
        *,
        api_key: str | None | UnsetType = _UNSET,
        callers: Sequence[CallerType] | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> None:
        arg_api_options = APIOptions(
            api_key=api_key,
            callers=callers,
        )
        self.api_endpoint = api_endpoint.rstrip("/")
        self.api_options: FullAPIOptions = (
            defaultAPIOptions()
            .with_override(api_options)
            .with_override(arg_api_options)
        )
        self._api_commander = self._get_api_commander(self.api_options)

    def __repr__(self) -> str:
        return (
            f'{self.__class__.__name__}(api_endpoint="{self.api_endpoint}", '
            f"{self.api_options})"
        )

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, SearchClient):
            return all(
                [
                    self.api_endpoint == other.api_endpoint,
                    self.api_options == other.api_options,
                ]
            )
        else:
            return False

    def _get_api_commander(self, api_options: FullAPIOptions) -> APICommander:
        return APICommander(
            api_endpoint=self.api_endpoint,
            headers=api_options.request_headers(),
            callers=api_options.callers,
            redacted_header_names=api_options.redacted_header_names,
        )

    def _get_cursor_api_commander(self, api_options: FullAPIOptions) -> APICommander:
        # timeouts are per request, only header-related options need a new commander
        if all(
            [
                api_options.request_headers() == self.api_options.request_headers(),
                api_options.callers == self.api_options.callers,
                api_options.redacted_header_names
                == self.api_options.redacted_header_names,
            ]
        ):
            return self._api_commander
        return self._get_api_commander(api_options)

    def _copy(
        self,
        *,
        api_key: str | None | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> SearchClient:
        arg_api_options = APIOptions(api_key=api_key)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return SearchClient(
            self.api_endpoint,
            api_options=final_api_options,
        )

    def with_options(
        self,
        *,
        api_key: str | None | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> SearchClient:
        """
        Create a clone of this SearchClient with some changed attributes.

        Args:
            api_key: an API key for authentication. Passing None removes
                the authentication header.
            api_options: any additional options to set for the clone, in the form of
                an APIOptions instance (where one can set just the needed attributes).
                In case the same setting is also provided as named parameter,
                the latter takes precedence.

        Returns:
            a new SearchClient instance.

        Example:
            >>> impatient_client = client.with_options(
            ...     api_options=APIOptions(
            ...         timeout_options=TimeoutOptions(request_timeout_ms=2000),
            ...     ),
            ... )
        """

        return self._copy(
            api_key=api_key,
            api_options=api_options,
        )

    def _cursor_kwargs(
        self,
        *,
        indices: Iterable[str] | None,
        doc_types: Iterable[str] | None,
        query: Query | None | UnsetType,
        keep_alive: str | None,
        size: int | None,
        pretty: bool,
        scroll_id: str | None,
        api_options: APIOptions | UnsetType,
    ) -> dict[str, Any]:
        cursor_api_options = self.api_options.with_override(api_options)
        commander = self._get_cursor_api_commander(cursor_api_options)
        return {
            "commander": commander,
            "api_options": cursor_api_options,
            "indices": indices or (),
            "doc_types": doc_types or (),
            "keep_alive": keep_alive,
            "query": query,
            "size": size,
            "pretty": pretty,
            "scroll_id": scroll_id,
        }

    def scroll(
        self,
        *,
        indices: Iterable[str] | None = None,
        doc_types: Iterable[str] | None = None,
        query: Query | None | UnsetType = _UNSET,
        keep_alive: str | None = None,
        size: int | None = None,
        pretty: bool = False,
        scroll_id: str | None = None,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> ScrollCursor:
        """
        Create a scroll cursor, possibly already configured. All settings can
        also be applied later with the cursor's own chained methods.

        Args:
            indices: the indices to search. If not provided, all indices.
            doc_types: the document types to search. If not provided, all types.
            query: a Query object. If not provided, all documents are matched;
                if None, no query is sent at all.
            keep_alive: how long the server should keep the scroll alive between
                two requests, e.g. "5m" (which is also the default).
            size: the page size. If not provided, the server decides.
            pretty: whether to ask for pretty-printed responses.
            scroll_id: a scroll id to resume an existing scroll from.
            api_options: API Options overriding, for this cursor only,
                those of the client.

        Returns:
            a ScrollCursor.

        Example:
            >>> cursor = client.scroll(indices=["logs"], keep_alive="1m", size=50)
            >>> first_page = cursor.get_first_page()
            >>> first_page.total_hits
            1234
            >>> second_page = cursor.get_next_page()
            >>> len(second_page.documents)
            50
        """

        return ScrollCursor(
            **self._cursor_kwargs(
                indices=indices,
                doc_types=doc_types,
                query=query,
                keep_alive=keep_alive,
                size=size,
                pretty=pretty,
                scroll_id=scroll_id,
                api_options=api_options,
            )
        )

    def async_scroll(
        self,
        *,
        indices: Iterable[str] | None = None,
        doc_types: Iterable[str] | None = None,
        query: Query | None | UnsetType = _UNSET,
        keep_alive: str | None = None,
        size: int | None = None,
        pretty: bool = False,
        scroll_id: str | None = None,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncScrollCursor:
        """
        Create an async scroll cursor, possibly already configured.
        The arguments have the same meaning as for the `scroll` method.

        Returns:
            an AsyncScrollCursor.

        Example:
            >>> async def count_errors(client):
            ...     cursor = client.async_scroll(
            ...         indices=["logs"],
            ...         query=TermQuery("level", "error"),
            ...     )
            ...     return len(await cursor.to_list())
        """

        return AsyncScrollCursor(
            **self._cursor_kwargs(
                indices=indices,
                doc_types=doc_types,
                query=query,
                keep_alive=keep_alive,
                size=size,
                pretty=pretty,
                scroll_id=scroll_id,
                api_options=api_options,
            )
        )
