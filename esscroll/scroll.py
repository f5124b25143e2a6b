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
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Iterable, Iterator, TypeVar

from esscroll.constants import CursorState
from esscroll.exceptions import (
    CursorException,
    EndOfScroll,
    NoScrollIdException,
    UnexpectedSearchAPIResponseException,
    _TimeoutContext,
)
from esscroll.query import MatchAllQuery, Query
from esscroll.results import SearchHit, SearchResult
from esscroll.settings.defaults import (
    DEFAULT_KEEP_ALIVE,
    SCROLL_PATH,
    SCROLL_SEARCH_TYPE,
)
from esscroll.utils.api_commander import APICommander
from esscroll.utils.api_options import FullAPIOptions
from esscroll.utils.paths import build_search_path, check_path_name
from esscroll.utils.unset import _UNSET, UnsetType

logger = logging.getLogger(__name__)

SC = TypeVar("SC", bound="_BaseScrollCursor")


def first_page_request_params(
    *,
    keep_alive: str | None,
    size: int | None,
    pretty: bool,
) -> dict[str, Any]:
    """
    The query parameters opening a scroll: scan mode, optional pretty-printing,
    the keep-alive (or its default) and the page size, if set and positive.
    """
    params: dict[str, Any] = {"search_type": SCROLL_SEARCH_TYPE}
    if pretty:
        params["pretty"] = "true"
    params["scroll"] = keep_alive or DEFAULT_KEEP_ALIVE
    if size is not None and size > 0:
        params["size"] = str(size)
    return params


def next_page_request_params(
    *,
    keep_alive: str | None,
    pretty: bool,
) -> dict[str, Any]:
    """
    The query parameters of a continuation request. The page size is fixed
    when the scroll is opened, hence it is never sent here.
    """
    params: dict[str, Any] = {}
    if pretty:
        params["pretty"] = "true"
    params["scroll"] = keep_alive or DEFAULT_KEEP_ALIVE
    return params


def first_page_payload(query: Query | None) -> dict[str, Any]:
    if query is not None:
        return {"query": query.source()}
    return {}


class _BaseScrollCursor(ABC):
    """
    The configuration and the state shared by the sync and async scroll cursors.

    All configuration methods (`index`, `query`, `size`, ...) return a new cursor
    and leave the original untouched. They can only be used while the cursor
    is IDLE, i.e. before any page has been fetched.
    """

    _commander: APICommander
    _api_options: FullAPIOptions
    _indices: list[str]
    _doc_types: list[str]
    _keep_alive: str | None
    _query: Query | None
    _size: int | None
    _pretty: bool
    _scroll_id: str | None
    _state: CursorState
    _buffer: list[SearchHit]
    _pages_retrieved: int
    _consumed: int

    def __init__(
        self,
        *,
        commander: APICommander,
        api_options: FullAPIOptions,
        indices: Iterable[str] = (),
        doc_types: Iterable[str] = (),
        keep_alive: str | None = None,
        query: Query | None | UnsetType = _UNSET,
        size: int | None = None,
        pretty: bool = False,
        scroll_id: str | None = None,
    ) -> None:
        self._commander = commander
        self._api_options = api_options
        self._indices = [check_path_name(name) for name in indices]
        self._doc_types = [check_path_name(name) for name in doc_types]
        self._keep_alive = keep_alive
        self._query = MatchAllQuery() if isinstance(query, UnsetType) else query
        self._size = size
        self._pretty = pretty
        self._scroll_id = scroll_id or None
        self._state = CursorState.STARTED if self._scroll_id else CursorState.IDLE
        self._buffer = []
        self._pages_retrieved = 0
        self._consumed = 0

    @abstractmethod
    def _copy(
        self: SC,
        *,
        indices: Iterable[str] | UnsetType = _UNSET,
        doc_types: Iterable[str] | UnsetType = _UNSET,
        keep_alive: str | None | UnsetType = _UNSET,
        query: Query | None | UnsetType = _UNSET,
        size: int | None | UnsetType = _UNSET,
        pretty: bool | UnsetType = _UNSET,
        scroll_id: str | None | UnsetType = _UNSET,
    ) -> SC: ...

    def _copy_kwargs(
        self,
        *,
        indices: Iterable[str] | UnsetType = _UNSET,
        doc_types: Iterable[str] | UnsetType = _UNSET,
        keep_alive: str | None | UnsetType = _UNSET,
        query: Query | None | UnsetType = _UNSET,
        size: int | None | UnsetType = _UNSET,
        pretty: bool | UnsetType = _UNSET,
        scroll_id: str | None | UnsetType = _UNSET,
    ) -> dict[str, Any]:
        return {
            "commander": self._commander,
            "api_options": self._api_options,
            "indices": self._indices if isinstance(indices, UnsetType) else indices,
            "doc_types": (
                self._doc_types if isinstance(doc_types, UnsetType) else doc_types
            ),
            "keep_alive": (
                self._keep_alive if isinstance(keep_alive, UnsetType) else keep_alive
            ),
            "query": self._query if isinstance(query, UnsetType) else query,
            "size": self._size if isinstance(size, UnsetType) else size,
            "pretty": self._pretty if isinstance(pretty, UnsetType) else pretty,
            "scroll_id": (
                self._scroll_id if isinstance(scroll_id, UnsetType) else scroll_id
            ),
        }

    def _ensure_alive(self) -> None:
        if self._state == CursorState.CLOSED:
            raise CursorException(
                text="Cursor is closed.",
                cursor_state=self._state.value,
            )

    def _ensure_idle(self) -> None:
        if self._state != CursorState.IDLE:
            raise CursorException(
                text="Cursor is not idle anymore.",
                cursor_state=self._state.value,
            )

    def _timeout_context(self, request_timeout_ms: int | None) -> _TimeoutContext:
        if request_timeout_ms is not None:
            return _TimeoutContext(
                request_ms=request_timeout_ms,
                label="request_timeout_ms",
            )
        return _TimeoutContext(
            request_ms=self._api_options.timeout_options.request_timeout_ms,
            label="request_timeout_ms",
        )

    def _resolve_scroll_id(self, scroll_id: str | None) -> str:
        _scroll_id = self._scroll_id if scroll_id is None else scroll_id
        if not _scroll_id:
            raise NoScrollIdException(
                text="No scroll id to fetch the next page with.",
                cursor_state=self._state.value,
            )
        return _scroll_id

    def _record_first_page(self, raw_response: dict[str, Any] | None) -> SearchResult:
        if raw_response is None:
            raise UnexpectedSearchAPIResponseException(
                text="Empty response from search API when opening a scroll.",
                raw_response=None,
            )
        result = SearchResult.from_response(raw_response)
        if result.scroll_id:
            self._scroll_id = result.scroll_id
        self._state = CursorState.STARTED
        self._pages_retrieved += 1
        return result

    def _record_next_page(
        self,
        raw_response: dict[str, Any] | None,
        scroll_id: str,
    ) -> SearchResult:
        result = (
            SearchResult.from_response(raw_response)
            if raw_response is not None
            else None
        )
        if result is None or result.is_exhausted():
            logger.info(f"scroll exhausted after {self._pages_retrieved} page(s)")
            self._state = CursorState.CLOSED
            raise EndOfScroll(
                scroll_id=(result.scroll_id if result is not None else None)
                or scroll_id
            )
        self._scroll_id = result.scroll_id or scroll_id
        self._state = CursorState.STARTED
        self._pages_retrieved += 1
        return result

    @property
    def search_path(self) -> str:
        """The path of the request opening the scroll, e.g. "/logs/_search"."""
        return build_search_path(self._indices, self._doc_types)

    @property
    def state(self) -> CursorState:
        """
        The current state of this cursor.

        Returns:
            a value in `esscroll.constants.CursorState`.
        """

        return self._state

    @property
    def current_scroll_id(self) -> str | None:
        """The scroll id the next page would be requested with, if any."""
        return self._scroll_id

    @property
    def pages_retrieved(self) -> int:
        """The number of pages successfully fetched so far."""
        return self._pages_retrieved

    @property
    def consumed(self) -> int:
        """The number of hits yielded so far by iterating over the cursor."""
        return self._consumed

    @property
    def buffered_count(self) -> int:
        """
        The number of hits of the last fetched page not yet yielded by iteration.
        Reading this property never triggers new API calls.
        """
        return len(self._buffer)

    @property
    def api_options(self) -> FullAPIOptions:
        return self._api_options

    def close(self) -> None:
        """
        Close the cursor, regardless of its state, discarding any buffered hits.
        No further pages can be fetched afterwards.

        This is an in-place modification of the cursor. The server-side scroll
        is not released, it expires when its keep-alive elapses.
        """

        self._state = CursorState.CLOSED
        self._buffer = []

    def clone(self: SC) -> SC:
        """
        Create a copy of this cursor with the same configuration
        (indices, types, query, keep-alive, ...), in its pristine IDLE state.
        """
        return self._copy(scroll_id=None)

    def index(self: SC, index: str) -> SC:
        """Return a copy of this cursor with an index added to the target indices."""
        self._ensure_idle()
        return self._copy(indices=[*self._indices, index])

    def indices(self: SC, *indices: str) -> SC:
        """Return a copy of this cursor with indices added to the target indices."""
        self._ensure_idle()
        return self._copy(indices=[*self._indices, *indices])

    def doc_type(self: SC, doc_type: str) -> SC:
        """Return a copy of this cursor with a type added to the target types."""
        self._ensure_idle()
        return self._copy(doc_types=[*self._doc_types, doc_type])

    def doc_types(self: SC, *doc_types: str) -> SC:
        """Return a copy of this cursor with types added to the target types."""
        self._ensure_idle()
        return self._copy(doc_types=[*self._doc_types, *doc_types])

    def keep_alive(self: SC, keep_alive: str | None) -> SC:
        """
        Return a copy of this cursor with a new keep-alive setting, i.e. how long
        the server retains the scroll between two requests (e.g. "5m").
        If None, the default keep-alive is sent.
        """
        self._ensure_idle()
        return self._copy(keep_alive=keep_alive)

    def scroll(self: SC, keep_alive: str | None) -> SC:
        """An alias for `keep_alive`."""
        return self.keep_alive(keep_alive)

    def query(self: SC, query: Query | None) -> SC:
        """
        Return a copy of this cursor with a new query. If None, no query is sent
        and the server applies its own default (matching all documents).
        """
        self._ensure_idle()
        return self._copy(query=query)

    def size(self: SC, size: int | None) -> SC:
        """
        Return a copy of this cursor with a new page size.
        A page size of zero (or None) leaves the choice to the server.
        """
        self._ensure_idle()
        return self._copy(size=size)

    def pretty(self: SC, pretty: bool = True) -> SC:
        """Return a copy of this cursor asking (or not) for pretty-printed responses."""
        self._ensure_idle()
        return self._copy(pretty=pretty)

    def scroll_id(self: SC, scroll_id: str | None) -> SC:
        """
        Return a copy of this cursor set to continue from the provided scroll id
        (or, if None, set to open a new scroll).
        Contrary to the other configuration methods, this can be used at any time
        on a cursor that is not closed.
        """
        self._ensure_alive()
        return self._copy(scroll_id=scroll_id)


class ScrollCursor(_BaseScrollCursor):
    """
    A cursor through all the documents matching a query, fetched page by page
    through the scroll API of the search engine.

    This class is not meant to be directly instantiated by the user: rather,
    one obtains it from a `SearchClient` and configures it with chained calls.

    The first request (`get_first_page`) opens the scroll and returns
    a scroll id; each following request (`get_next_page`) exchanges the scroll id
    for the next page. When a page comes back empty the scroll is exhausted:
    `get_next_page` raises `EndOfScroll` and the cursor is closed.
    Alternatively, iterating over the cursor yields all hits, page after page.

    Example:
        >>> cursor = client.scroll().index("logs").keep_alive("1m").size(50)
        >>> first_page = cursor.fetch()
        >>> while True:
        ...     try:
        ...         page = cursor.fetch()
        ...     except EndOfScroll:
        ...         break
        ...     process(page.documents)
        >>> # or, equivalently:
        >>> for hit in client.scroll().index("logs").size(50):
        ...     process_one(hit.source)

    A cursor is not safe for concurrent use: fetches must happen one at a time.
    """

    def _copy(
        self,
        *,
        indices: Iterable[str] | UnsetType = _UNSET,
        doc_types: Iterable[str] | UnsetType = _UNSET,
        keep_alive: str | None | UnsetType = _UNSET,
        query: Query | None | UnsetType = _UNSET,
        size: int | None | UnsetType = _UNSET,
        pretty: bool | UnsetType = _UNSET,
        scroll_id: str | None | UnsetType = _UNSET,
    ) -> ScrollCursor:
        return ScrollCursor(
            **self._copy_kwargs(
                indices=indices,
                doc_types=doc_types,
                keep_alive=keep_alive,
                query=query,
                size=size,
                pretty=pretty,
                scroll_id=scroll_id,
            )
        )

    def __repr__(self) -> str:
        return (
            f'{self.__class__.__name__}("{self.search_path}", '
            f"{self._state.value}, "
            f"consumed so far: {self.consumed})"
        )

    def __iter__(self) -> ScrollCursor:
        self._ensure_alive()
        return self

    def __next__(self) -> SearchHit:
        while not self._buffer:
            if self._state == CursorState.CLOSED:
                raise StopIteration
            try:
                page = self.fetch()
            except EndOfScroll:
                raise StopIteration
            if not self._scroll_id:
                # no way to continue a scroll without its id
                self._state = CursorState.CLOSED
            self._buffer = list(page.documents)
        hit, self._buffer = self._buffer[0], self._buffer[1:]
        self._consumed += 1
        return hit

    def get_first_page(self, *, request_timeout_ms: int | None = None) -> SearchResult:
        """
        Open the scroll and return its first page.

        The scroll id in the response is stored in the cursor, for use by
        subsequent `get_next_page` calls. Note that when scanning, the first page
        typically carries no hits, only the scroll id and the total count.

        Args:
            request_timeout_ms: a timeout, in milliseconds, for the HTTP request.
                If not passed, the cursor's API options determine it.

        Returns:
            a SearchResult with the decoded response.
        """

        self._ensure_alive()
        path = self.search_path
        logger.info(f"scroll cursor fetching the first page from '{path}'")
        raw_response = self._commander.request(
            path=path,
            payload=first_page_payload(self._query),
            request_params=first_page_request_params(
                keep_alive=self._keep_alive,
                size=self._size,
                pretty=self._pretty,
            ),
            timeout_context=self._timeout_context(request_timeout_ms),
        )
        logger.info(f"scroll cursor finished fetching the first page from '{path}'")
        return self._record_first_page(raw_response)

    def get_next_page(
        self,
        scroll_id: str | None = None,
        *,
        request_timeout_ms: int | None = None,
    ) -> SearchResult:
        """
        Fetch the next page of the scroll.

        Args:
            scroll_id: the scroll id to continue from. If not passed, the one
                held by the cursor (the latest returned by the server) is used.
                An empty scroll id is an error, detected before issuing any request.
            request_timeout_ms: a timeout, in milliseconds, for the HTTP request.
                If not passed, the cursor's API options determine it.

        Returns:
            a SearchResult with the decoded response, as returned by the API.

        Raises:
            NoScrollIdException: if there is no scroll id to continue from.
            EndOfScroll: if the page is empty, i.e. the scroll is exhausted.
        """

        self._ensure_alive()
        _scroll_id = self._resolve_scroll_id(scroll_id)
        logger.info(f"scroll cursor fetching page {self._pages_retrieved + 1}")
        raw_response = self._commander.request(
            path=SCROLL_PATH,
            raw_body=_scroll_id,
            request_params=next_page_request_params(
                keep_alive=self._keep_alive,
                pretty=self._pretty,
            ),
            timeout_context=self._timeout_context(request_timeout_ms),
        )
        logger.info(f"scroll cursor finished fetching page {self._pages_retrieved + 1}")
        return self._record_next_page(raw_response, scroll_id=_scroll_id)

    def fetch(self, *, request_timeout_ms: int | None = None) -> SearchResult:
        """
        Fetch the first page if the cursor holds no scroll id yet,
        the next page otherwise. See `get_first_page` and `get_next_page`.
        """

        if not self._scroll_id:
            return self.get_first_page(request_timeout_ms=request_timeout_ms)
        return self.get_next_page(request_timeout_ms=request_timeout_ms)

    def pages(self) -> Iterator[SearchResult]:
        """
        Iterate over the pages of the scroll, fetching them one after the other
        until the scroll is exhausted. Pages with no hits (such as the first page
        of a scan) are not yielded.
        """

        self._ensure_alive()
        while self._state != CursorState.CLOSED:
            try:
                page = self.fetch()
            except EndOfScroll:
                return
            if not self._scroll_id:
                self._state = CursorState.CLOSED
            if page.documents:
                yield page

    def to_list(self) -> list[SearchHit]:
        """Consume the whole scroll and return all the hits in a list."""
        return list(self)


class AsyncScrollCursor(_BaseScrollCursor):
    """
    A cursor through all the documents matching a query, fetched page by page
    through the scroll API of the search engine.

    This class is the async counterpart of ScrollCursor: the methods that
    issue requests to the API are coroutines, and the cursor supports
    `async for` iteration over its hits.

    Example:
        >>> cursor = client.async_scroll().index("logs").size(50)
        >>> async for hit in cursor:
        ...     process_one(hit.source)
    """

    def _copy(
        self,
        *,
        indices: Iterable[str] | UnsetType = _UNSET,
        doc_types: Iterable[str] | UnsetType = _UNSET,
        keep_alive: str | None | UnsetType = _UNSET,
        query: Query | None | UnsetType = _UNSET,
        size: int | None | UnsetType = _UNSET,
        pretty: bool | UnsetType = _UNSET,
        scroll_id: str | None | UnsetType = _UNSET,
    ) -> AsyncScrollCursor:
        return AsyncScrollCursor(
            **self._copy_kwargs(
                indices=indices,
                doc_types=doc_types,
                keep_alive=keep_alive,
                query=query,
                size=size,
                pretty=pretty,
                scroll_id=scroll_id,
            )
        )

    def __repr__(self) -> str:
        return (
            f'{self.__class__.__name__}("{self.search_path}", '
            f"{self._state.value}, "
            f"consumed so far: {self.consumed})"
        )

    def __aiter__(self) -> AsyncScrollCursor:
        self._ensure_alive()
        return self

    async def __anext__(self) -> SearchHit:
        while not self._buffer:
            if self._state == CursorState.CLOSED:
                raise StopAsyncIteration
            try:
                page = await self.fetch()
            except EndOfScroll:
                raise StopAsyncIteration
            if not self._scroll_id:
                self._state = CursorState.CLOSED
            self._buffer = list(page.documents)
        hit, self._buffer = self._buffer[0], self._buffer[1:]
        self._consumed += 1
        return hit

    async def get_first_page(
        self, *, request_timeout_ms: int | None = None
    ) -> SearchResult:
        """
        Open the scroll and return its first page.
        Async version of `ScrollCursor.get_first_page`, see that method for details.
        """

        self._ensure_alive()
        path = self.search_path
        logger.info(f"scroll cursor fetching the first page from '{path}', async")
        raw_response = await self._commander.async_request(
            path=path,
            payload=first_page_payload(self._query),
            request_params=first_page_request_params(
                keep_alive=self._keep_alive,
                size=self._size,
                pretty=self._pretty,
            ),
            timeout_context=self._timeout_context(request_timeout_ms),
        )
        logger.info(
            f"scroll cursor finished fetching the first page from '{path}', async"
        )
        return self._record_first_page(raw_response)

    async def get_next_page(
        self,
        scroll_id: str | None = None,
        *,
        request_timeout_ms: int | None = None,
    ) -> SearchResult:
        """
        Fetch the next page of the scroll.
        Async version of `ScrollCursor.get_next_page`, see that method for details.
        """

        self._ensure_alive()
        _scroll_id = self._resolve_scroll_id(scroll_id)
        logger.info(f"scroll cursor fetching page {self._pages_retrieved + 1}, async")
        raw_response = await self._commander.async_request(
            path=SCROLL_PATH,
            raw_body=_scroll_id,
            request_params=next_page_request_params(
                keep_alive=self._keep_alive,
                pretty=self._pretty,
            ),
            timeout_context=self._timeout_context(request_timeout_ms),
        )
        logger.info(
            f"scroll cursor finished fetching page {self._pages_retrieved + 1}, async"
        )
        return self._record_next_page(raw_response, scroll_id=_scroll_id)

    async def fetch(self, *, request_timeout_ms: int | None = None) -> SearchResult:
        """
        Fetch the first page if the cursor holds no scroll id yet,
        the next page otherwise.
        """

        if not self._scroll_id:
            return await self.get_first_page(request_timeout_ms=request_timeout_ms)
        return await self.get_next_page(request_timeout_ms=request_timeout_ms)

    async def pages(self) -> AsyncIterator[SearchResult]:
        """
        Iterate over the pages of the scroll until it is exhausted.
        Async version of `ScrollCursor.pages`.
        """

        self._ensure_alive()
        while self._state != CursorState.CLOSED:
            try:
                page = await self.fetch()
            except EndOfScroll:
                return
            if not self._scroll_id:
                self._state = CursorState.CLOSED
            if page.documents:
                yield page

    async def to_list(self) -> list[SearchHit]:
        """Consume the whole scroll and return all the hits in a list."""
        return [hit async for hit in self]
