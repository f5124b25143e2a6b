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

import pytest
from pytest_httpserver import HTTPServer

from esscroll import SearchClient
from esscroll.constants import CursorState
from esscroll.exceptions import (
    CursorException,
    EndOfScroll,
    NoScrollIdException,
    SearchAPIHttpException,
)
from esscroll.query import RangeQuery
from esscroll.scroll import AsyncScrollCursor

from ..scroll_assets import (
    expect_first_page,
    expect_next_page,
    make_hit,
    make_page,
    make_scan_first_page,
)


class TestScrollCursorAsync:
    @pytest.mark.describe("test of scroll cursor configuration, async")
    async def test_scrollcursor_configuration_async(
        self, search_client: SearchClient
    ) -> None:
        base = search_client.async_scroll()
        assert isinstance(base, AsyncScrollCursor)
        cur1 = base.indices("logs", "metrics").doc_type("event")
        assert isinstance(cur1, AsyncScrollCursor)
        assert cur1.search_path == "/logs,metrics/event/_search"
        assert base.search_path == "/_search"

        started = cur1.scroll_id("abc")
        with pytest.raises(CursorException):
            started.size(10)
        assert isinstance(started.clone(), AsyncScrollCursor)

    @pytest.mark.describe("test of the full scroll scenario on 'logs', async")
    async def test_scrollcursor_logs_scenario_async(
        self, httpserver: HTTPServer, search_client: SearchClient
    ) -> None:
        first_response = make_page(
            "abc", [make_hit("1"), make_hit("2"), make_hit("3")], total=3
        )
        expect_first_page(
            httpserver,
            first_response,
            path="/logs/_search",
            query_string="search_type=scan&scroll=1m&size=50",
        )
        cursor = search_client.async_scroll().index("logs").keep_alive("1m").size(50)
        page = await cursor.fetch()
        assert page.scroll_id == "abc"
        assert len(page.documents) == 3
        assert page.raw_response == first_response

        expect_next_page(
            httpserver,
            "abc",
            make_page("abc", [], total=0),
            query_string="scroll=1m",
        )
        with pytest.raises(EndOfScroll):
            await cursor.get_next_page("abc")
        assert cursor.state == CursorState.CLOSED

    @pytest.mark.describe("test of first page request parameters, async")
    async def test_scrollcursor_first_page_params_async(
        self, httpserver: HTTPServer, search_client: SearchClient
    ) -> None:
        expect_first_page(
            httpserver,
            make_scan_first_page("s0", 1),
            path="/_all/event/_search",
            query_string="search_type=scan&pretty=true&scroll=2m&size=3",
            data='{"query":{"range":{"ts":{"gte":"now-1d"}}}}',
        )
        cursor = search_client.async_scroll(
            doc_types=["event"],
            query=RangeQuery("ts", gte="now-1d"),
            keep_alive="2m",
            size=3,
            pretty=True,
        )
        page = await cursor.get_first_page()
        assert page.total_hits == 1
        assert cursor.current_scroll_id == "s0"

    @pytest.mark.describe("test of next page request with no scroll id, async")
    async def test_scrollcursor_no_scroll_id_async(
        self, httpserver: HTTPServer, search_client: SearchClient
    ) -> None:
        with pytest.raises(NoScrollIdException):
            await search_client.async_scroll().get_next_page()
        assert len(httpserver.log) == 0

    @pytest.mark.describe("test of scroll cursor hit iteration, async")
    async def test_scrollcursor_iteration_async(
        self, httpserver: HTTPServer, search_client: SearchClient
    ) -> None:
        expect_first_page(httpserver, make_scan_first_page("s0", 3))
        expect_next_page(
            httpserver, "s0", make_page("s1", [make_hit("1"), make_hit("2")], total=3)
        )
        expect_next_page(httpserver, "s1", make_page("s2", [make_hit("3")], total=3))
        expect_next_page(httpserver, "s2", make_page("s3", [], total=3))

        cursor = search_client.async_scroll()
        hit_ids = [hit.id async for hit in cursor]
        assert hit_ids == ["1", "2", "3"]
        assert cursor.consumed == 3
        assert cursor.state == CursorState.CLOSED

    @pytest.mark.describe("test of scroll cursor pages and to_list, async")
    async def test_scrollcursor_pages_async(
        self, httpserver: HTTPServer, search_client: SearchClient
    ) -> None:
        expect_first_page(httpserver, make_scan_first_page("s0", 3))
        expect_next_page(
            httpserver, "s0", make_page("s1", [make_hit("1"), make_hit("2")], total=3)
        )
        expect_next_page(httpserver, "s1", make_page("s2", [make_hit("3")], total=3))
        expect_next_page(httpserver, "s2", make_page("s3", [], total=3))

        pages = [page async for page in search_client.async_scroll().pages()]
        assert [len(page.documents) for page in pages] == [2, 1]

        expect_first_page(httpserver, make_page("t1", [make_hit("x")], total=2))
        expect_next_page(httpserver, "t1", make_page("t2", [make_hit("y")], total=2))
        expect_next_page(httpserver, "t2", None)
        hits = await search_client.async_scroll().to_list()
        assert [hit.id for hit in hits] == ["x", "y"]

    @pytest.mark.describe("test of scroll cursor errors, async")
    async def test_scrollcursor_errors_async(
        self, httpserver: HTTPServer, search_client: SearchClient
    ) -> None:
        httpserver.expect_oneshot_request("/_search/scroll").respond_with_json(
            {
                "error": {
                    "type": "search_context_missing_exception",
                    "reason": "No search context found for id [42]",
                },
                "status": 404,
            },
            status=404,
        )
        cursor = search_client.async_scroll().scroll_id("expired")
        with pytest.raises(SearchAPIHttpException) as exc_info:
            await cursor.get_next_page()
        assert exc_info.value.status_code == 404
        assert "search_context_missing_exception" in str(exc_info.value)
        assert cursor.state == CursorState.STARTED
