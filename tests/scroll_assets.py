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

"""
Builders of mock search API responses, shaped as the scroll API returns them,
and of the matching request expectations on the mock server.
"""

from __future__ import annotations

from typing import Any

from pytest_httpserver import HTTPServer

from esscroll.utils.request_tools import HttpMethod


def make_hit(
    doc_id: str,
    *,
    index: str = "logs",
    doc_type: str = "event",
    source: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return {
        "_index": index,
        "_type": doc_type,
        "_id": doc_id,
        "_score": 1.0,
        "_source": source if source is not None else {"message": f"msg {doc_id}"},
    }


def make_page(
    scroll_id: str | None,
    hits: list[dict[str, Any]],
    *,
    total: Any = None,
    shards_failed: int = 0,
    timed_out: bool = False,
) -> dict[str, Any]:
    page: dict[str, Any] = {
        "took": 3,
        "timed_out": timed_out,
        "_shards": {
            "total": 5,
            "successful": 5 - shards_failed,
            "failed": shards_failed,
        },
        "hits": {
            "total": total if total is not None else len(hits),
            "max_score": 1.0 if hits else None,
            "hits": hits,
        },
    }
    if scroll_id is not None:
        page["_scroll_id"] = scroll_id
    return page


def make_scan_first_page(scroll_id: str, total: int) -> dict[str, Any]:
    """The first page of a scan: the total count, a scroll id and no hits."""
    return make_page(scroll_id, [], total=total)


MATCH_ALL_BODY = '{"query":{"match_all":{}}}'


def expect_first_page(
    httpserver: HTTPServer,
    response: Any,
    *,
    path: str = "/_search",
    query_string: str = "search_type=scan&scroll=5m",
    data: str = MATCH_ALL_BODY,
) -> None:
    httpserver.expect_oneshot_request(
        path,
        method=HttpMethod.POST,
        query_string=query_string,
        headers={"Content-Type": "application/json"},
        data=data,
    ).respond_with_json(response)


def expect_next_page(
    httpserver: HTTPServer,
    scroll_id: str,
    response: Any,
    *,
    query_string: str = "scroll=5m",
) -> None:
    httpserver.expect_oneshot_request(
        "/_search/scroll",
        method=HttpMethod.POST,
        query_string=query_string,
        headers={"Content-Type": "text/plain"},
        data=scroll_id,
    ).respond_with_json(response)
