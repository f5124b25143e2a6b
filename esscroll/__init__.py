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

import importlib.metadata


def get_version() -> str:
    try:
        return importlib.metadata.version(__package__)

    # not installed (e.g. running from a source checkout)
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


__version__: str = get_version()


import esscroll.constants  # noqa: E402
from esscroll.client import SearchClient  # noqa: E402
from esscroll.exceptions import (  # noqa: E402
    CursorException,
    EndOfScroll,
    NoScrollIdException,
    SearchAPIException,
    SearchAPIHttpException,
    SearchAPITimeoutException,
    UnexpectedSearchAPIResponseException,
)
from esscroll.query import (  # noqa: E402
    BoolQuery,
    MatchAllQuery,
    MatchQuery,
    Query,
    RangeQuery,
    RawQuery,
    TermQuery,
)
from esscroll.results import SearchHit, SearchResult  # noqa: E402
from esscroll.scroll import AsyncScrollCursor, ScrollCursor  # noqa: E402
from esscroll.utils.api_options import APIOptions, TimeoutOptions  # noqa: E402

__all__ = [
    "APIOptions",
    "AsyncScrollCursor",
    "BoolQuery",
    "CursorException",
    "EndOfScroll",
    "MatchAllQuery",
    "MatchQuery",
    "NoScrollIdException",
    "Query",
    "RangeQuery",
    "RawQuery",
    "ScrollCursor",
    "SearchAPIException",
    "SearchAPIHttpException",
    "SearchAPITimeoutException",
    "SearchClient",
    "SearchHit",
    "SearchResult",
    "TermQuery",
    "TimeoutOptions",
    "UnexpectedSearchAPIResponseException",
    "__version__",
]


__pdoc__ = {
    "constants": False,
    "settings": False,
    "utils": False,
}
