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

from typing import Iterable
from urllib.parse import quote

from esscroll.settings.defaults import (
    ALL_INDICES_PATH_SEGMENT,
    SEARCH_PATH_SEGMENT,
)

# characters left untouched when escaping an index or type name
PATH_NAME_SAFE_CHARS = "*"


def check_path_name(name: str) -> str:
    """
    Return the index/type name unchanged if it is usable in a path, i.e. it is
    a string with something other than whitespace. Raise ValueError otherwise.
    """
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"Invalid index or type name: {name!r}.")
    return name


def clean_path_string(name: str) -> str:
    """
    Normalize an index/type name for use as (part of) a URL path segment.

    Surrounding whitespace is dropped and the name is percent-escaped, so that
    separators such as "/" and "," cannot leak into the path. The "*" wildcard
    is kept as is. Blank names are rejected with a ValueError.
    """
    return quote(check_path_name(name).strip(), safe=PATH_NAME_SAFE_CHARS)


def join_path_names(names: Iterable[str]) -> str:
    """Comma-join the normalized names, preserving their order."""
    return ",".join(clean_path_string(name) for name in names)


def build_search_path(indices: Iterable[str], doc_types: Iterable[str]) -> str:
    """
    Compose the path for a search request, in the form
    "/{indices}/{doc_types}/_search".

    Each of the two leading segments is omitted if empty, except that a non-empty
    types segment with no indices is scoped to all indices (`_all`).

    Example:
        >>> build_search_path([], [])
        '/_search'
        >>> build_search_path(["logs", "metrics"], ["event"])
        '/logs,metrics/event/_search'
    """
    indices_part = join_path_names(indices)
    types_part = join_path_names(doc_types)
    segments: list[str] = []
    if types_part:
        segments.append(indices_part or ALL_INDICES_PATH_SEGMENT)
        segments.append(types_part)
    elif indices_part:
        segments.append(indices_part)
    segments.append(SEARCH_PATH_SEGMENT)
    return "/" + "/".join(segments)
