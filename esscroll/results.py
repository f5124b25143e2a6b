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

from esscroll.exceptions import UnexpectedSearchAPIResponseException


def _parse_total_hits(raw_hits: dict[str, Any]) -> int:
    # older servers return a bare count, newer ones {"value": n, "relation": "eq"}
    total = raw_hits.get("total")
    value = total.get("value") if isinstance(total, dict) else total
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise UnexpectedSearchAPIResponseException(
            text=f"Faulty response from search API (unparseable total: {total!r}).",
            raw_response=raw_hits,
        )
    return int(value)


@dataclass
class ShardsInfo:
    """
    The report on how many shards took part in a search.

    Attributes:
        total: the number of shards the search was sent to.
        successful: the number of shards that answered successfully.
        failed: the number of shards that failed.
    """

    total: int
    successful: int
    failed: int

    @staticmethod
    def _from_dict(raw_dict: dict[str, Any]) -> ShardsInfo:
        return ShardsInfo(
            total=raw_dict.get("total") or 0,
            successful=raw_dict.get("successful") or 0,
            failed=raw_dict.get("failed") or 0,
        )


@dataclass
class SearchHit:
    """
    A single matched document.

    Attributes:
        index: the index the document belongs to (`_index`).
        doc_type: the type of the document (`_type`), if the server reports it.
        id: the document ID (`_id`).
        score: the relevance score of the match (`_score`), if computed.
        source: the document itself (`_source`), if returned.
        fields: the explicitly requested stored fields, if any.
        sort: the sort values of the hit, if any.
        highlight: the highlighted fragments, if any.
        raw: the hit exactly as returned by the API.
    """

    index: str | None
    doc_type: str | None
    id: str | None
    score: float | None
    source: dict[str, Any] | None
    fields: dict[str, Any] | None
    sort: list[Any] | None
    highlight: dict[str, Any] | None
    raw: dict[str, Any]

    def __repr__(self) -> str:
        pieces = [
            f"index={self.index.__repr__()}" if self.index is not None else None,
            f"id={self.id.__repr__()}" if self.id is not None else None,
            f"score={self.score}" if self.score is not None else None,
            "source=..." if self.source is not None else None,
        ]
        return f"{self.__class__.__name__}({', '.join(pc for pc in pieces if pc)})"

    @staticmethod
    def _from_dict(raw_dict: dict[str, Any]) -> SearchHit:
        return SearchHit(
            index=raw_dict.get("_index"),
            doc_type=raw_dict.get("_type"),
            id=raw_dict.get("_id"),
            score=raw_dict.get("_score"),
            source=raw_dict.get("_source"),
            fields=raw_dict.get("fields"),
            sort=raw_dict.get("sort"),
            highlight=raw_dict.get("highlight"),
            raw=raw_dict,
        )


@dataclass
class SearchHits:
    """
    The container of the matched documents in a search response.

    Attributes:
        total_hits: the total number of documents matching the query.
        max_score: the highest score among the hits, if computed.
        hits: the matched documents in this page, in the order returned.
    """

    total_hits: int
    max_score: float | None
    hits: list[SearchHit]

    @staticmethod
    def _from_dict(raw_dict: dict[str, Any]) -> SearchHits:
        raw_hits = raw_dict.get("hits") or []
        if not isinstance(raw_hits, list):
            raise UnexpectedSearchAPIResponseException(
                text="Faulty response from search API (hits is not a list).",
                raw_response=raw_dict,
            )
        if not all(isinstance(raw_hit, dict) for raw_hit in raw_hits):
            raise UnexpectedSearchAPIResponseException(
                text="Faulty response from search API (a hit is not an object).",
                raw_response=raw_dict,
            )
        return SearchHits(
            total_hits=_parse_total_hits(raw_dict),
            max_score=raw_dict.get("max_score"),
            hits=[SearchHit._from_dict(raw_hit) for raw_hit in raw_hits],
        )


@dataclass
class SearchResult:
    """
    The decoded envelope of a search (or scroll) response: one page of results.

    Attributes:
        scroll_id: the scroll id to use to request the next page, if returned.
        took: the time in milliseconds the search took on the server.
        timed_out: whether the search timed out (the page may then be partial).
        shards: the report about the shards involved in the search.
        hits: the container of the matched documents, if returned.
        raw_response: the response exactly as returned by the API.
    """

    scroll_id: str | None
    took: int | None
    timed_out: bool
    shards: ShardsInfo | None
    hits: SearchHits | None
    raw_response: dict[str, Any]

    def __repr__(self) -> str:
        pieces = [
            f"scroll_id={self.scroll_id.__repr__()}" if self.scroll_id else None,
            f"total_hits={self.total_hits}",
            f"page_hits={len(self.documents)}",
            "raw_response=...",
        ]
        return f"{self.__class__.__name__}({', '.join(pc for pc in pieces if pc)})"

    @property
    def total_hits(self) -> int:
        """The total number of matching documents, zero if no hits are reported."""
        return self.hits.total_hits if self.hits is not None else 0

    @property
    def documents(self) -> list[SearchHit]:
        """The hits in this page, an empty list if no hits are reported."""
        return self.hits.hits if self.hits is not None else []

    def is_exhausted(self) -> bool:
        """
        Whether this page marks the end of a scroll, i.e. it contains no hits
        or reports a total of zero.
        """
        return self.hits is None or not self.hits.hits or self.hits.total_hits == 0

    @staticmethod
    def from_response(raw_response: dict[str, Any]) -> SearchResult:
        """Decode a JSON response from the search API into a SearchResult."""

        raw_hits = raw_response.get("hits")
        if raw_hits is not None and not isinstance(raw_hits, dict):
            raise UnexpectedSearchAPIResponseException(
                text="Faulty response from search API (hits is not an object).",
                raw_response=raw_response,
            )
        raw_shards = raw_response.get("_shards")
        return SearchResult(
            scroll_id=raw_response.get("_scroll_id"),
            took=raw_response.get("took"),
            timed_out=bool(raw_response.get("timed_out")),
            shards=(
                ShardsInfo._from_dict(raw_shards)
                if isinstance(raw_shards, dict)
                else None
            ),
            hits=SearchHits._from_dict(raw_hits) if raw_hits is not None else None,
            raw_response=raw_response,
        )
