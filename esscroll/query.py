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

from abc import ABC, abstractmethod
from typing import Any, Iterable

from typing_extensions import override

from esscroll.constants import QuerySourceType


class Query(ABC):
    """
    A search predicate. Each query knows how to serialize itself into
    the JSON-compatible structure expected by the search API, which is
    what ends up as the "query" part of the body of a search request.
    """

    @abstractmethod
    def source(self) -> QuerySourceType:
        """Return the JSON-compatible representation of this query."""
        ...

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Query):
            return self.source() == other.source()
        return False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.source()})"


class MatchAllQuery(Query):
    """A query matching every document."""

    def __init__(self, *, boost: float | None = None) -> None:
        self.boost = boost

    @override
    def source(self) -> QuerySourceType:
        params: dict[str, Any] = {}
        if self.boost is not None:
            params["boost"] = self.boost
        return {"match_all": params}


class TermQuery(Query):
    """A query for documents containing the exact (not analyzed) value in a field."""

    def __init__(self, field: str, value: Any) -> None:
        self.field = field
        self.value = value

    @override
    def source(self) -> QuerySourceType:
        return {"term": {self.field: self.value}}


class MatchQuery(Query):
    """A full-text query on a field."""

    def __init__(
        self,
        field: str,
        text: str,
        *,
        operator: str | None = None,
    ) -> None:
        self.field = field
        self.text = text
        self.operator = operator

    @override
    def source(self) -> QuerySourceType:
        if self.operator is None:
            return {"match": {self.field: self.text}}
        return {"match": {self.field: {"query": self.text, "operator": self.operator}}}


class RangeQuery(Query):
    """
    A query for documents with a field value in a range. Any of the
    bounds can be omitted.
    """

    def __init__(
        self,
        field: str,
        *,
        gt: Any = None,
        gte: Any = None,
        lt: Any = None,
        lte: Any = None,
    ) -> None:
        self.field = field
        self.bounds = {
            k: v
            for k, v in {"gt": gt, "gte": gte, "lt": lt, "lte": lte}.items()
            if v is not None
        }

    @override
    def source(self) -> QuerySourceType:
        return {"range": {self.field: dict(self.bounds)}}


class BoolQuery(Query):
    """
    A compound query combining other queries in must/should/must_not/filter
    clauses. Empty clauses are not sent.
    """

    def __init__(
        self,
        *,
        must: Iterable[Query] = (),
        should: Iterable[Query] = (),
        must_not: Iterable[Query] = (),
        filter: Iterable[Query] = (),
    ) -> None:
        self.clauses: dict[str, list[Query]] = {
            "must": list(must),
            "should": list(should),
            "must_not": list(must_not),
            "filter": list(filter),
        }

    @override
    def source(self) -> QuerySourceType:
        return {
            "bool": {
                clause_name: [query.source() for query in queries]
                for clause_name, queries in self.clauses.items()
                if queries
            }
        }


class RawQuery(Query):
    """A query given directly as its JSON-compatible dictionary."""

    def __init__(self, raw_source: QuerySourceType) -> None:
        self.raw_source = raw_source

    @override
    def source(self) -> QuerySourceType:
        return self.raw_source


__all__ = [
    "BoolQuery",
    "MatchAllQuery",
    "MatchQuery",
    "Query",
    "RangeQuery",
    "RawQuery",
    "TermQuery",
]
