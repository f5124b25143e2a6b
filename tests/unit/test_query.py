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

from esscroll.query import (
    BoolQuery,
    MatchAllQuery,
    MatchQuery,
    RangeQuery,
    RawQuery,
    TermQuery,
)


class TestQuery:
    @pytest.mark.describe("test of simple query serialization")
    def test_simple_query_source(self) -> None:
        assert MatchAllQuery().source() == {"match_all": {}}
        assert MatchAllQuery(boost=1.5).source() == {"match_all": {"boost": 1.5}}
        assert TermQuery("level", "error").source() == {"term": {"level": "error"}}
        assert MatchQuery("msg", "disk full").source() == {
            "match": {"msg": "disk full"}
        }
        assert MatchQuery("msg", "disk full", operator="and").source() == {
            "match": {"msg": {"query": "disk full", "operator": "and"}}
        }
        assert RangeQuery("age", gte=18, lt=65).source() == {
            "range": {"age": {"gte": 18, "lt": 65}}
        }
        assert RangeQuery("age").source() == {"range": {"age": {}}}

    @pytest.mark.describe("test of compound query serialization")
    def test_bool_query_source(self) -> None:
        query = BoolQuery(
            must=[TermQuery("level", "error")],
            must_not=[MatchQuery("msg", "heartbeat")],
        )
        assert query.source() == {
            "bool": {
                "must": [{"term": {"level": "error"}}],
                "must_not": [{"match": {"msg": "heartbeat"}}],
            }
        }
        assert BoolQuery().source() == {"bool": {}}

    @pytest.mark.describe("test of raw query and query equality")
    def test_raw_query_and_equality(self) -> None:
        raw = {"match_all": {}}
        assert RawQuery(raw).source() is raw
        assert RawQuery(raw) == MatchAllQuery()
        assert TermQuery("a", 1) == TermQuery("a", 1)
        assert TermQuery("a", 1) != TermQuery("a", 2)
        assert TermQuery("a", 1) != {"term": {"a": 1}}
        assert "TermQuery" in repr(TermQuery("a", 1))
