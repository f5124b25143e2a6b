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

from esscroll.utils.paths import (
    build_search_path,
    check_path_name,
    clean_path_string,
    join_path_names,
)


class TestPaths:
    @pytest.mark.describe("test of search path with no indices and no types")
    def test_search_path_bare(self) -> None:
        assert build_search_path([], []) == "/_search"

    @pytest.mark.describe("test of search path composition")
    def test_search_path_composition(self) -> None:
        assert build_search_path(["logs"], []) == "/logs/_search"
        assert build_search_path(["logs", "metrics"], []) == "/logs,metrics/_search"
        assert build_search_path(["logs"], ["event"]) == "/logs/event/_search"
        assert (
            build_search_path(["b", "a"], ["t2", "t1"]) == "/b,a/t2,t1/_search"
        )
        assert build_search_path([], ["event"]) == "/_all/event/_search"

    @pytest.mark.describe("test of path name normalization")
    def test_path_name_normalization(self) -> None:
        assert clean_path_string("logs") == "logs"
        assert clean_path_string("  logs ") == "logs"
        assert clean_path_string("logs-*") == "logs-*"
        assert clean_path_string("a/b") == "a%2Fb"
        assert clean_path_string("a,b") == "a%2Cb"
        assert clean_path_string("a b") == "a%20b"
        assert clean_path_string("a?b#c") == "a%3Fb%23c"

        assert join_path_names(["x y", "z/w"]) == "x%20y,z%2Fw"
        path = build_search_path(["we/ird", "na,me"], ["t?"])
        assert path == "/we%2Fird,na%2Cme/t%3F/_search"
        for char in " ?#":
            assert char not in path
        assert path.count("/") == 3

    @pytest.mark.describe("test of rejection of blank path names")
    def test_blank_path_names(self) -> None:
        with pytest.raises(ValueError):
            clean_path_string("")
        with pytest.raises(ValueError):
            clean_path_string("  ")
        with pytest.raises(ValueError):
            build_search_path(["", "logs"], [])
        with pytest.raises(ValueError):
            build_search_path(["logs"], ["\t"])
        with pytest.raises(ValueError):
            check_path_name(None)  # type: ignore[arg-type]
        assert check_path_name(" logs ") == " logs "
