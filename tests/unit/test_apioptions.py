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

from esscroll.utils.api_options import (
    APIOptions,
    TimeoutOptions,
    defaultAPIOptions,
)


class TestAPIOptions:
    @pytest.mark.describe("test of header inheritance in APIOptions")
    def test_apioptions_headers(self) -> None:
        opts_d = defaultAPIOptions()
        opts_1 = opts_d.with_override(
            APIOptions(
                headers={"h": "y", "H": None},
                redacted_header_names={"x", "y"},
            )
        )
        opts_2 = opts_d.with_override(
            APIOptions(
                headers={"H": "y"},
                redacted_header_names={"x"},
            )
        ).with_override(
            APIOptions(
                headers={"h": "y", "H": None},
                redacted_header_names={"y"},
            )
        )

        assert opts_1 == opts_2

    @pytest.mark.describe("test of timeout and api key overrides in APIOptions")
    def test_apioptions_overrides(self) -> None:
        opts_d = defaultAPIOptions()
        assert opts_d.timeout_options.request_timeout_ms == 10000
        assert opts_d.request_headers() == {}

        opts_1 = opts_d.with_override(
            APIOptions(
                api_key="s3cr3t",
                timeout_options=TimeoutOptions(request_timeout_ms=500),
            )
        )
        assert opts_1.timeout_options.request_timeout_ms == 500
        assert opts_1.request_headers() == {"Authorization": "ApiKey s3cr3t"}
        assert opts_1.with_override(None) is opts_1
        assert opts_1.with_override(APIOptions()) == opts_1

        opts_2 = opts_1.with_override(
            APIOptions(
                api_key=None,
                headers={"X-Tenant": "acme"},
                timeout_options=TimeoutOptions(),
            )
        )
        assert opts_2.timeout_options.request_timeout_ms == 500
        assert opts_2.request_headers() == {"X-Tenant": "acme"}

        opts_3 = opts_1.with_override(APIOptions(headers={"Authorization": None}))
        assert opts_3.request_headers() == {"Authorization": None}

    @pytest.mark.describe("test of secret redaction in APIOptions repr")
    def test_apioptions_repr(self) -> None:
        opts = APIOptions(api_key="s3cr3t", callers=[("app", "1.0")])
        assert "s3cr3t" not in repr(opts)
        assert "***" in repr(opts)
        assert "callers=[('app', '1.0')]" in repr(opts)
        assert "headers" not in repr(opts)

        full_opts = defaultAPIOptions().with_override(opts)
        assert "s3cr3t" not in repr(full_opts)
        assert full_opts.api_key == "s3cr3t"
