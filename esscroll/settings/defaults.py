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

# Defaults/settings for scroll requests
DEFAULT_KEEP_ALIVE = "5m"
SCROLL_SEARCH_TYPE = "scan"
SEARCH_PATH_SEGMENT = "_search"
SCROLL_PATH = "/_search/scroll"
ALL_INDICES_PATH_SEGMENT = "_all"

# Defaults/settings for HTTP requests
DEFAULT_REQUEST_TIMEOUT_MS = 10000
JSON_CONTENT_TYPE = "application/json"
SCROLL_ID_CONTENT_TYPE = "text/plain"
DEFAULT_AUTH_HEADER = "Authorization"
API_KEY_AUTH_PREFIX = "ApiKey "

# Settings for redacting secrets in string representations and logging
FIXED_SECRET_PLACEHOLDER = "***"
DEFAULT_REDACTED_HEADER_NAMES = {
    DEFAULT_AUTH_HEADER,
}
