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

from enum import Enum
from typing import Any, Dict, Optional, Tuple

CallerType = Tuple[Optional[str], Optional[str]]
QuerySourceType = Dict[str, Any]


class CursorState(Enum):
    """
    This enum expresses the possible states for a scroll cursor.

    Values:
        IDLE: no page has been fetched yet, the cursor holds no scroll id.
        STARTED: the scroll session is open, a scroll id is held.
        CLOSED: the scroll is exhausted or was closed. No more pages.
    """

    IDLE = "idle"
    STARTED = "started"
    CLOSED = "closed"
