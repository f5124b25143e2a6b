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


@dataclass
class SearchAPIErrorDescriptor:
    """
    An object representing a single error, as returned from the search API
    in the body of a failed response.

    The search API reports errors either as a plain string
    (`{"error": "...", "status": 400}`) or as a structured object
    (`{"error": {"type": "...", "reason": "...", "root_cause": [...]}, "status": 404}`).
    Both shapes are accepted.

    Attributes:
        error_type: the text found in the error's "type" field.
        reason: the text found in the error's "reason" field (or the whole
            error, if it is a plain string).
        index: the index the error refers to, if the API reports one.
        root_causes: the descriptors for the items in the "root_cause" field.
        attributes: a dict with any further key-value pairs returned by the API.
    """

    error_type: str | None
    reason: str | None
    index: str | None
    root_causes: list[SearchAPIErrorDescriptor]
    attributes: dict[str, Any]

    _known_dict_fields = {
        "type",
        "reason",
        "index",
        "root_cause",
    }

    def __init__(self, error_dict: dict[str, Any] | str) -> None:
        if isinstance(error_dict, str):
            self.error_type = None
            self.reason = error_dict
            self.index = None
            self.root_causes = []
            self.attributes = {}
        else:
            self.error_type = error_dict.get("type")
            self.reason = error_dict.get("reason")
            self.index = error_dict.get("index")
            self.root_causes = [
                SearchAPIErrorDescriptor(cause_dict)
                for cause_dict in error_dict.get("root_cause") or []
            ]
            self.attributes = {
                k: v for k, v in error_dict.items() if k not in self._known_dict_fields
            }

    def __repr__(self) -> str:
        pieces = [
            f"{self.error_type.__repr__()}" if self.error_type else None,
            f"reason={self.reason.__repr__()}" if self.reason else None,
            f"index={self.index.__repr__()}" if self.index else None,
            f"attributes={self.attributes.__repr__()}" if self.attributes else None,
        ]
        return f"{self.__class__.__name__}({', '.join(pc for pc in pieces if pc)})"

    def summary(self) -> str:
        """
        Determine a string succinct description of this error descriptor.

        The precise format of this summary is determined by which fields are set.
        """
        if self.error_type and self.reason:
            return f"{self.error_type}: {self.reason}"
        return self.reason or self.error_type or ""

    @staticmethod
    def from_response(raw_response: Any) -> list[SearchAPIErrorDescriptor]:
        """Extract the error descriptors, if any, from a decoded error body."""

        if not isinstance(raw_response, dict):
            return []
        error_item = raw_response.get("error")
        if isinstance(error_item, (str, dict)) and error_item:
            return [SearchAPIErrorDescriptor(error_item)]
        return []
