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
from typing import Iterable, Sequence

from esscroll.constants import CallerType
from esscroll.settings.defaults import (
    API_KEY_AUTH_PREFIX,
    DEFAULT_AUTH_HEADER,
    DEFAULT_REQUEST_TIMEOUT_MS,
    FIXED_SECRET_PLACEHOLDER,
)
from esscroll.utils.unset import _UNSET, UnsetType


@dataclass
class TimeoutOptions:
    """
    The group of settings for the API Options concerning the configured timeouts.

    All timeout values are integers expressed in milliseconds. A timeout of zero
    signifies that no timeout is imposed at all.

    This class is used to override default settings. Values that are left
    unspecified will keep the values inherited from the object being customized.

    Attributes:
        request_timeout_ms: the timeout imposed on a single HTTP request,
            i.e. on fetching a single page of a scroll. Defaults to 10 s.
    """

    request_timeout_ms: int | UnsetType = _UNSET


@dataclass
class FullTimeoutOptions(TimeoutOptions):
    """
    The "full" version of `TimeoutOptions`, with the guarantee that all of its
    members have defined values.

    Attributes:
        request_timeout_ms: the timeout imposed on a single HTTP request,
            i.e. on fetching a single page of a scroll. Defaults to 10 s.
    """

    request_timeout_ms: int

    def __init__(self, *, request_timeout_ms: int) -> None:
        TimeoutOptions.__init__(self, request_timeout_ms=request_timeout_ms)

    def with_override(self, other: TimeoutOptions) -> FullTimeoutOptions:
        """
        Given an "overriding" set of options, possibly not defined in all its
        attributes, apply the override logic and return a new full options object.

        Args:
            other: a not-necessarily-fully-specified options object. All its defined
                settings take precedence.
        """

        return FullTimeoutOptions(
            request_timeout_ms=(
                other.request_timeout_ms
                if not isinstance(other.request_timeout_ms, UnsetType)
                else self.request_timeout_ms
            ),
        )


@dataclass
class APIOptions:
    """
    This class represents all settings that can be configured for how esscroll
    interacts with the search API. A SearchClient, and the scroll cursors it
    creates, each have a full set of these options.

    In order to customize the behavior from its preset defaults, one should create
    an `APIOptions` object and pass it as the `api_options` argument to the
    SearchClient constructor, its `with_options` method or its `scroll` method.
    The APIOptions object passed as argument can define zero, some or all of its
    members, overriding the corresponding settings and keeping, for all unspecified
    settings, the inherited values.

    With the exception of the "headers" and the "redacted header names", which are
    merged with the inherited ones, if an override is provided (even if it is None),
    it completely replaces the inherited value.

    Attributes:
        callers: an iterable of "caller identities" to be used in identifying the
            caller, through the User-Agent header. Each caller identity is
            a `(name, version)` 2-item tuple whose elements can be strings or None.
        headers: free-form dictionary of additional headers to employ when issuing
            requests. Passing a key with a value of None means that a certain
            header is suppressed when issuing the request.
        redacted_header_names: A set of (case-insensitive) strings denoting the headers
            that contain secrets, thus are to be masked when logging request details.
        api_key: an API key to authenticate requests. It is sent in the
            "Authorization" header as "ApiKey <api_key>".
        timeout_options: an instance of `TimeoutOptions` (see) to control the timeout
            behavior of requests.
    """

    callers: Sequence[CallerType] | UnsetType = _UNSET
    headers: dict[str, str | None] | UnsetType = _UNSET
    redacted_header_names: set[str] | UnsetType = _UNSET
    api_key: str | None | UnsetType = _UNSET
    timeout_options: TimeoutOptions | UnsetType = _UNSET

    def __init__(
        self,
        *,
        callers: Sequence[CallerType] | UnsetType = _UNSET,
        headers: dict[str, str | None] | UnsetType = _UNSET,
        redacted_header_names: Iterable[str] | UnsetType = _UNSET,
        api_key: str | None | UnsetType = _UNSET,
        timeout_options: TimeoutOptions | UnsetType = _UNSET,
    ) -> None:
        self.callers = callers
        self.headers = headers
        self.redacted_header_names = (
            _UNSET
            if isinstance(redacted_header_names, UnsetType)
            else set(redacted_header_names)
        )
        self.api_key = api_key
        self.timeout_options = timeout_options

    def __repr__(self) -> str:
        _api_key: str | None | UnsetType
        if isinstance(self.api_key, str):
            _api_key = FIXED_SECRET_PLACEHOLDER
        else:
            _api_key = self.api_key
        pieces = [
            f"{k}={v.__repr__()}"
            for k, v in (
                ("callers", self.callers),
                ("headers", self.headers),
                ("redacted_header_names", self.redacted_header_names),
                ("api_key", _api_key),
                ("timeout_options", self.timeout_options),
            )
            if not isinstance(v, UnsetType)
        ]
        return f"{self.__class__.__name__}({', '.join(pieces)})"


@dataclass(repr=False)
class FullAPIOptions(APIOptions):
    """
    The "full" version of `APIOptions`, with the guarantee that all of its members
    have defined values. This is what SearchClient and the scroll cursors have
    as their `.api_options` attribute. Refer to `APIOptions` for the meaning of
    each setting.
    """

    callers: Sequence[CallerType]
    headers: dict[str, str | None]
    redacted_header_names: set[str]
    api_key: str | None
    timeout_options: FullTimeoutOptions

    def __init__(
        self,
        *,
        callers: Sequence[CallerType],
        headers: dict[str, str | None],
        redacted_header_names: Iterable[str],
        api_key: str | None,
        timeout_options: FullTimeoutOptions,
    ) -> None:
        APIOptions.__init__(
            self,
            callers=callers,
            headers=headers,
            redacted_header_names=redacted_header_names,
            api_key=api_key,
            timeout_options=timeout_options,
        )

    def with_override(self, other: APIOptions | None | UnsetType) -> FullAPIOptions:
        """
        Given an "overriding" set of options, possibly not defined in all its
        attributes, apply the override logic and return a new full options object.

        Defined attributes completely replace the pre-existing ones, except for
        `headers` and `redacted_header_names`, in which cases merging takes place.

        Args:
            other: a not-necessarily-fully-specified options object. All its defined
                settings take precedence.
        """

        if isinstance(other, UnsetType) or other is None:
            return self

        headers: dict[str, str | None]
        redacted_header_names: set[str]
        timeout_options: FullTimeoutOptions

        if isinstance(other.headers, UnsetType):
            headers = self.headers
        else:
            headers = {**self.headers, **other.headers}
        if isinstance(other.redacted_header_names, UnsetType):
            redacted_header_names = self.redacted_header_names
        else:
            redacted_header_names = (
                self.redacted_header_names | other.redacted_header_names
            )
        if isinstance(other.timeout_options, TimeoutOptions):
            timeout_options = self.timeout_options.with_override(other.timeout_options)
        else:
            timeout_options = self.timeout_options

        return FullAPIOptions(
            callers=(
                other.callers
                if not isinstance(other.callers, UnsetType)
                else self.callers
            ),
            headers=headers,
            redacted_header_names=redacted_header_names,
            api_key=(
                other.api_key
                if not isinstance(other.api_key, UnsetType)
                else self.api_key
            ),
            timeout_options=timeout_options,
        )

    def request_headers(self) -> dict[str, str | None]:
        """
        The headers to send with each request: authentication, if any,
        followed by the free-form headers (which can override it).
        """
        auth_header: dict[str, str | None] = (
            {DEFAULT_AUTH_HEADER: f"{API_KEY_AUTH_PREFIX}{self.api_key}"}
            if self.api_key
            else {}
        )
        return {**auth_header, **self.headers}


defaultTimeoutOptions = FullTimeoutOptions(
    request_timeout_ms=DEFAULT_REQUEST_TIMEOUT_MS,
)


def defaultAPIOptions() -> FullAPIOptions:
    """
    Return the default APIOptions object, based on the
    'grand defaults' hardcoded in esscroll.
    """

    return FullAPIOptions(
        callers=[],
        headers={},
        redacted_header_names=set(),
        api_key=None,
        timeout_options=defaultTimeoutOptions,
    )
