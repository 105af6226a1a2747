# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Errors raised by the Podman backend client.

Every failure surfaced by the varlink transport is converted into a
BackendError carrying an explicit kind, so callers never need to probe
exception types from the transport library.
"""
from enum import Enum
from typing import Any, Dict, Optional

import varlink


class BackendErrorKind(str, Enum):
    """Discriminant for backend failures."""

    NOT_FOUND = "not_found"
    FAILED = "failed"
    TRANSPORT = "transport"


class BackendError(Exception):
    """
    A failed backend call.

    :param kind: What went wrong.
    :param reason: Human-readable reason reported by the backend, if any.
    :param error_name: Fully qualified varlink error name, if any.
    """

    def __init__(
        self,
        kind: BackendErrorKind,
        message: str,
        reason: Optional[str] = None,
        error_name: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.reason = reason
        self.error_name = error_name

    @property
    def message(self) -> str:
        """The backend's reason when it gave one, else the generic error text."""
        if self.reason:
            return self.reason
        return str(self)

    @classmethod
    def from_varlink(cls, error: varlink.VarlinkError) -> "BackendError":
        """
        Converts a varlink error reply into a BackendError.

        Error names ending in ``NotFound`` (``io.podman.ImageNotFound`` and
        friends) mark a missing named resource.
        """
        name = error.error() or ""
        params: Dict[str, Any] = error.parameters() or {}
        reason = params.get("reason")
        if not isinstance(reason, str):
            reason = None

        short_name = name.rsplit(".", 1)[-1]
        if short_name.endswith("NotFound"):
            kind = BackendErrorKind.NOT_FOUND
        else:
            kind = BackendErrorKind.FAILED
        return cls(kind, f"{name}: {reason or params}", reason=reason, error_name=name)

    @classmethod
    def from_transport(cls, error: BaseException) -> "BackendError":
        """Wraps a socket or protocol failure."""
        return cls(BackendErrorKind.TRANSPORT, f"podman connection fail: {error}")

    def __repr__(self) -> str:
        return f"BackendError({self.kind.value}, {self.message!r})"
