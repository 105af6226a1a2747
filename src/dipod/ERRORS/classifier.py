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
Classification of failures into the Docker API error model.

Every failure is classified once, where it is first observed, into one of
four categories. The result is an ApiError that the HTTP layer renders as
``{"message": ...}`` with the category's status, or that the streaming
bridge emits in-band.
"""
import logging
from enum import Enum
from typing import Any

from ..BACKEND.errors import BackendError, BackendErrorKind

logger = logging.getLogger(__name__)


class ErrorCategory(str, Enum):
    """Docker API error kinds and their HTTP status codes."""

    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    NOT_IMPLEMENTED = "not_implemented"
    INTERNAL = "internal"

    @property
    def status_code(self) -> int:
        return {
            ErrorCategory.BAD_REQUEST: 400,
            ErrorCategory.NOT_FOUND: 404,
            ErrorCategory.NOT_IMPLEMENTED: 501,
            ErrorCategory.INTERNAL: 500,
        }[self]


class ApiError(Exception):
    """An error ready to be shown to a Docker client."""

    category = ErrorCategory.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return self.category.status_code

    def to_dict(self) -> dict:
        return {"message": self.message}


class BadRequestError(ApiError):
    """Client input rejected before any backend call."""

    category = ErrorCategory.BAD_REQUEST


class NotFoundError(ApiError):
    """The backend confirmed that a named resource does not exist."""

    category = ErrorCategory.NOT_FOUND


class NotImplementedApiError(ApiError):
    """Recognized but unsupported operation or combination of arguments."""

    category = ErrorCategory.NOT_IMPLEMENTED


class InternalError(ApiError):
    """Transport failures, unexpected backend errors and decode failures."""

    category = ErrorCategory.INTERNAL


class DecodeError(InternalError):
    """A backend payload is missing a required field or has the wrong shape."""


def _classify(error: BaseException) -> ApiError:
    if isinstance(error, ApiError):
        return error
    if isinstance(error, BackendError):
        if error.kind is BackendErrorKind.NOT_FOUND:
            return NotFoundError(error.message)
        return InternalError(error.message)
    return InternalError(str(error) or error.__class__.__name__)


def classify(error: BaseException, operation: str, **fields: Any) -> ApiError:
    """
    Maps an error to an ApiError and logs it with the request fields.

    Never raises.

    :param error: The failure as observed.
    :param operation: Name of the operation that failed, e.g. ``image inspect``.
    :param fields: Request fields to log alongside the error.
    :return: The classified error.
    """
    api_error = _classify(error)
    parts = [f"{operation} fail"]
    parts.extend(f"{key}={value}" for key, value in fields.items())
    parts.append(f"category={api_error.category.value}")
    log = logger.warning if api_error.category is ErrorCategory.BAD_REQUEST else logger.error
    log(f"{' '.join(parts)}: {api_error.message}")
    return api_error
