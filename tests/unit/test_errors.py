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
Unit tests for backend errors and their classification.
"""
import logging

import pytest
import varlink
from dipod.BACKEND.errors import BackendError, BackendErrorKind
from dipod.ERRORS.classifier import (
    BadRequestError,
    DecodeError,
    ErrorCategory,
    InternalError,
    NotFoundError,
    NotImplementedApiError,
    classify,
)


def varlink_error(name, **parameters):
    return varlink.VarlinkError({"error": name, "parameters": parameters})


class TestBackendError:
    """Tests for converting varlink errors."""

    def test_not_found(self):
        error = BackendError.from_varlink(varlink_error("io.podman.ImageNotFound", id="ghost", reason="ghost: image not known"))
        assert error.kind is BackendErrorKind.NOT_FOUND
        assert error.message == "ghost: image not known"
        assert error.error_name == "io.podman.ImageNotFound"

    def test_other_errors_fail(self):
        error = BackendError.from_varlink(varlink_error("io.podman.ErrorOccurred", reason="disk full"))
        assert error.kind is BackendErrorKind.FAILED
        assert error.message == "disk full"

    def test_without_reason(self):
        error = BackendError.from_varlink(varlink_error("org.varlink.service.InvalidParameter", parameter="name"))
        assert error.kind is BackendErrorKind.FAILED
        assert error.reason is None
        assert "org.varlink.service.InvalidParameter" in error.message

    def test_transport(self):
        error = BackendError.from_transport(ConnectionRefusedError("refused"))
        assert error.kind is BackendErrorKind.TRANSPORT
        assert "refused" in error.message


class TestClassify:
    """Tests for mapping failures to Docker API errors."""

    @pytest.mark.parametrize(
        "error, status",
        [
            (BadRequestError("bad"), 400),
            (NotFoundError("gone"), 404),
            (NotImplementedApiError("nope"), 501),
            (InternalError("boom"), 500),
            (DecodeError("missing field"), 500),
        ],
    )
    def test_api_errors_pass_through(self, error, status):
        classified = classify(error, "test")
        assert classified is error
        assert classified.status_code == status

    def test_backend_not_found(self):
        error = BackendError(BackendErrorKind.NOT_FOUND, "io.podman.ImageNotFound: x", reason="x: image not known")
        classified = classify(error, "image inspect", name="x")
        assert isinstance(classified, NotFoundError)
        assert classified.to_dict() == {"message": "x: image not known"}

    @pytest.mark.parametrize("kind", [BackendErrorKind.FAILED, BackendErrorKind.TRANSPORT])
    def test_backend_failures_are_internal(self, kind):
        classified = classify(BackendError(kind, "it broke"), "image list")
        assert classified.category is ErrorCategory.INTERNAL
        assert classified.status_code == 500

    def test_unexpected_exception(self):
        classified = classify(KeyError("k"), "image list")
        assert isinstance(classified, InternalError)

    def test_logs_fields(self, caplog):
        with caplog.at_level(logging.WARNING):
            classify(NotFoundError("ghost: image not known"), "image inspect", name="ghost:latest")
        assert "image inspect fail name=ghost:latest category=not_found: ghost: image not known" in caplog.text
        assert caplog.records[-1].levelno == logging.ERROR

    def test_bad_request_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            classify(BadRequestError("empty target"), "image tag")
        assert caplog.records[-1].levelno == logging.WARNING
