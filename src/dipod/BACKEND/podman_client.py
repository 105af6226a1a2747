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
Process-wide client for Podman's varlink interface.

Unary calls share one connection and are serialized by a lock, because a
varlink connection handler only carries one call at a time. Streaming
calls open a dedicated connection that lives as long as the stream, so a
long build or pull never holds up listing or inspecting images.
"""
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

import varlink
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .errors import BackendError, BackendErrorKind

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS = "unix:/run/podman/io.podman"
INTERFACE = "io.podman"

# Failures of the socket or of the wire protocol rather than of the call.
TRANSPORT_ERRORS = (OSError, ValueError, EOFError)


@dataclass
class ReplyBatch:
    """One reply of a streaming call: zero or more log lines plus the operation id."""

    logs: List[str] = field(default_factory=list)
    id: str = ""


class ReplyStream:
    """
    Finite, non-restartable sequence of ReplyBatch objects.

    Iterating blocks until the backend sends the next reply. Iteration ends
    after the reply that does not carry the continuation flag. Errors are
    raised as BackendError from the iteration that observes them.
    """

    def __init__(self, replies: Iterator[Dict[str, Any]], reply_field: str, connection: Any = None):
        self._replies = replies
        self._reply_field = reply_field
        self._connection = connection
        self._closed = False

    def __iter__(self) -> Iterator[ReplyBatch]:
        if self._closed:
            raise RuntimeError("reply stream already consumed")
        try:
            for reply in self._replies:
                payload = (reply or {}).get(self._reply_field) or {}
                yield ReplyBatch(logs=list(payload.get("logs") or []), id=payload.get("id") or "")
        except varlink.VarlinkError as e:
            raise BackendError.from_varlink(e) from e
        except TRANSPORT_ERRORS as e:
            raise BackendError.from_transport(e) from e
        finally:
            self.close()

    def close(self):
        """Abandons the stream and releases its connection."""
        if self._closed:
            return
        self._closed = True
        close_replies = getattr(self._replies, "close", None)
        if close_replies:
            close_replies()
        if self._connection is not None:
            try:
                self._connection.close()
            except TRANSPORT_ERRORS as e:
                logger.debug(f"podman stream close fail: {e}")


class PodmanClient:
    """
    Typed access to the ``io.podman`` varlink interface.

    Payloads are returned as the plain dictionaries decoded from the
    varlink reply; converting them to Docker records is the converters' job.
    """

    def __init__(self, address: str = DEFAULT_ADDRESS):
        """
        :param address: Varlink address of the Podman service.
        """
        self.address = address
        self._client: Optional[varlink.Client] = None
        self._connection = None
        self._client_lock = threading.Lock()
        self._call_lock = threading.Lock()

    def _get_client(self) -> varlink.Client:
        with self._client_lock:
            if self._client is None:
                self._client = varlink.Client(address=self.address)
            return self._client

    def _open(self):
        try:
            return self._get_client().open(INTERFACE, namespaced=False)
        except varlink.VarlinkError as e:
            raise BackendError.from_varlink(e) from e
        except TRANSPORT_ERRORS as e:
            raise BackendError.from_transport(e) from e

    def _drop_connection(self):
        if self._connection is not None:
            try:
                self._connection.close()
            except TRANSPORT_ERRORS as e:
                logger.debug(f"podman connection close fail: {e}")
            self._connection = None

    def call(self, method: str, *args: Any) -> Dict[str, Any]:
        """
        Performs a single request/reply call on the shared connection.

        :param method: Varlink method name, e.g. ``ListImages``.
        :return: Reply parameters.
        :raises BackendError: On any failure.
        """
        with self._call_lock:
            if self._connection is None:
                self._connection = self._open()
            try:
                return getattr(self._connection, method)(*args) or {}
            except varlink.VarlinkError as e:
                raise BackendError.from_varlink(e) from e
            except TRANSPORT_ERRORS as e:
                # The connection may be half-read; start over next time.
                self._drop_connection()
                raise BackendError.from_transport(e) from e

    def stream(self, method: str, reply_field: str, *args: Any) -> ReplyStream:
        """
        Starts a streaming call on a dedicated connection.

        :param method: Varlink method name, e.g. ``PullImage``.
        :param reply_field: Name of the reply parameter holding logs and id.
        """
        connection = self._open()
        try:
            replies = getattr(connection, method)(*args, _more=True)
        except varlink.VarlinkError as e:
            connection.close()
            raise BackendError.from_varlink(e) from e
        except TRANSPORT_ERRORS as e:
            connection.close()
            raise BackendError.from_transport(e) from e
        return ReplyStream(replies, reply_field, connection)

    def connect(self, attempts: int = 5) -> Dict[str, Any]:
        """
        Waits for the backend to answer, backing off between attempts.

        :param attempts: Number of connection attempts before giving up.
        :return: Podman's version record.
        """
        retryer = Retrying(
            stop=stop_after_attempt(max(attempts, 1)),
            wait=wait_exponential(multiplier=0.5, max=10),
            retry=retry_if_exception(
                lambda e: isinstance(e, BackendError) and e.kind is BackendErrorKind.TRANSPORT
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        version = retryer(self.get_version)
        logger.info(f"podman connected address={self.address} version={version.get('version', '')}")
        return version

    def close(self):
        """Closes the shared connection and the varlink client."""
        with self._call_lock:
            self._drop_connection()
        with self._client_lock:
            if self._client is not None:
                self._client.cleanup()
                self._client = None

    # io.podman methods

    def get_version(self) -> Dict[str, Any]:
        return self.call("GetVersion").get("version") or {}

    def get_info(self) -> Dict[str, Any]:
        return self.call("GetInfo").get("info") or {}

    def list_images(self) -> List[Dict[str, Any]]:
        return self.call("ListImages").get("images") or []

    def inspect_image(self, name: str) -> str:
        """Returns the inspect record serialized as a JSON string."""
        return self.call("InspectImage", name).get("image") or ""

    def history_image(self, name: str) -> List[Dict[str, Any]]:
        return self.call("HistoryImage", name).get("history") or []

    def remove_image(self, name: str, force: bool = False) -> str:
        return self.call("RemoveImage", name, force).get("image") or ""

    def tag_image(self, name: str, tagged: str) -> str:
        return self.call("TagImage", name, tagged).get("image") or ""

    def search_images(self, query: str, limit: Optional[int], search_filter: Dict[str, Any]) -> List[Dict[str, Any]]:
        return self.call("SearchImages", query, limit, search_filter).get("results") or []

    def export_image(self, name: str, destination: str, compress: bool, tags: List[str]) -> str:
        return self.call("ExportImage", name, destination, compress, tags).get("image") or ""

    def pull_image(self, name: str) -> ReplyStream:
        return self.stream("PullImage", "reply", name)

    def build_image(self, build_info: Dict[str, Any]) -> ReplyStream:
        return self.stream("BuildImage", "image", build_info)
