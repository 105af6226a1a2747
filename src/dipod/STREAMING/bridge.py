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
Bridges Podman's continuation replies into a Docker JSON message stream.

Each backend reply batch becomes one chunk of newline-terminated JSON
messages, handed to the WSGI server as one write so that clients see
progress as it happens. Errors are reported in-band after whatever has
already been sent; nothing is retried.
"""
import logging
from enum import Enum
from typing import Any, Callable, Iterator, Optional

from ..BACKEND.podman_client import ReplyBatch, ReplyStream
from ..ERRORS.classifier import InternalError, classify
from ..MODELS.stream import JSONMessage

logger = logging.getLogger(__name__)


class BridgeState(str, Enum):
    AWAITING_BATCH = "awaiting_batch"
    EMITTING = "emitting"
    TERMINATED_OK = "terminated_ok"
    TERMINATED_ERROR = "terminated_error"


def encode_batch(batch: ReplyBatch) -> bytes:
    """One message per log line, all carrying the batch's operation id."""
    return b"".join(
        JSONMessage(stream=line, id=batch.id or None).encode() for line in batch.logs
    )


class StreamingBridge:
    """
    WSGI response iterable for a streaming backend call.

    :param start: Starts the backend call; invoked on first iteration.
    :param operation: Operation name used when logging failures.
    :param cleanup: Called exactly once when the stream ends for any reason,
        including when the response is closed before it was iterated.
    :param fields: Request fields logged with failures.
    """

    def __init__(
        self,
        start: Callable[[], ReplyStream],
        operation: str,
        cleanup: Optional[Callable[[], None]] = None,
        **fields: Any,
    ):
        self._start = start
        self._cleanup = cleanup
        self._iterator = None
        self._finished = False
        self.operation = operation
        self.fields = fields
        self.state = BridgeState.AWAITING_BATCH

    def __iter__(self) -> Iterator[bytes]:
        if self._iterator is None:
            self._iterator = self._run()
        return self._iterator

    def _run(self) -> Iterator[bytes]:
        stream = None
        try:
            stream = self._start()
            for batch in stream:
                self.state = BridgeState.EMITTING
                chunk = encode_batch(batch)
                if chunk:
                    yield chunk
                self.state = BridgeState.AWAITING_BATCH
            self.state = BridgeState.TERMINATED_OK
        except GeneratorExit:
            # The client went away; stop reading from the backend.
            self.state = BridgeState.TERMINATED_ERROR
            classify(InternalError("client connection closed"), self.operation, **self.fields)
            return
        except Exception as e:
            self.state = BridgeState.TERMINATED_ERROR
            error = classify(e, self.operation, **self.fields)
            yield JSONMessage.from_error(error.message).encode()
        finally:
            if stream is not None:
                stream.close()
            self._finish()

    def _finish(self):
        if self._finished:
            return
        self._finished = True
        if self._cleanup is not None:
            self._cleanup()

    def close(self):
        """Called by the WSGI server when the response is done or abandoned."""
        if self._iterator is not None:
            self._iterator.close()
        self._finish()
