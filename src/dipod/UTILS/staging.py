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
Request-scoped temporary files handed to the backend by path.
"""
import logging
import os
import shutil
import tempfile
from typing import BinaryIO, Optional

logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 64 * 1024


class StagedFile:
    """
    A temporary file that is removed exactly once, from whichever exit
    path reaches ``cleanup`` first.

    Usable as a context manager.
    """

    def __init__(self, prefix: str, temp_dir: Optional[str] = None):
        fd, self.path = tempfile.mkstemp(prefix=prefix, dir=temp_dir)
        os.close(fd)
        self._removed = False

    def write_from(self, source: BinaryIO) -> int:
        """
        Copies a stream into the file.

        :return: Number of bytes written.
        """
        with open(self.path, "wb") as f:
            shutil.copyfileobj(source, f, COPY_CHUNK_SIZE)
            return f.tell()

    def open(self) -> BinaryIO:
        return open(self.path, "rb")

    def cleanup(self):
        if self._removed:
            return
        self._removed = True
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"temp file remove fail path={self.path}: {e}")

    @property
    def removed(self) -> bool:
        return self._removed

    def __enter__(self) -> "StagedFile":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cleanup()
