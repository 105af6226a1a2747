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
Models for the JSON message stream of build and pull responses.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

# Code carried by in-band stream errors.
STREAM_ERROR_CODE = 0xDEAD


class JSONError(BaseModel):
    code: int = STREAM_ERROR_CODE
    message: str


class JSONMessage(BaseModel):
    """
    One message of a Docker progress stream. Messages are written one after
    another as standalone JSON objects, never wrapped in an array.
    """
    stream: Optional[str] = None
    status: Optional[str] = None
    id: Optional[str] = None
    error: Optional[str] = None
    error_detail: Optional[JSONError] = Field(default=None, alias="errorDetail")
    aux: Optional[Dict[str, Any]] = None

    model_config = {"populate_by_name": True}

    @classmethod
    def from_error(cls, message: str) -> "JSONMessage":
        return cls(error=message, error_detail=JSONError(message=message))

    def encode(self) -> bytes:
        """Newline-terminated JSON with empty fields omitted."""
        return (self.model_dump_json(by_alias=True, exclude_none=True) + "\n").encode("utf-8")
