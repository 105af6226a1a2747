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
Models for registry search results and filters.
"""
from typing import Optional

from pydantic import BaseModel


class SearchResult(BaseModel):
    """
    One hit of ``GET /images/search``.
    Docker encodes search results with snake-case keys.
    """
    name: str
    description: str = ""
    is_automated: bool = False
    is_official: bool = False
    star_count: int = 0


class SearchFilter(BaseModel):
    """
    Search filters forwarded to the backend.
    The two flags are tri-state: None means "don't care".
    """
    is_automated: Optional[bool] = None
    is_official: Optional[bool] = None
    star_count: int = 0
