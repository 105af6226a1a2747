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
Base model for records serialized with Docker Engine API field names.
"""
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_pascal


class DockerModel(BaseModel):
    """
    Snake-case attributes, PascalCase JSON keys.
    Irregular Docker names (``NCPU``, ``RootFS``) are given as explicit aliases.
    """

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)

    def to_docker(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
