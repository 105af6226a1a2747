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
Models for image build requests.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, field_validator


class Ulimit(BaseModel):
    name: str
    soft: int
    hard: int

    def __str__(self) -> str:
        return f"{self.name}={self.soft}:{self.hard}"


class BuildRequest(BaseModel):
    """
    A build as requested by a Docker client.

    tags[0] names the image being built; the remaining tags are applied
    to it afterwards.
    """
    tags: List[str]
    dockerfile_paths: List[str] = ["Dockerfile"]
    build_args: Dict[str, str] = {}
    labels: Dict[str, str] = {}
    ulimits: List[Ulimit] = []
    extra_hosts: List[str] = []
    cgroup_parent: str = ""

    cpu_shares: int = 0
    cpu_quota: int = 0
    cpu_period: int = 0
    cpuset_cpus: str = ""
    cpuset_mems: str = ""
    memory: int = 0
    memory_swap: int = 0

    no_cache: bool = False
    pull_parent: bool = False
    squash: bool = False
    force_remove: bool = False

    @field_validator("tags")
    @classmethod
    def _require_tag(cls, tags: List[str]) -> List[str]:
        tags = [t for t in tags if t]
        if not tags:
            raise ValueError("cannot build image without tag")
        return tags

    @field_validator("dockerfile_paths")
    @classmethod
    def _require_dockerfile(cls, paths: List[str]) -> List[str]:
        if not paths:
            raise ValueError("at least one Dockerfile is required")
        return paths

    @property
    def primary_tag(self) -> str:
        return self.tags[0]

    @property
    def additional_tags(self) -> List[str]:
        return self.tags[1:]
