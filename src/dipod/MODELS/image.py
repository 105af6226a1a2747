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
Models for Docker image records: listings, inspect results and history.
"""
from typing import Dict, List, Optional

from pydantic import Field

from .docker_model import DockerModel

NONE_TAG = "<none>:<none>"
NONE_DIGEST = "<none>@<none>"


class ImageSummary(DockerModel):
    """
    One entry of ``GET /images/json``.
    RepoTags and RepoDigests are never empty; missing values become sentinels.
    """
    id: str
    parent_id: str = ""
    repo_tags: List[str] = [NONE_TAG]
    repo_digests: List[str] = [NONE_DIGEST]
    created: int = 0
    size: int = 0
    shared_size: int = 0
    virtual_size: int = 0
    labels: Dict[str, str] = {}
    containers: int = 0


class ContainerConfig(DockerModel):
    """
    Container configuration embedded in an image.
    ExposedPorts and Volumes are sets, encoded as objects with empty values.
    """
    hostname: str = ""
    domainname: str = ""
    user: str = ""
    attach_stdin: bool = False
    attach_stdout: bool = False
    attach_stderr: bool = False
    exposed_ports: Optional[Dict[str, Dict]] = None
    tty: bool = False
    open_stdin: bool = False
    stdin_once: bool = False
    env: Optional[List[str]] = None
    cmd: Optional[List[str]] = None
    args_escaped: bool = True
    image: str = ""
    volumes: Optional[Dict[str, Dict]] = None
    working_dir: str = ""
    entrypoint: Optional[List[str]] = None
    network_disabled: bool = False
    mac_address: str = ""
    on_build: Optional[List[str]] = None
    labels: Optional[Dict[str, str]] = None
    stop_signal: str = ""


class GraphDriverData(DockerModel):
    name: str
    data: Dict[str, str] = {}


class RootFS(DockerModel):
    type: str
    layers: List[str] = []


class ImageInspect(DockerModel):
    """Result of ``GET /images/{name}/json``."""
    id: str
    repo_tags: List[str] = []
    repo_digests: List[str] = []
    parent: str = ""
    comment: str = ""
    created: str = ""
    container: str = ""
    container_config: ContainerConfig = Field(default_factory=ContainerConfig)
    docker_version: str = ""
    author: str = ""
    config: ContainerConfig = Field(default_factory=ContainerConfig)
    architecture: str = ""
    os: str = ""
    size: int = 0
    virtual_size: int = 0
    graph_driver: GraphDriverData
    root_fs: RootFS = Field(alias="RootFS")


class HistoryEntry(DockerModel):
    """One layer of ``GET /images/{name}/history``, newest first."""
    id: str
    created: int = 0
    created_by: str = ""
    tags: Optional[List[str]] = None
    size: int = 0
    comment: str = ""


class ImageDeleteResponseItem(DockerModel):
    untagged: Optional[str] = None
    deleted: Optional[str] = None

    def to_docker(self):
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
