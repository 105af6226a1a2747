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
Models for ``GET /info`` and ``GET /version``.
"""
from typing import Dict, List

from pydantic import Field

from .docker_model import DockerModel

# Stable synthetic engine identifier; Podman has no equivalent.
SYSTEM_ID = "5H6A:ME4Z:MBS5:AEUT:BDYB:MBHM:Y6UI:Y7CZ:DOGT:2CXX:D5RG:BKCP"


class RegistryServiceConfig(DockerModel):
    insecure_registry_cidrs: List[str] = Field(default=[], alias="InsecureRegistryCIDRs")
    index_configs: Dict[str, Dict] = {}
    mirrors: List[str] = []


class SystemInfo(DockerModel):
    """
    Engine description. Capability flags are always reported as available,
    since capability negotiation is not modeled.
    """
    id: str = Field(default=SYSTEM_ID, alias="ID")
    containers: int = 0
    images: int = 0
    driver: str = ""
    driver_status: List[List[str]] = []
    docker_root_dir: str = ""
    memory_limit: bool = True
    swap_limit: bool = True
    kernel_memory: bool = True
    cpu_cfs_period: bool = True
    cpu_cfs_quota: bool = True
    cpu_shares: bool = Field(default=True, alias="CPUShares")
    cpu_set: bool = Field(default=True, alias="CPUSet")
    oom_kill_disable: bool = True
    ipv4_forwarding: bool = Field(default=True, alias="IPv4Forwarding")
    bridge_nf_iptables: bool = True
    bridge_nf_ip6tables: bool = Field(default=True, alias="BridgeNfIp6tables")
    debug: bool = False
    system_time: str = ""
    cgroup_driver: str = "podman"
    kernel_version: str = ""
    operating_system: str = ""
    os_type: str = Field(default="", alias="OSType")
    architecture: str = ""
    ncpu: int = Field(default=0, alias="NCPU")
    mem_total: int = 0
    name: str = ""
    server_version: str = ""
    registry_config: RegistryServiceConfig = Field(default_factory=RegistryServiceConfig)


class Version(DockerModel):
    version: str
    api_version: str
    min_api_version: str = Field(alias="MinAPIVersion")
    git_commit: str = ""
    go_version: str = ""
    os: str = ""
    arch: str = ""
    kernel_version: str = "n/a"
    build_time: str = ""
    experimental: bool = False
