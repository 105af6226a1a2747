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
Converters for engine-wide records: system info and version.
"""
import ipaddress
import logging
import platform
from datetime import datetime, timezone
from typing import Any, Iterable, List

from .. import PROXY_VERSION
from ..MODELS.system import RegistryServiceConfig, SystemInfo, Version
from .decoding import as_mapping, optional, optional_int

logger = logging.getLogger(__name__)

# Python platform names to Docker architecture names.
ARCH_MAP = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "i386": "386",
    "i686": "386",
}


def parse_insecure_cidrs(entries: Iterable[str]) -> List[str]:
    """
    Keeps the entries that are CIDR networks, normalized to their network
    address. Anything else (host names, bare addresses) is dropped with a
    warning.
    """
    networks = []
    for entry in entries or []:
        if not isinstance(entry, str) or "/" not in entry:
            logger.warning(f"cidr parse fail cidr={entry!r}")
            continue
        try:
            networks.append(str(ipaddress.ip_network(entry.strip(), strict=False)))
        except ValueError:
            logger.warning(f"cidr parse fail cidr={entry!r}")
    return networks


def _rfc3339_nano(now: datetime) -> str:
    return now.isoformat(timespec="microseconds").replace("+00:00", "Z")


def to_system_info(info: Any) -> SystemInfo:
    """Converts a ``GetInfo`` reply."""
    info = as_mapping(info, "info")
    host = as_mapping(optional(info, "host", dict, "info", {}), "info host")
    store = as_mapping(optional(info, "store", dict, "info", {}), "info store")
    podman = as_mapping(optional(info, "podman", dict, "info", {}), "info podman")
    distribution = as_mapping(optional(host, "distribution", dict, "info host", {}), "info distribution")
    graph_status = as_mapping(optional(store, "graph_status", dict, "info store", {}), "info graph status")

    driver_status = [
        ["Root Dir", optional(store, "graph_root", str, "info store", "")],
        ["Options", optional(store, "graph_driver_options", str, "info store", "")],
        ["Backing Filesystem", optional(graph_status, "backing_filesystem", str, "info graph status", "")],
        ["Supports d_type", optional(graph_status, "supports_d_type", str, "info graph status", "")],
        ["Native Overlay Diff", optional(graph_status, "native_overlay_diff", str, "info graph status", "")],
    ]
    operating_system = " ".join(
        part
        for part in (
            optional(distribution, "distribution", str, "info distribution", ""),
            optional(distribution, "version", str, "info distribution", ""),
        )
        if part
    )

    return SystemInfo(
        architecture=optional(host, "arch", str, "info host", ""),
        ncpu=optional_int(host, "cpus", "info host"),
        mem_total=optional_int(host, "mem_total", "info host"),
        kernel_version=optional(host, "kernel", str, "info host", ""),
        name=optional(host, "hostname", str, "info host", ""),
        os_type=optional(host, "os", str, "info host", ""),
        operating_system=operating_system,
        containers=optional_int(store, "containers", "info store"),
        images=optional_int(store, "images", "info store"),
        driver=optional(store, "graph_driver_name", str, "info store", ""),
        driver_status=driver_status,
        docker_root_dir=optional(store, "run_root", str, "info store", ""),
        server_version=optional(podman, "podman_version", str, "info podman", ""),
        system_time=_rfc3339_nano(datetime.now(timezone.utc)),
        registry_config=RegistryServiceConfig(
            insecure_registry_cidrs=parse_insecure_cidrs(optional(info, "insecure_registries", list, "info", [])),
        ),
    )


def build_version(api_version: str, min_api_version: str) -> Version:
    """The proxy's own version record; does not touch the backend."""
    machine = platform.machine().lower()
    return Version(
        version=f"{PROXY_VERSION}-dipod",
        api_version=api_version,
        min_api_version=min_api_version,
        go_version=f"python{platform.python_version()}",
        os=platform.system().lower(),
        arch=ARCH_MAP.get(machine, machine),
    )