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
Engine-wide operations: ping, version and system info.
"""
from ..BACKEND.podman_client import PodmanClient
from ..CONVERTERS.system_converter import build_version, to_system_info
from ..ERRORS.classifier import classify
from ..MODELS.proxy_config import ProxyConfig
from ..MODELS.system import SystemInfo, Version


class SystemManager:
    def __init__(self, client: PodmanClient, config: ProxyConfig):
        self.client = client
        self.config = config

    def ping(self) -> str:
        return "OK"

    def version(self) -> Version:
        return build_version(self.config.api_version, self.config.min_api_version)

    def info(self) -> SystemInfo:
        try:
            return to_system_info(self.client.get_info())
        except Exception as e:
            raise classify(e, "system info") from e
