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
Model for the proxy's own configuration.
"""
from typing import Optional

from pydantic import BaseModel, field_validator

from .. import API_VERSION, MIN_API_VERSION


class ProxyConfig(BaseModel):
    """
    Runtime settings. Loaded from defaults, an optional YAML file,
    ``DIPOD_*`` environment variables and command line options.
    """
    docker_socket: str = "/var/run/docker.sock"
    socket_mode: int = 0o660
    podman_address: str = "unix:/run/podman/io.podman"
    api_version: str = API_VERSION
    min_api_version: str = MIN_API_VERSION
    log_level: str = "DEBUG"
    connect_attempts: int = 5
    temp_dir: Optional[str] = None

    @field_validator("socket_mode", mode="before")
    @classmethod
    def _octal_mode(cls, mode):
        """
        Permission bits. Strings are octal ("0660", "0o660"). An unquoted
        YAML 660 arrives as the decimal int 660; integers above 0o777 whose
        digits are all octal are read as written.
        """
        written = mode
        if isinstance(mode, str):
            mode = int(mode, 8)
        elif isinstance(mode, int) and not isinstance(mode, bool) and mode > 0o777:
            if set(str(mode)) <= set("01234567"):
                mode = int(str(mode), 8)
        if isinstance(mode, int) and not 0 <= mode <= 0o7777:
            raise ValueError(f"invalid socket mode: {written}")
        return mode

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, level: str) -> str:
        return level.upper()

    @field_validator("api_version", "min_api_version")
    @classmethod
    def _check_version(cls, version: str) -> str:
        major, _, minor = version.partition(".")
        if not (major.isdigit() and minor.isdigit()):
            raise ValueError(f"invalid API version: {version}")
        return version
