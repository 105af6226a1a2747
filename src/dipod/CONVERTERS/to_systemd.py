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
Generates systemd units that start the proxy on first connection to the
Docker socket.
"""
import os
from typing import Dict, Optional

from jinja2 import Template

from ..MODELS.proxy_config import ProxyConfig

SOCKET_TEMPLATE = """[Unit]
Description=Docker Engine API proxy socket for Podman

[Socket]
ListenStream={{ socket_path }}
SocketMode={{ socket_mode }}

[Install]
WantedBy=sockets.target
"""

SERVICE_TEMPLATE = """[Unit]
Description=Docker Engine API proxy for Podman
Requires={{ unit_name }}.socket
After={{ unit_name }}.socket io.podman.socket

[Service]
Type=simple
ExecStart={{ executable }} serve --podman-address {{ podman_address }} --log-level {{ log_level }}
{% for k, v in environment.items() %}
Environment={{ k }}={{ v }}
{% endfor %}
Restart=on-failure

[Install]
WantedBy=multi-user.target
"""


class SystemdConverter:
    """
    Renders a socket/service unit pair for socket activation.
    """

    def __init__(self, config: ProxyConfig, executable: str = "/usr/local/bin/dipod", unit_name: str = "dipod"):
        """
        :param config: Settings baked into the units.
        :param executable: Path of the installed ``dipod`` command.
        :param unit_name: Base name of the generated units.
        """
        self.config = config
        self.executable = executable
        self.unit_name = unit_name

    def render(self, environment: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """
        :return: Unit file names mapped to their contents.
        """
        socket_unit = Template(SOCKET_TEMPLATE).render(
            socket_path=self.config.docker_socket,
            socket_mode=f"{self.config.socket_mode:04o}",
        )
        service_unit = Template(SERVICE_TEMPLATE, trim_blocks=True).render(
            unit_name=self.unit_name,
            executable=self.executable,
            podman_address=self.config.podman_address,
            log_level=self.config.log_level,
            environment=environment or {},
        )
        return {
            f"{self.unit_name}.socket": socket_unit,
            f"{self.unit_name}.service": service_unit,
        }

    def convert(self, output_dir: str = "systemd") -> str:
        """
        Writes the unit files.

        :param output_dir: The directory where unit files will be created.
        :return: The path to the output directory.
        """
        os.makedirs(output_dir, exist_ok=True)
        for name, content in self.render().items():
            with open(os.path.join(output_dir, name), "w") as f:
                f.write(content)
        return output_dir
