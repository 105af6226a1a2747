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
Listener setup: systemd socket activation or a unix socket of our own.
"""
import logging
import os
from typing import List, Mapping, Optional

from werkzeug.serving import BaseWSGIServer, make_server

from ..MODELS.proxy_config import ProxyConfig

logger = logging.getLogger(__name__)

# First file descriptor passed by systemd socket activation.
SD_LISTEN_FDS_START = 3


def activation_fds(environ: Optional[Mapping[str, str]] = None) -> List[int]:
    """
    File descriptors handed over by systemd, if any.

    Follows sd_listen_fds(3): descriptors are only ours when LISTEN_PID
    names this process.
    """
    environ = os.environ if environ is None else environ
    try:
        pid = int(environ.get("LISTEN_PID", "0"))
        count = int(environ.get("LISTEN_FDS", "0"))
    except ValueError:
        logger.warning("systemd activation fail: malformed LISTEN_PID/LISTEN_FDS")
        return []
    if pid != os.getpid() or count <= 0:
        return []
    return list(range(SD_LISTEN_FDS_START, SD_LISTEN_FDS_START + count))


class ProxyServer:
    """
    Threaded WSGI server bound to the Docker socket path. Each request is
    handled on its own thread.
    """

    def __init__(self, app, config: ProxyConfig, environ: Optional[Mapping[str, str]] = None):
        self.app = app
        self.config = config
        self.environ = environ
        self.server: Optional[BaseWSGIServer] = None
        self.activated = False

    def bind(self) -> BaseWSGIServer:
        fds = activation_fds(self.environ)
        if fds:
            self.activated = True
            if len(fds) > 1:
                logger.warning(f"systemd passed {len(fds)} sockets, using the first")
            self.server = make_server(f"unix://{self.config.docker_socket}", 0, self.app, threaded=True, fd=fds[0])
        else:
            self.server = make_server(f"unix://{self.config.docker_socket}", 0, self.app, threaded=True)
            os.chmod(self.config.docker_socket, self.config.socket_mode)
        logger.info(f"unix listen address={self.config.docker_socket} activated={self.activated}")
        return self.server

    def serve_forever(self):
        if self.server is None:
            self.bind()
        try:
            self.server.serve_forever()
        finally:
            self.close()

    def close(self):
        if self.server is None:
            return
        self.server.server_close()
        self.server = None
        # An activated socket belongs to systemd.
        if not self.activated and os.path.exists(self.config.docker_socket):
            os.remove(self.config.docker_socket)
