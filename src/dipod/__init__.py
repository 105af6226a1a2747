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
Dipod - Docker Engine API proxy for Podman

Serves the image and system endpoints of the Docker Engine HTTP API on a
unix socket and fulfils them through Podman's varlink interface.
"""

__version__ = "0.1.0"
__author__ = "Michael Maillet, Damien Davison, Sacha Davison"
__license__ = "Apache-2.0"

# Docker Engine API versions understood by the proxy.
API_VERSION = "1.26"
MIN_API_VERSION = "1.12"

PROXY_VERSION = __version__
