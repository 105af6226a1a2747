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
WSGI middleware for Docker API version prefixes.

Docker clients prefix every path with ``/v<major>.<minor>``. The prefix is
checked against the supported range and stripped, so routes are declared
once, without it.
"""
import json
import re
from typing import Tuple

from werkzeug.wrappers import Response

VERSION_PREFIX = re.compile(r"^/v(\d+)\.(\d+)(/.*)?$")


def parse_version(version: str) -> Tuple[int, int]:
    major, _, minor = version.partition(".")
    return int(major), int(minor)


class VersionMiddleware:
    """
    Strips and validates the API version prefix.

    :param app: The wrapped WSGI application.
    :param min_version: Oldest supported API version, e.g. ``1.12``.
    :param max_version: Newest supported API version, e.g. ``1.26``.
    """

    def __init__(self, app, min_version: str, max_version: str):
        self.app = app
        self.min_version = min_version
        self.max_version = max_version
        self._min = parse_version(min_version)
        self._max = parse_version(max_version)

    def _reject(self, environ, start_response, message: str):
        response = Response(json.dumps({"message": message}) + "\n", status=400, mimetype="application/json")
        return response(environ, start_response)

    def __call__(self, environ, start_response):
        match = VERSION_PREFIX.match(environ.get("PATH_INFO", ""))
        if match:
            requested = (int(match.group(1)), int(match.group(2)))
            version = f"{requested[0]}.{requested[1]}"
            if requested > self._max:
                return self._reject(
                    environ,
                    start_response,
                    f"client version {version} is too new. Maximum supported API version is {self.max_version}",
                )
            if requested < self._min:
                return self._reject(
                    environ,
                    start_response,
                    f"client version {version} is too old. Minimum supported API version is "
                    f"{self.min_version}, please upgrade your client to a newer version",
                )
            environ["PATH_INFO"] = match.group(3) or "/"
        return self.app(environ, start_response)
