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
Flask application serving the Docker Engine API.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from .. import PROXY_VERSION
from ..BACKEND.podman_client import PodmanClient
from ..ERRORS.classifier import ApiError, classify
from ..MANAGERS.build_manager import BuildManager
from ..MANAGERS.image_manager import ImageManager
from ..MANAGERS.system_manager import SystemManager
from ..MODELS.proxy_config import ProxyConfig
from .middleware import VersionMiddleware
from .routes import docker_api

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Operation handlers shared by all requests."""

    images: ImageManager
    builds: BuildManager
    system: SystemManager


def _register_error_handlers(app: Flask):
    @app.errorhandler(ApiError)
    def api_error(error: ApiError):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def unhandled_route(error: HTTPException):
        # Anything the router does not know is reported as unimplemented.
        logger.warning(f"not implemented method={request.method} uri={request.full_path.rstrip('?')}")
        return jsonify({"message": "not implemented"}), 501

    @app.errorhandler(Exception)
    def unexpected_error(error: Exception):
        api_error = classify(error, "request", method=request.method, uri=request.path)
        return jsonify(api_error.to_dict()), api_error.status_code


def create_app(client: PodmanClient, config: Optional[ProxyConfig] = None) -> Flask:
    """
    Creates the proxy application.

    :param client: The process-wide backend client.
    :param config: Proxy settings; defaults apply when omitted.
    """
    config = config or ProxyConfig()
    app = Flask("dipod")
    app.json.sort_keys = False
    app.extensions["dipod"] = Services(
        images=ImageManager(client, config.temp_dir),
        builds=BuildManager(client, config.temp_dir),
        system=SystemManager(client, config),
    )
    app.register_blueprint(docker_api)
    _register_error_handlers(app)

    @app.after_request
    def engine_headers(response):
        response.headers["Api-Version"] = config.api_version
        response.headers["Docker-Experimental"] = "false"
        response.headers["Ostype"] = "linux"
        response.headers["Server"] = f"dipod/{PROXY_VERSION}"
        return response

    app.wsgi_app = VersionMiddleware(app.wsgi_app, config.min_api_version, config.api_version)
    return app
