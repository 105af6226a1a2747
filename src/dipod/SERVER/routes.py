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
Docker Engine API routes.

Handlers only read the request and write the response; the managers do
the work and raise ApiError on failure.
"""
from flask import Blueprint, Response, current_app, jsonify, request
from werkzeug.wsgi import wrap_file

from ..ERRORS.classifier import BadRequestError, NotImplementedApiError, classify
from ..PARSERS.query_parser import parse_bool, parse_build_request, parse_int

docker_api = Blueprint("docker_api", __name__)

JSON_STREAM = "application/json"
TAR = "application/x-tar"


def _services():
    return current_app.extensions["dipod"]


def _json_list(models):
    return jsonify([m.to_docker() for m in models])


# system


@docker_api.route("/_ping", methods=["GET", "HEAD"])
def ping():
    response = Response(_services().system.ping(), mimetype="text/plain")
    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    response.headers["Pragma"] = "no-cache"
    return response


@docker_api.route("/version", methods=["GET"])
def version():
    return jsonify(_services().system.version().to_docker())


@docker_api.route("/info", methods=["GET"])
def system_info():
    return jsonify(_services().system.info().to_docker())


# images


@docker_api.route("/images/json", methods=["GET"])
def image_list():
    images = _services().images.list_images(
        filters=request.args.get("filters", ""),
        all_images=parse_bool(request.args, "all"),
    )
    return _json_list(images)


@docker_api.route("/build", methods=["POST"])
def image_build():
    try:
        build_request = parse_build_request(request.args)
    except BadRequestError as e:
        raise classify(e, "image build", tags=",".join(request.args.getlist("t"))) from e
    bridge = _services().builds.build(build_request, request.stream)
    return Response(bridge, mimetype=JSON_STREAM)


@docker_api.route("/images/create", methods=["POST"])
def image_create():
    if request.args.get("fromSrc"):
        raise classify(NotImplementedApiError("image import is not implemented"), "image create")
    bridge = _services().images.pull_image(
        request.args.get("fromImage", ""),
        request.args.get("tag", ""),
    )
    return Response(bridge, mimetype=JSON_STREAM)


@docker_api.route("/images/search", methods=["GET"])
def image_search():
    try:
        limit = parse_int(request.args, "limit", default=None)
    except BadRequestError as e:
        raise classify(e, "image search", term=request.args.get("term", "")) from e
    results = _services().images.search_images(
        request.args.get("term", ""),
        limit=limit,
        filters=request.args.get("filters", ""),
    )
    return jsonify([r.model_dump() for r in results])


@docker_api.route("/images/get", methods=["GET"])
def image_get_all():
    return _export(request.args.getlist("names"))


@docker_api.route("/images/<path:name>/get", methods=["GET"])
def image_get(name):
    return _export([name])


def _export(names):
    archive = _services().images.export_images(names)
    return Response(wrap_file(request.environ, archive), mimetype=TAR, direct_passthrough=True)


@docker_api.route("/images/<path:name>/json", methods=["GET"])
def image_inspect(name):
    return jsonify(_services().images.inspect_image(name).to_docker())


@docker_api.route("/images/<path:name>/history", methods=["GET"])
def image_history(name):
    return _json_list(_services().images.image_history(name))


@docker_api.route("/images/<path:name>/tag", methods=["POST"])
def image_tag(name):
    _services().images.tag_image(
        name,
        request.args.get("repo", ""),
        request.args.get("tag", ""),
    )
    return Response(status=201)


@docker_api.route("/images/<path:name>", methods=["DELETE"])
def image_delete(name):
    deleted = _services().images.delete_image(name, force=parse_bool(request.args, "force"))
    return _json_list(deleted)
