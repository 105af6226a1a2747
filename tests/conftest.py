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
Shared fixtures: an in-memory stand-in for the Podman varlink service and
a Flask test client wired to it.
"""
import json

import pytest
import varlink

from dipod.BACKEND.errors import BackendError
from dipod.BACKEND.podman_client import PodmanClient, ReplyStream
from dipod.MODELS.proxy_config import ProxyConfig
from dipod.SERVER.app import create_app


def image_not_found(name):
    return BackendError.from_varlink(
        varlink.VarlinkError(
            {
                "error": "io.podman.ImageNotFound",
                "parameters": {"id": name, "reason": f"{name}: image not known"},
            }
        )
    )


INSPECT_DOCUMENT = {
    "Id": "sha256:8a2f",
    "Digest": "sha256:77aa",
    "RepoTags": ["docker.io/library/alpine:3.18"],
    "RepoDigests": ["docker.io/library/alpine@sha256:77aa"],
    "Parent": "",
    "Comment": "",
    "Created": "2023-06-14T20:41:58.502149438Z",
    "Config": {
        "Env": ["PATH=/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"],
        "Cmd": ["/bin/sh"],
        "ExposedPorts": {"80/tcp": {}},
        "Labels": {"maintainer": "ops"},
    },
    "Version": "20.10.23",
    "Author": "",
    "Architecture": "amd64",
    "Os": "linux",
    "Size": 7334023,
    "VirtualSize": 7334023,
    "GraphDriver": {"Name": "overlay", "Data": {"UpperDir": "/var/lib/containers/storage/overlay/ab/diff"}},
    "RootFS": {"Type": "layers", "Layers": ["sha256:aaa", "sha256:bbb"]},
}


class FakePodmanClient(PodmanClient):
    """
    Serves canned replies and records every call.

    Streaming replies are lists of batches; an exception in the list is
    raised when the stream reaches it. ``failures`` maps a varlink method
    name to the exception that call should raise.
    """

    def __init__(self):
        super().__init__("unix:/nonexistent/io.podman")
        self.images = [
            {
                "id": "8a2f",
                "parentId": "",
                "repoTags": ["docker.io/library/alpine:3.18", "docker.io/library/alpine:latest"],
                "repoDigests": ["docker.io/library/alpine@sha256:77aa"],
                "created": "2023-06-14T20:41:58.502149438Z",
                "size": 7334023,
                "virtualSize": 7334023,
                "containers": 1,
                "labels": {"maintainer": "ops", "tier": "base"},
            },
            {
                "id": "c0ff",
                "parentId": "8a2f",
                "repoTags": None,
                "repoDigests": None,
                "created": "yesterday",
                "size": 1024,
                "virtualSize": 2048,
                "containers": 0,
                "labels": None,
            },
        ]
        self.inspect = {"alpine:3.18": json.dumps(INSPECT_DOCUMENT)}
        self.history = {
            "alpine:3.18": [
                {
                    "id": "8a2f",
                    "created": "2023-06-14T20:41:58Z",
                    "createdBy": '/bin/sh -c #(nop)  CMD ["/bin/sh"]',
                    "tags": ["alpine:3.18"],
                    "size": 0,
                    "comment": "",
                },
                {
                    "id": "<missing>",
                    "created": "2023-06-14T20:41:57Z",
                    "createdBy": "/bin/sh -c #(nop) ADD file:1da7 in / ",
                    "tags": None,
                    "size": 7334023,
                    "comment": "",
                },
            ]
        }
        self.search_results = [
            {
                "name": "docker.io/library/alpine",
                "description": "A minimal Docker image",
                "is_official": True,
                "is_automated": False,
                "star_count": 9000,
            },
        ]
        self.info = {
            "host": {
                "arch": "amd64",
                "cpus": 4,
                "hostname": "builder",
                "kernel": "5.2.9-200.fc30.x86_64",
                "os": "linux",
                "mem_total": 8251490304,
                "distribution": {"distribution": "fedora", "version": "30"},
            },
            "store": {
                "containers": 2,
                "images": 5,
                "graph_driver_name": "overlay",
                "graph_driver_options": "overlay.mountopt=nodev",
                "graph_root": "/var/lib/containers/storage",
                "graph_status": {
                    "backing_filesystem": "extfs",
                    "native_overlay_diff": "true",
                    "supports_d_type": "true",
                },
                "run_root": "/var/run/containers/storage",
            },
            "podman": {"podman_version": "1.5.1"},
            "insecure_registries": ["10.1.0.0/16", "registry.local:5000", "192.168.1.7/24"],
        }
        self.pull_batches = [
            {"logs": ["Trying to pull docker.io/library/alpine:3.18...\n"], "id": ""},
            {"logs": ["Copying blob 31e352740f53 done\n", "Writing manifest to image destination\n"], "id": ""},
            {"logs": [], "id": "8a2f"},
        ]
        self.build_batches = [
            {"logs": ["STEP 1: FROM alpine\n"], "id": ""},
            {"logs": ["STEP 2: COMMIT app\n"], "id": "d34d"},
        ]
        self.export_payload = b"fake-archive-bytes"
        self.build_context_path = None
        self.build_context_bytes = None
        self.calls = []
        self.failures = {}

    def methods_called(self):
        return [method for method, _ in self.calls]

    def _record(self, method, *args):
        self.calls.append((method, args))
        failure = self.failures.get(method)
        if failure is not None:
            raise failure

    def get_version(self):
        self._record("GetVersion")
        return {"version": "1.5.1"}

    def get_info(self):
        self._record("GetInfo")
        return self.info

    def list_images(self):
        self._record("ListImages")
        return self.images

    def inspect_image(self, name):
        self._record("InspectImage", name)
        if name not in self.inspect:
            raise image_not_found(name)
        return self.inspect[name]

    def history_image(self, name):
        self._record("HistoryImage", name)
        if name not in self.history:
            raise image_not_found(name)
        return self.history[name]

    def remove_image(self, name, force=False):
        self._record("RemoveImage", name, force)
        if name not in self.inspect:
            raise image_not_found(name)
        return "8a2f"

    def tag_image(self, name, tagged):
        self._record("TagImage", name, tagged)
        if name not in self.inspect:
            raise image_not_found(name)
        return "8a2f"

    def search_images(self, query, limit, search_filter):
        self._record("SearchImages", query, limit, search_filter)
        return self.search_results

    def export_image(self, name, destination, compress, tags):
        self._record("ExportImage", name, destination, compress, tags)
        path = destination.split(":", 1)[1]
        with open(path, "wb") as f:
            f.write(self.export_payload)
        return "8a2f"

    def _stream(self, batches, reply_field):
        def replies():
            for batch in batches:
                if isinstance(batch, Exception):
                    raise batch
                yield {reply_field: batch}

        return ReplyStream(replies(), reply_field)

    def pull_image(self, name):
        self._record("PullImage", name)
        return self._stream(self.pull_batches, "reply")

    def build_image(self, build_info):
        self._record("BuildImage", build_info)
        self.build_context_path = build_info["contextDir"]
        with open(build_info["contextDir"], "rb") as f:
            self.build_context_bytes = f.read()
        return self._stream(self.build_batches, "image")

    def close(self):
        self.calls.append(("close", ()))


@pytest.fixture
def fake_podman():
    return FakePodmanClient()


@pytest.fixture
def proxy_config(tmp_path):
    staging = tmp_path / "staging"
    staging.mkdir()
    return ProxyConfig(temp_dir=str(staging))


@pytest.fixture
def app(fake_podman, proxy_config):
    return create_app(fake_podman, proxy_config)


@pytest.fixture
def client(app):
    return app.test_client()

