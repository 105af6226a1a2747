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
Unit tests for the system, search and build converters.
"""
import pytest
from dipod import API_VERSION, MIN_API_VERSION
from dipod.CONVERTERS.build_converter import to_build_info
from dipod.CONVERTERS.search_converter import to_backend_filter, to_search_filter, to_search_results
from dipod.CONVERTERS.system_converter import build_version, parse_insecure_cidrs, to_system_info
from dipod.ERRORS.classifier import BadRequestError, DecodeError
from dipod.MODELS.build import BuildRequest, Ulimit
from dipod.MODELS.system import SYSTEM_ID
from dipod.UTILS.filters import FilterArgs


class TestSystemInfo:
    """Tests for the info record."""

    def test_convert(self):
        info = to_system_info(
            {
                "host": {
                    "arch": "amd64",
                    "cpus": 8,
                    "hostname": "builder",
                    "kernel": "5.2.9",
                    "os": "linux",
                    "mem_total": 1024,
                    "distribution": {"distribution": "fedora", "version": "30"},
                },
                "store": {
                    "containers": 1,
                    "images": 3,
                    "graph_driver_name": "overlay",
                    "graph_root": "/var/lib/containers/storage",
                    "graph_status": {"backing_filesystem": "xfs"},
                },
                "podman": {"podman_version": "1.5.1"},
            }
        )
        docker = info.to_docker()
        assert docker["ID"] == SYSTEM_ID
        assert docker["NCPU"] == 8
        assert docker["MemTotal"] == 1024
        assert docker["OSType"] == "linux"
        assert docker["OperatingSystem"] == "fedora 30"
        assert docker["Driver"] == "overlay"
        assert docker["DriverStatus"][0] == ["Root Dir", "/var/lib/containers/storage"]
        assert ["Backing Filesystem", "xfs"] in docker["DriverStatus"]
        assert docker["ServerVersion"] == "1.5.1"
        assert docker["CgroupDriver"] == "podman"
        assert docker["MemoryLimit"] is True
        assert docker["IPv4Forwarding"] is True
        assert docker["SystemTime"].endswith("Z")

    def test_empty_reply(self):
        info = to_system_info({})
        assert info.ncpu == 0
        assert info.registry_config.insecure_registry_cidrs == []

    def test_mistyped_reply(self):
        with pytest.raises(DecodeError):
            to_system_info({"host": {"cpus": "eight"}})

    def test_insecure_registries_keep_only_networks(self, caplog):
        assert parse_insecure_cidrs(["10.1.0.0/16", "registry.local:5000", "192.168.1.7/24", "fd00::/8"]) == [
            "10.1.0.0/16",
            "192.168.1.0/24",
            "fd00::/8",
        ]
        assert "registry.local:5000" in caplog.text

    def test_registry_config_alias(self):
        info = to_system_info({"insecure_registries": ["127.0.0.0/8"]})
        assert info.to_docker()["RegistryConfig"]["InsecureRegistryCIDRs"] == ["127.0.0.0/8"]


class TestVersion:
    """Tests for the version record."""

    def test_build_version(self):
        version = build_version(API_VERSION, MIN_API_VERSION).to_docker()
        assert version["ApiVersion"] == "1.26"
        assert version["MinAPIVersion"] == "1.12"
        assert version["Version"].endswith("-dipod")
        assert version["KernelVersion"] == "n/a"
        assert version["Experimental"] is False


class TestSearch:
    """Tests for search filters and results."""

    def test_default_filter(self):
        search_filter = to_search_filter(FilterArgs())
        assert to_backend_filter(search_filter) == {"is_automated": None, "is_official": None, "star_count": 0}

    def test_flags_and_stars(self):
        search_filter = to_search_filter(
            FilterArgs({"is-official": ["true"], "is-automated": ["false"], "stars": ["3"]})
        )
        assert search_filter.is_official is True
        assert search_filter.is_automated is False
        assert search_filter.star_count == 3

    def test_stars_not_an_integer(self):
        with pytest.raises(BadRequestError):
            to_search_filter(FilterArgs({"stars": ["many"]}))

    def test_invalid_flag(self):
        with pytest.raises(BadRequestError):
            to_search_filter(FilterArgs({"is-official": ["maybe"]}))

    def test_results_keep_snake_case(self):
        results = to_search_results([{"name": "docker.io/library/alpine", "star_count": 9000, "is_official": True}])
        assert results[0].model_dump() == {
            "name": "docker.io/library/alpine",
            "description": "",
            "is_automated": False,
            "is_official": True,
            "star_count": 9000,
        }


class TestBuildInfo:
    """Tests for the backend build parameter."""

    def test_convert(self):
        request = BuildRequest(
            tags=["app:1", "app:latest"],
            build_args={"VERSION": "1"},
            labels={"tier": "web"},
            ulimits=[Ulimit(name="nofile", soft=1024, hard=2048)],
            memory=512,
            pull_parent=True,
            no_cache=True,
        )
        info = to_build_info(request, "/tmp/dipod-build123")
        assert info["output"] == "app:1"
        assert info["additionalTags"] == ["app:latest"]
        assert info["contextDir"] == "/tmp/dipod-build123"
        assert info["dockerfiles"] == ["Dockerfile"]
        assert info["buildArgs"] == {"VERSION": "1"}
        assert info["label"] == ["tier=web"]
        assert info["buildOptions"]["ulimit"] == ["nofile=1024:2048"]
        assert info["buildOptions"]["memory"] == 512
        assert info["nocache"] is True
        assert info["pullPolicy"] == "PullAlways"

    def test_pull_if_missing(self):
        info = to_build_info(BuildRequest(tags=["app"]), "/tmp/ctx")
        assert info["pullPolicy"] == "PullIfMissing"
        assert info["additionalTags"] == []

    def test_tag_required(self):
        with pytest.raises(ValueError, match="cannot build image without tag"):
            BuildRequest(tags=[""])
