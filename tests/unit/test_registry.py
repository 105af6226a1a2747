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
Unit tests for the registry module.
"""
import pytest
from dipod.REGISTRY.image_reference import ImageReference, canonical_pull_name


class TestImageReference:
    """Tests for ImageReference parsing."""

    def test_parse_simple_name(self):
        """A bare name is an official Docker Hub image without a tag."""
        ref = ImageReference.parse("nginx")
        assert ref.registry == "docker.io"
        assert ref.repository == "library/nginx"
        assert ref.tag is None

    def test_parse_with_tag(self):
        ref = ImageReference.parse("nginx:1.21")
        assert ref.registry == "docker.io"
        assert ref.repository == "library/nginx"
        assert ref.tag == "1.21"

    def test_parse_user_image(self):
        ref = ImageReference.parse("myuser/myimage:v1")
        assert ref.registry == "docker.io"
        assert ref.repository == "myuser/myimage"
        assert ref.tag == "v1"

    def test_parse_full_reference(self):
        ref = ImageReference.parse("gcr.io/project/image:latest")
        assert ref.registry == "gcr.io"
        assert ref.repository == "project/image"
        assert ref.tag == "latest"

    def test_parse_with_digest(self):
        ref = ImageReference.parse("nginx@sha256:abc123")
        assert ref.repository == "library/nginx"
        assert ref.digest == "sha256:abc123"
        assert ref.tag is None

    def test_parse_localhost_registry(self):
        """A port on the registry host is not mistaken for a tag."""
        ref = ImageReference.parse("localhost:5000/myimage")
        assert ref.registry == "localhost:5000"
        assert ref.repository == "myimage"
        assert ref.tag is None

        ref = ImageReference.parse("localhost:5000/myimage:v1")
        assert ref.tag == "v1"

    @pytest.mark.parametrize("reference", ["", "nginx:", "/nginx", "nginx/", "a//b", "bad name", "nginx@nodigest"])
    def test_parse_invalid(self, reference):
        with pytest.raises(ValueError):
            ImageReference.parse(reference)

    def test_names(self):
        ref = ImageReference.parse("nginx:1.21")
        assert ref.name == "docker.io/library/nginx"
        assert ref.full_name == "docker.io/library/nginx:1.21"
        assert ImageReference.parse("myuser/myimage:v1").full_name == "docker.io/myuser/myimage:v1"
        assert ImageReference.parse("quay.io/podman/stable:v1.5").full_name == "quay.io/podman/stable:v1.5"
        assert ImageReference.parse("nginx@sha256:abc").full_name == "docker.io/library/nginx@sha256:abc"

    def test_same_repository_spelled_differently(self):
        """Short and fully qualified names of one repository compare equal."""
        assert ImageReference.parse("alpine:3.18").name == ImageReference.parse("docker.io/library/alpine:edge").name


class TestCanonicalPullName:
    """Tests for the name handed to the backend on pull."""

    def test_official_image_with_tag(self):
        assert canonical_pull_name("alpine", "3.18") == "docker.io/library/alpine:3.18"

    def test_default_tag(self):
        assert canonical_pull_name("alpine") == "docker.io/library/alpine:latest"

    def test_tag_already_in_name(self):
        assert canonical_pull_name("alpine:3.18") == "docker.io/library/alpine:3.18"

    def test_digest(self):
        assert canonical_pull_name("alpine", "sha256:77aa") == "docker.io/library/alpine@sha256:77aa"

    def test_namespaced_names_pass_through(self):
        assert canonical_pull_name("myuser/app", "v2") == "myuser/app:v2"
        assert canonical_pull_name("quay.io/podman/stable", "") == "quay.io/podman/stable:latest"

    def test_registry_port_is_not_a_tag(self):
        assert canonical_pull_name("localhost:5000/app") == "localhost:5000/app:latest"
