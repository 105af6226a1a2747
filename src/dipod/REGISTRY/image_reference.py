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
Image reference parsing and canonicalization.
Parses references like 'nginx:latest' or 'docker.io/library/nginx:1.21'.
"""

from typing import Optional
from dataclasses import dataclass


@dataclass
class ImageReference:
    """
    Parsed Docker image reference.

    Examples:
        - nginx -> docker.io/library/nginx (no tag)
        - nginx:1.21 -> docker.io/library/nginx:1.21
        - myuser/myimage:v1 -> docker.io/myuser/myimage:v1
        - gcr.io/project/image@sha256:abc123... -> gcr.io/project/image@sha256:abc123...
    """

    registry: str
    repository: str
    tag: Optional[str] = None
    digest: Optional[str] = None

    DEFAULT_REGISTRY = "docker.io"
    DEFAULT_TAG = "latest"
    OFFICIAL_NAMESPACE = "library"

    @classmethod
    def parse(cls, reference: str) -> "ImageReference":
        """
        Parse a Docker image reference string.

        Args:
            reference: Image reference string (e.g., 'nginx:latest', 'myuser/myimage:v1')

        Returns:
            Parsed ImageReference object. The tag is None unless given.

        Raises:
            ValueError: If the reference is empty or malformed.
        """
        if not reference:
            raise ValueError("Empty image reference")
        original = reference

        digest = None
        if "@" in reference:
            reference, digest = reference.rsplit("@", 1)
            if not digest or ":" not in digest:
                raise ValueError(f"Invalid digest in reference: {original}")

        tag = None
        last_colon = reference.rfind(":")
        # A colon followed by a slash separates a registry host from its port.
        if last_colon != -1 and "/" not in reference[last_colon + 1 :]:
            tag = reference[last_colon + 1 :]
            reference = reference[:last_colon]
            if not tag:
                raise ValueError(f"Empty tag in reference: {original}")

        if not reference or reference.startswith("/") or reference.endswith("/") or "//" in reference:
            raise ValueError(f"Invalid image name: {original}")
        if any(c.isspace() for c in reference):
            raise ValueError(f"Invalid image name: {original}")

        parts = reference.split("/")
        if len(parts) == 1:
            registry = cls.DEFAULT_REGISTRY
            repository = f"{cls.OFFICIAL_NAMESPACE}/{parts[0]}"
        elif "." in parts[0] or ":" in parts[0] or parts[0] == "localhost":
            registry = parts[0]
            repository = "/".join(parts[1:])
        else:
            registry = cls.DEFAULT_REGISTRY
            repository = reference

        return cls(registry=registry, repository=repository, tag=tag, digest=digest)

    @property
    def name(self) -> str:
        """Fully qualified repository name, without tag or digest."""
        return f"{self.registry}/{self.repository}"

    @property
    def full_name(self) -> str:
        """Fully qualified name including the tag or digest."""
        if self.digest:
            return f"{self.name}@{self.digest}"
        if self.tag:
            return f"{self.name}:{self.tag}"
        return self.name

    def __repr__(self) -> str:
        return f"ImageReference({self.full_name})"


def canonical_pull_name(image: str, tag: str = "") -> str:
    """
    Name handed to the backend for ``POST /images/create``.

    The Docker CLI strips the ``docker.io/`` prefix before sending a pull,
    even when the user typed it. A name without any slash is therefore a
    Docker Hub official image and is expanded to
    ``docker.io/library/<name>``; names with a slash are passed through.

    Args:
        image: Value of the ``fromImage`` parameter.
        tag: Value of the ``tag`` parameter; a digest is joined with '@'.
    """
    if not tag:
        # fromImage may already carry the tag or digest.
        if "@" in image or ":" in image.rsplit("/", 1)[-1]:
            name = image
        else:
            name = f"{image}:{ImageReference.DEFAULT_TAG}"
    elif ":" in tag:
        name = f"{image}@{tag}"
    else:
        name = f"{image}:{tag}"

    if "/" not in name:
        name = f"{ImageReference.DEFAULT_REGISTRY}/{ImageReference.OFFICIAL_NAMESPACE}/{name}"
    return name
