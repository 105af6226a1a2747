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
Converters from Podman image payloads to Docker image records.
"""
import json
import logging
from typing import Any, Dict, List

from ..ERRORS.classifier import DecodeError
from ..MODELS.image import (
    NONE_DIGEST,
    NONE_TAG,
    ContainerConfig,
    GraphDriverData,
    HistoryEntry,
    ImageInspect,
    ImageSummary,
    RootFS,
)
from ..UTILS.filters import FilterArgs, match_reference
from ..UTILS.timestamps import to_unix
from .decoding import (
    as_mapping,
    optional,
    optional_int,
    optional_set,
    optional_string_map,
    optional_strings,
    required,
)

logger = logging.getLogger(__name__)


def _created(value: str, **fields) -> int:
    """Unix seconds, or 0 if the timestamp does not parse."""
    try:
        return to_unix(value)
    except ValueError as e:
        context = " ".join(f"{k}={v}" for k, v in fields.items())
        logger.warning(f"created parse fail created={value!r} {context}: {e}")
        return 0


def image_matches(src: Dict[str, Any], filters: FilterArgs) -> bool:
    """
    Evaluates ``label`` and ``reference`` filters against a raw backend
    image record, before any defaulting.
    """
    if filters.contains("label") and not filters.match_kv_list("label", src.get("labels")):
        return False
    if filters.contains("reference") and not match_reference(filters.get("reference"), src.get("repoTags")):
        return False
    return True


def to_image_summary(src: Any) -> ImageSummary:
    """
    Converts one ``ListImages`` entry.

    :raises DecodeError: If the record has no id or a mistyped field.
    """
    where = "image"
    src = as_mapping(src, where)
    image_id = required(src, "id", str, where)
    where = f"image {image_id}"

    repo_tags = optional_strings(src, "repoTags", where) or [NONE_TAG]
    repo_digests = optional_strings(src, "repoDigests", where) or [NONE_DIGEST]

    return ImageSummary(
        id=image_id,
        parent_id=optional(src, "parentId", str, where, ""),
        repo_tags=repo_tags,
        repo_digests=repo_digests,
        created=_created(optional(src, "created", str, where, ""), id=image_id),
        size=optional_int(src, "size", where),
        shared_size=0,
        virtual_size=optional_int(src, "virtualSize", where),
        labels=optional_string_map(src, "labels", where) or {},
        containers=optional_int(src, "containers", where),
    )


def to_image_summaries(images: List[Any], filters: FilterArgs) -> List[ImageSummary]:
    """Filters and converts a ``ListImages`` reply."""
    result = []
    for src in images:
        if not image_matches(as_mapping(src, "image"), filters):
            continue
        result.append(to_image_summary(src))
    return result


def _decode_config(data: Dict[str, Any], digest: str) -> ContainerConfig:
    where = "image config"
    config = as_mapping(required(data, "Config", dict, "image"), where)
    return ContainerConfig(
        image=digest,
        user=optional(config, "User", str, where, ""),
        env=optional_strings(config, "Env", where),
        cmd=optional_strings(config, "Cmd", where),
        entrypoint=optional_strings(config, "Entrypoint", where),
        working_dir=optional(config, "WorkingDir", str, where, ""),
        stop_signal=optional(config, "StopSignal", str, where, ""),
        exposed_ports=optional_set(config, "ExposedPorts", where),
        volumes=optional_set(config, "Volumes", where),
        labels=optional_string_map(config, "Labels", where),
        on_build=optional_strings(config, "OnBuild", where),
    )


def _decode_graph_driver(data: Dict[str, Any]) -> GraphDriverData:
    where = "image graph driver"
    driver = required(data, "GraphDriver", dict, "image")
    return GraphDriverData(
        name=required(driver, "Name", str, where),
        data=optional_string_map(driver, "Data", where) or {},
    )


def _decode_root_fs(data: Dict[str, Any]) -> RootFS:
    where = "image rootfs"
    root_fs = required(data, "RootFS", dict, "image")
    return RootFS(
        type=required(root_fs, "Type", str, where),
        layers=optional_strings(root_fs, "Layers", where) or [],
    )


def decode_image_inspect(payload: str) -> ImageInspect:
    """
    Decodes the JSON document returned by ``InspectImage``.

    Podman returns the inspect record as a JSON string rather than a typed
    value, so each field is extracted and checked on its own.

    :raises DecodeError: If the document is not JSON, or a required field
        (Id, Config, GraphDriver, RootFS) is missing or mistyped.
    """
    try:
        data = json.loads(payload)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"image inspect payload is not JSON: {e}") from e
    data = as_mapping(data, "image")

    image_id = required(data, "Id", str, "image")
    where = f"image {image_id}"
    digest = optional(data, "Digest", str, where, "")
    if digest.startswith("sha256:"):
        digest = digest[len("sha256:"):]

    config = _decode_config(data, digest)
    return ImageInspect(
        id=image_id,
        repo_tags=optional_strings(data, "RepoTags", where) or [],
        repo_digests=optional_strings(data, "RepoDigests", where) or [],
        parent=optional(data, "Parent", str, where, ""),
        comment=optional(data, "Comment", str, where, ""),
        created=optional(data, "Created", str, where, ""),
        container=digest,
        container_config=config.model_copy(deep=True),
        docker_version=optional(data, "Version", str, where, ""),
        author=optional(data, "Author", str, where, ""),
        config=config,
        architecture=optional(data, "Architecture", str, where, ""),
        os=optional(data, "Os", str, where, ""),
        size=optional_int(data, "Size", where),
        virtual_size=optional_int(data, "VirtualSize", where),
        graph_driver=_decode_graph_driver(data),
        root_fs=_decode_root_fs(data),
    )


def to_history_entries(history: List[Any]) -> List[HistoryEntry]:
    """Converts a ``HistoryImage`` reply, preserving the newest-first order."""
    entries = []
    for layer in history:
        layer = as_mapping(layer, "history")
        layer_id = required(layer, "id", str, "history")
        where = f"history {layer_id}"
        entries.append(
            HistoryEntry(
                id=layer_id,
                created=_created(optional(layer, "created", str, where, ""), id=layer_id),
                created_by=optional(layer, "createdBy", str, where, ""),
                tags=optional_strings(layer, "tags", where),
                size=optional_int(layer, "size", where),
                comment=optional(layer, "comment", str, where, ""),
            )
        )
    return entries

