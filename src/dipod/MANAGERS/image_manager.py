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
Image operations: list, inspect, history, tag, delete, search, export
and pull, each fulfilled by the Podman backend.
"""
import logging
from typing import BinaryIO, List, Optional

from ..BACKEND.podman_client import PodmanClient
from ..CONVERTERS.image_converter import (
    decode_image_inspect,
    to_history_entries,
    to_image_summaries,
)
from ..CONVERTERS.search_converter import (
    to_backend_filter,
    to_search_filter,
    to_search_results,
)
from ..ERRORS.classifier import (
    BadRequestError,
    NotImplementedApiError,
    classify,
)
from ..MODELS.image import (
    HistoryEntry,
    ImageDeleteResponseItem,
    ImageInspect,
    ImageSummary,
)
from ..MODELS.search import SearchResult
from ..REGISTRY.image_reference import ImageReference, canonical_pull_name
from ..STREAMING.bridge import StreamingBridge
from ..UTILS.filters import FilterArgs
from ..UTILS.staging import StagedFile

logger = logging.getLogger(__name__)

ARCHIVE_TRANSPORT = "docker-archive:"


class ImageManager:
    """
    Translates Docker image operations into Podman calls.
    Stateless between requests; the backend client is shared.
    """

    def __init__(self, client: PodmanClient, temp_dir: Optional[str] = None):
        """
        :param client: The process-wide backend client.
        :param temp_dir: Where export archives are staged.
        """
        self.client = client
        self.temp_dir = temp_dir

    def list_images(self, filters: str = "", all_images: bool = False) -> List[ImageSummary]:
        """
        Lists images, applying ``label`` and ``reference`` filters.

        :param filters: JSON filters from the query string.
        :param all_images: Intermediate images are not supported.
        """
        if all_images:
            raise classify(NotImplementedApiError("listing intermediate images is not implemented"), "image list")
        try:
            filter_args = FilterArgs.from_json(filters)
        except ValueError as e:
            raise classify(BadRequestError(f"invalid filters: {e}"), "image list", filters=filters) from e

        try:
            return to_image_summaries(self.client.list_images(), filter_args)
        except Exception as e:
            raise classify(e, "image list", filters=filters) from e

    def inspect_image(self, name: str) -> ImageInspect:
        try:
            return decode_image_inspect(self.client.inspect_image(name))
        except Exception as e:
            raise classify(e, "image inspect", name=name) from e

    def image_history(self, name: str) -> List[HistoryEntry]:
        try:
            return to_history_entries(self.client.history_image(name))
        except Exception as e:
            raise classify(e, "image history", name=name) from e

    def tag_image(self, name: str, repository: str, tag: str = "") -> str:
        """
        Adds ``repository[:tag]`` to an image.

        :return: The backend's image id.
        """
        target = repository
        if tag:
            target += ":" + tag
        if not target:
            raise classify(BadRequestError("empty target"), "image tag", source=name, target=target)

        logger.debug(f"image tag source={name} target={target}")
        try:
            return self.client.tag_image(name, target)
        except Exception as e:
            raise classify(e, "image tag", source=name, target=target) from e

    def delete_image(self, name: str, force: bool = False) -> List[ImageDeleteResponseItem]:
        try:
            deleted = self.client.remove_image(name, force)
        except Exception as e:
            raise classify(e, "image delete", name=name, force=force) from e
        return [ImageDeleteResponseItem(deleted=deleted)]

    def search_images(self, term: str, limit: Optional[int] = None, filters: str = "") -> List[SearchResult]:
        if not term:
            raise classify(BadRequestError("search term is required"), "image search")
        try:
            search_filter = to_search_filter(FilterArgs.from_json(filters))
        except ValueError as e:
            raise classify(BadRequestError(f"invalid filters: {e}"), "image search", term=term) from e
        except BadRequestError as e:
            raise classify(e, "image search", term=term, filters=filters) from e

        try:
            results = self.client.search_images(term, limit, to_backend_filter(search_filter))
            return to_search_results(results)
        except Exception as e:
            raise classify(e, "image search", term=term, limit=limit) from e

    def _export_tags(self, names: List[str]) -> List[str]:
        """
        Secondary tags to export alongside ``names[0]``. The backend exports
        one repository at a time, so every name must share its repository.
        """
        try:
            main = ImageReference.parse(names[0])
        except ValueError as e:
            raise BadRequestError(f"main name parse fail: {e}") from e

        tags = []
        for name in names[1:]:
            try:
                ref = ImageReference.parse(name)
            except ValueError as e:
                raise BadRequestError(f"secondary name parse fail: {e}") from e
            if not ref.tag or ref.digest:
                raise BadRequestError(f"secondary name parse fail: {name} has no tag")
            if ref.name != main.name:
                raise NotImplementedApiError("multiple image export not supported")
            tags.append(ref.tag)
        return tags

    def export_images(self, names: List[str]) -> BinaryIO:
        """
        Exports one or more tags of a single repository as a tarball.

        The archive is staged in a temporary file that is unlinked before
        this method returns; the returned handle keeps its data readable.
        """
        names = [n for n in names if n]
        if not names:
            raise classify(BadRequestError("no image names given"), "image export")
        try:
            tags = self._export_tags(names)
        except (BadRequestError, NotImplementedApiError) as e:
            raise classify(e, "image export", names=",".join(names)) from e

        try:
            with StagedFile("dipod-export", self.temp_dir) as staged:
                self.client.export_image(names[0], ARCHIVE_TRANSPORT + staged.path, False, tags)
                return staged.open()
        except Exception as e:
            raise classify(e, "image export", names=",".join(names)) from e

    def pull_image(self, from_image: str, tag: str = "") -> StreamingBridge:
        """
        Pulls an image, streaming the backend's progress.

        :param from_image: Image name, as sent by the Docker client.
        :param tag: Tag or digest; defaults to ``latest``.
        """
        if not from_image:
            raise classify(BadRequestError("fromImage is required"), "image pull")
        name = canonical_pull_name(from_image, tag)
        logger.debug(f"image pull name={name}")
        return StreamingBridge(lambda: self.client.pull_image(name), "image pull", name=name)
