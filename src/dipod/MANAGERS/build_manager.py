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
Image builds from a Docker build context.
"""
import logging
from typing import BinaryIO, Optional

from ..BACKEND.podman_client import PodmanClient
from ..CONVERTERS.build_converter import to_build_info
from ..ERRORS.classifier import classify
from ..MODELS.build import BuildRequest
from ..STREAMING.bridge import StreamingBridge
from ..UTILS.staging import StagedFile

logger = logging.getLogger(__name__)


class BuildManager:
    """
    Runs builds on the backend.

    The backend takes the build context as a file path, so the uploaded
    tarball is staged to a temporary file first. The file is removed when
    the build stream ends, fails, or is abandoned.
    """

    def __init__(self, client: PodmanClient, temp_dir: Optional[str] = None):
        self.client = client
        self.temp_dir = temp_dir

    def build(self, request: BuildRequest, context: BinaryIO) -> StreamingBridge:
        """
        Starts a build.

        :param request: Validated build request.
        :param context: The request body: a tar archive of the build context.
        :return: Response iterable streaming the build output.
        """
        fields = {"tag": request.primary_tag, "dockerfile": ",".join(request.dockerfile_paths)}
        staged = StagedFile("dipod-build", self.temp_dir)
        try:
            size = staged.write_from(context)
        except Exception as e:
            staged.cleanup()
            raise classify(e, "image build", **fields) from e
        logger.debug(f"image build tag={request.primary_tag} context={staged.path} size={size}")

        build_info = to_build_info(request, staged.path)
        return StreamingBridge(
            lambda: self.client.build_image(build_info),
            "image build",
            cleanup=staged.cleanup,
            **fields,
        )
