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
Converter from a Docker build request to Podman's BuildInfo parameter.
"""
from typing import Any, Dict

from ..MODELS.build import BuildRequest

PULL_ALWAYS = "PullAlways"
PULL_IF_MISSING = "PullIfMissing"


def to_build_info(request: BuildRequest, context_dir: str) -> Dict[str, Any]:
    """
    Translates a build request into the ``BuildImage`` parameter.

    :param request: The validated build request.
    :param context_dir: Path of the staged build context tarball.
    """
    return {
        "additionalTags": request.additional_tags,
        "buildArgs": dict(request.build_args),
        "buildOptions": {
            "addHosts": list(request.extra_hosts),
            "cgroupParent": request.cgroup_parent,
            "cpuPeriod": request.cpu_period,
            "cpuQuota": request.cpu_quota,
            "cpuShares": request.cpu_shares,
            "cpusetCpus": request.cpuset_cpus,
            "cpusetMems": request.cpuset_mems,
            "memory": request.memory,
            "memorySwap": request.memory_swap,
            "ulimit": [str(u) for u in request.ulimits],
        },
        "contextDir": context_dir,
        "dockerfiles": list(request.dockerfile_paths),
        "forceRmIntermediateCtrs": request.force_remove,
        "nocache": request.no_cache,
        "squash": request.squash,
        "output": request.primary_tag,
        "label": [f"{name}={value}" for name, value in request.labels.items()],
        "pullPolicy": PULL_ALWAYS if request.pull_parent else PULL_IF_MISSING,
    }
