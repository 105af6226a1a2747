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
Parsers for Docker Engine API query strings.
"""
import json
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..ERRORS.classifier import BadRequestError
from ..MODELS.build import BuildRequest, Ulimit

FALSE_VALUES = ("", "0", "no", "false", "none")


def parse_bool(args, key: str, default: bool = False) -> bool:
    """Docker's boolean query values: anything but 0/no/false/none is true."""
    if key not in args:
        return default
    return args.get(key, "").strip().lower() not in FALSE_VALUES


def parse_int(args, key: str, default: Optional[int] = 0) -> Optional[int]:
    value = args.get(key, "")
    if value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise BadRequestError(f"invalid value for {key}: {value!r} is not an integer")


def parse_json(args, key: str, default: Any = None) -> Any:
    value = args.get(key, "")
    if not value:
        return default
    try:
        data = json.loads(value)
    except ValueError as e:
        raise BadRequestError(f"invalid JSON for {key}: {e}")
    # The Docker CLI encodes an unset list or map as null.
    if data is None:
        return default
    return data


def _string_map(args, key: str) -> Dict[str, str]:
    data = parse_json(args, key, {})
    if not isinstance(data, dict):
        raise BadRequestError(f"{key} must be a JSON object")
    # Build args with a null value are taken from the daemon's environment
    # by Docker; the backend has no such notion, so they are skipped.
    return {str(k): str(v) for k, v in data.items() if v is not None}


def _ulimits(args) -> List[Ulimit]:
    data = parse_json(args, "ulimits", [])
    if not isinstance(data, list):
        raise BadRequestError("ulimits must be a JSON array")
    ulimits = []
    for item in data:
        try:
            ulimits.append(Ulimit(name=item["Name"], soft=item["Soft"], hard=item["Hard"]))
        except (KeyError, TypeError, ValidationError) as e:
            raise BadRequestError(f"invalid ulimit {item!r}: {e}")
    return ulimits


def parse_build_request(args) -> BuildRequest:
    """
    Builds a BuildRequest from the ``POST /build`` query string.

    :param args: A multi-value mapping such as werkzeug's ``request.args``.
    :raises BadRequestError: If no tag is given or a parameter is malformed.
    """
    tags = [t for t in args.getlist("t") if t]
    if not tags:
        raise BadRequestError("cannot build image without tag")

    dockerfiles = [d for d in args.getlist("dockerfile") if d] or ["Dockerfile"]
    try:
        return BuildRequest(
            tags=tags,
            dockerfile_paths=dockerfiles,
            build_args=_string_map(args, "buildargs"),
            labels=_string_map(args, "labels"),
            ulimits=_ulimits(args),
            extra_hosts=[h for h in args.getlist("extrahosts") if h],
            cgroup_parent=args.get("cgroupparent", ""),
            cpu_shares=parse_int(args, "cpushares"),
            cpu_quota=parse_int(args, "cpuquota"),
            cpu_period=parse_int(args, "cpuperiod"),
            cpuset_cpus=args.get("cpusetcpus", ""),
            cpuset_mems=args.get("cpusetmems", ""),
            memory=parse_int(args, "memory"),
            memory_swap=parse_int(args, "memswap"),
            no_cache=parse_bool(args, "nocache"),
            pull_parent=parse_bool(args, "pull"),
            squash=parse_bool(args, "squash"),
            force_remove=parse_bool(args, "forcerm"),
        )
    except ValidationError as e:
        raise BadRequestError(f"invalid build request: {e.errors()[0].get('msg', e)}")
