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
Docker filter arguments and their evaluation against backend records.

Filters arrive as JSON in the ``filters`` query parameter, either in the
current form ``{"label": {"a=b": true}}`` or the legacy form
``{"label": ["a=b"]}``.
"""
import json
from typing import Dict, Iterable, List, Optional


class FilterArgs:
    """
    Parsed filter arguments: a mapping of filter key to a set of values.
    """

    def __init__(self, fields: Optional[Dict[str, Iterable[str]]] = None):
        self._fields: Dict[str, List[str]] = {}
        for key, values in (fields or {}).items():
            self._fields[key] = list(values)

    @classmethod
    def from_json(cls, raw: Optional[str]) -> "FilterArgs":
        """
        Parses the ``filters`` query parameter.

        :raises ValueError: If the JSON is malformed or not a filter mapping.
        """
        if not raw:
            return cls()
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("filters must be a JSON object")

        fields = {}
        for key, values in data.items():
            if isinstance(values, dict):
                fields[key] = [v for v, enabled in values.items() if enabled]
            elif isinstance(values, list):
                fields[key] = [str(v) for v in values]
            else:
                raise ValueError(f"invalid filter value for {key!r}")
        return cls(fields)

    def contains(self, key: str) -> bool:
        return key in self._fields

    def get(self, key: str) -> List[str]:
        return list(self._fields.get(key, []))

    def match_kv_list(self, key: str, sources: Optional[Dict[str, str]]) -> bool:
        """
        Matches ``key=value`` or bare ``key`` filters against a label map.
        Every filter value must match.
        """
        values = self._fields.get(key)
        if not values:
            return True
        if not sources:
            return False
        for value in values:
            name, sep, expected = value.partition("=")
            if name not in sources:
                return False
            if sep and sources[name] != expected:
                return False
        return True

    def __bool__(self) -> bool:
        return bool(self._fields)

    def __repr__(self) -> str:
        return f"FilterArgs({self._fields!r})"


def split_reference_pattern(pattern: str):
    """
    Splits ``name[:tag]`` into name and tag. A colon followed by a slash
    belongs to a registry port, not a tag.
    """
    name, sep, tag = pattern.rpartition(":")
    if not sep or "/" in tag:
        return pattern, ""
    return name, tag


def match_reference(patterns: List[str], repo_tags: Optional[List[str]]) -> bool:
    """
    True if any pattern matches any of the image's repository tags.

    A pattern without a tag matches every tag of that repository; a pattern
    with a tag must match it exactly.
    """
    for pattern in patterns:
        name, tag = split_reference_pattern(pattern)
        for repo_tag in repo_tags or []:
            if not repo_tag.startswith(name + ":"):
                continue
            if not tag or repo_tag.endswith(":" + tag):
                return True
    return False
