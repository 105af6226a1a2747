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
Field extraction from untyped backend payloads.

Each accessor states whether a field is required. A missing required
field, or any present field of the wrong shape, raises DecodeError.
"""
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from ..ERRORS.classifier import DecodeError

_MISSING = object()

TypeSpec = Union[Type, Tuple[Type, ...]]


def _type_name(kind: TypeSpec) -> str:
    if isinstance(kind, tuple):
        return "/".join(k.__name__ for k in kind)
    return kind.__name__


def _check(value: Any, kind: TypeSpec, key: str, where: str) -> Any:
    kinds = kind if isinstance(kind, tuple) else (kind,)
    # bool is an int subclass; never accept it as a number.
    if isinstance(value, bool) and bool not in kinds:
        raise DecodeError(f"{where}: field {key!r} must be {_type_name(kind)}, got bool")
    if not isinstance(value, kind):
        raise DecodeError(f"{where}: field {key!r} must be {_type_name(kind)}, got {type(value).__name__}")
    return value


def as_mapping(data: Any, where: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(f"{where}: expected an object, got {type(data).__name__}")
    return data


def required(data: Dict[str, Any], key: str, kind: TypeSpec, where: str) -> Any:
    value = data.get(key, _MISSING)
    if value is _MISSING or value is None:
        raise DecodeError(f"{where}: missing required field {key!r}")
    return _check(value, kind, key, where)


def optional(data: Dict[str, Any], key: str, kind: TypeSpec, where: str, default: Any = None) -> Any:
    value = data.get(key)
    if value is None:
        return default
    return _check(value, kind, key, where)


def optional_int(data: Dict[str, Any], key: str, where: str) -> int:
    return int(optional(data, key, (int, float), where, 0))


def optional_strings(data: Dict[str, Any], key: str, where: str) -> Optional[List[str]]:
    """A list of strings, or None if absent."""
    values = optional(data, key, list, where)
    if values is None:
        return None
    for value in values:
        _check(value, str, key, where)
    return list(values)


def optional_string_map(data: Dict[str, Any], key: str, where: str) -> Optional[Dict[str, str]]:
    """A string-to-string mapping, or None if absent."""
    values = optional(data, key, dict, where)
    if values is None:
        return None
    for value in values.values():
        _check(value, str, key, where)
    return dict(values)


def optional_set(data: Dict[str, Any], key: str, where: str) -> Optional[Dict[str, Dict]]:
    """A Go-style set encoded as an object; only the keys matter."""
    values = optional(data, key, dict, where)
    if values is None:
        return None
    return {name: {} for name in values}
