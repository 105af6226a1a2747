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
Loader for the proxy configuration.

Sources, lowest precedence first: model defaults, a YAML file, a ``.env``
file, ``DIPOD_*`` environment variables, explicit overrides.
"""
import os
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import dotenv_values
from pydantic import ValidationError

from ..MODELS.proxy_config import ProxyConfig

ENV_PREFIX = "DIPOD_"
CONFIG_PATH_VARIABLE = "DIPOD_CONFIG"


class ConfigError(ValueError):
    """The configuration could not be read or is invalid."""


class ConfigParser:
    """
    Parser for the proxy's YAML configuration file and environment.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None, dotenv_path: Optional[str] = None):
        """
        :param environ: Environment to read ``DIPOD_*`` variables from.
        :param dotenv_path: Optional ``.env`` file; its values yield to ``environ``.
        """
        self.environ = dict(os.environ if environ is None else environ)
        self.dotenv_path = dotenv_path

    def _environment(self) -> Dict[str, str]:
        env: Dict[str, str] = {}
        if self.dotenv_path and os.path.exists(self.dotenv_path):
            env.update({k: v for k, v in dotenv_values(self.dotenv_path).items() if v is not None})
        env.update(self.environ)
        return env

    def parse_from_string(self, content: str) -> Dict[str, Any]:
        """
        Parses YAML configuration content into a settings mapping.

        :param content: YAML text; an empty document yields no settings.
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid configuration file: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError("configuration file must contain a mapping")
        return {str(k).replace("-", "_"): v for k, v in data.items()}

    def parse(self, config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> ProxyConfig:
        """
        Builds the effective configuration.

        :param config_path: YAML file; defaults to ``$DIPOD_CONFIG`` if set.
        :param overrides: Settings that win over every other source; None values are ignored.
        :raises ConfigError: If a source is unreadable or a value is invalid.
        """
        env = self._environment()
        settings: Dict[str, Any] = {}

        config_path = config_path or env.get(CONFIG_PATH_VARIABLE)
        if config_path:
            try:
                with open(config_path, "r") as f:
                    settings.update(self.parse_from_string(f.read()))
            except OSError as e:
                raise ConfigError(f"cannot read configuration file {config_path}: {e}") from e

        for field_name in ProxyConfig.model_fields:
            value = env.get(ENV_PREFIX + field_name.upper())
            if value is not None and value != "":
                settings[field_name] = value

        for key, value in (overrides or {}).items():
            if value is not None:
                settings[key] = value

        try:
            return ProxyConfig(**settings)
        except ValidationError as e:
            raise ConfigError(f"invalid configuration: {e}") from e
