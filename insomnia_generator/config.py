"""
Generator Configuration

The configuration payload is passed through protoc as the plugin parameter,
for example::

    protoc --insomniaenv_out=. \\
        --insomniaenv_opt='{"environments": {"Staging": "http://staging.example.com"}}' \\
        service.proto

It adds environments besides the two localhost ones to the exported workspace.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from insomnia_generator.exceptions import ConfigurationException

logger = logging.getLogger(__name__)

BASE_ENVIRONMENT_ID = "BaseEnvironment"
LOCALHOST_HTTPS_ID = "LocalhostHttps"
LOCALHOST_HTTP_ID = "LocalhostHttp"
RESERVED_ENVIRONMENT_IDS = frozenset(
    {BASE_ENVIRONMENT_ID, LOCALHOST_HTTPS_ID, LOCALHOST_HTTP_ID}
)


@dataclass
class GeneratorConfig:
    """Configuration for export generation."""

    # Extra environments, display name -> base URL
    environments: Dict[str, str] = field(default_factory=dict)

    # Built-in localhost environments
    localhost_port: int = 8000

    # Export envelope
    export_format: int = 3
    export_source: str = "protoc-gen-insomniaenv"

    # Serialization
    indent: str = "\t"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "GeneratorConfig":
        """
        Build a configuration from a decoded payload.

        Only the ``environments`` key is recognized; other keys are ignored.

        Raises:
            ConfigurationException: if the payload has the wrong shape
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigurationException(
                f"Configuration must be an object, got {type(data).__name__}"
            )

        environments = data.get("environments")
        if environments is None:
            environments = {}
        if not isinstance(environments, dict):
            raise ConfigurationException(
                "environments must map environment names to URLs",
                config_key="environments",
            )

        for name, url in environments.items():
            if not isinstance(name, str) or not isinstance(url, str):
                raise ConfigurationException(
                    f"Environment {name!r} must map a name to a URL string",
                    config_key=f"environments.{name}",
                )
            if name in RESERVED_ENVIRONMENT_IDS:
                raise ConfigurationException(
                    f"Environment name {name!r} is reserved",
                    config_key=f"environments.{name}",
                )

        return cls(environments=dict(environments))

    @classmethod
    def from_parameter(cls, parameter: Optional[str]) -> "GeneratorConfig":
        """
        Parse the plugin parameter.

        An absent or empty parameter yields the default configuration.

        Raises:
            ConfigurationException: if the parameter is not valid JSON
        """
        if not parameter:
            return cls()

        try:
            data = json.loads(parameter)
        except json.JSONDecodeError as e:
            raise ConfigurationException(f"Invalid configuration parameter: {e}")

        config = cls.from_dict(data)
        logger.debug(f"Parsed {len(config.environments)} extra environment(s)")
        return config

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "GeneratorConfig":
        """Load from a YAML or JSON file."""
        path = Path(path)

        try:
            with open(path) as f:
                if path.suffix in [".yaml", ".yml"]:
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationException(f"Invalid configuration file {path}: {e}")
        except OSError as e:
            raise ConfigurationException(f"Cannot read configuration file {path}: {e}")

        return cls.from_dict(data)

    @property
    def localhost_http_url(self) -> str:
        return f"http://localhost:{self.localhost_port}"

    @property
    def localhost_https_url(self) -> str:
        return f"https://localhost:{self.localhost_port}"
