"""
Configuration module for Designate-DNS.
"""

import os
import re
from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from designate_dns.exceptions import ConfigError

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


class Config(BaseModel):
    """Configuration for Designate-DNS."""

    # OpenStack configuration; None falls back to OS_CLOUD / OS_REGION_NAME
    openstack_cloud: Optional[str] = None
    openstack_region_name: Optional[str] = None

    # Webhook API served to external-dns
    webhook_host: str = "127.0.0.1"
    webhook_port: int = Field(default=8888, ge=0, le=65535)

    # Status server (health and metrics)
    status_host: str = "0.0.0.0"
    status_port: int = Field(default=8080, ge=0, le=65535)

    dry_run: bool = False

    # Domain filtering
    domain_filter: List[str] = Field(default_factory=list)
    exclude_domains: List[str] = Field(default_factory=list)

    # Logging configuration
    log_level: str = "info"

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        if value.lower() not in LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(LOG_LEVELS)}")
        return value.lower()

    @classmethod
    def from_yaml(cls, config_path: Optional[Union[str, Path]] = None) -> "Config":
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            Config: Config instance populated with values from the YAML file

        Raises:
            ConfigError: If the file is missing, unreadable or invalid
        """
        default_paths = [
            Path("./designate-dns.yaml"),
            Path("./designate-dns.yml"),
            Path("/etc/designate-dns/config.yaml"),
        ]

        if config_path:
            paths = [Path(config_path)]
            if not paths[0].exists():
                raise ConfigError(f"Configuration file {config_path} does not exist")
        else:
            paths = default_paths

        config_data = {}
        for path in paths:
            if path.exists():
                try:
                    with open(path, "r") as f:
                        yaml_content = cls._substitute_env_vars(f.read())
                    config_data = yaml.safe_load(yaml_content) or {}
                except (OSError, yaml.YAMLError) as e:
                    raise ConfigError(f"Failed to read configuration {path}: {e}") from e
                break

        if not isinstance(config_data, dict):
            raise ConfigError("Configuration root must be a mapping")

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_data: dict) -> "Config":
        try:
            return cls(**cls._flatten_config(config_data))
        except (ValidationError, AttributeError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @staticmethod
    def _substitute_env_vars(content: str) -> str:
        """
        Substitute environment variables in the configuration content.

        Args:
            content: Configuration content

        Returns:
            str: Configuration content with environment variables substituted
        """
        # Pattern for ${ENV_VAR} or ${ENV_VAR:-default}
        pattern = r"\${([^}]+)}"

        def replace_env_var(match):
            env_var = match.group(1)
            if ":-" in env_var:
                env_var, default = env_var.split(":-", 1)
                return os.environ.get(env_var, default)
            return os.environ.get(env_var, "")

        return re.sub(pattern, replace_env_var, content)

    @staticmethod
    def _flatten_config(config_data: dict) -> dict:
        """
        Flatten nested configuration, leaving out unset keys so model
        defaults apply.

        Args:
            config_data: Nested configuration data

        Returns:
            dict: Flattened configuration data
        """
        sections = {
            "openstack": {"cloud": "openstack_cloud", "region_name": "openstack_region_name"},
            "webhook": {"host": "webhook_host", "port": "webhook_port"},
            "status": {"host": "status_host", "port": "status_port"},
            "domains": {"include": "domain_filter", "exclude": "exclude_domains"},
            "logging": {"level": "log_level"},
        }

        flat_config = {}
        for section, keys in sections.items():
            values = config_data.get(section) or {}
            for key, name in keys.items():
                if values.get(key) is not None:
                    flat_config[name] = values[key]

        if config_data.get("dry_run") is not None:
            flat_config["dry_run"] = config_data["dry_run"]

        return flat_config
