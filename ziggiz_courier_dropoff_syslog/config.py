# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Configuration module for loading and parsing configuration files

# Standard library imports
import logging
import re

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

# Third-party imports
import yaml

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

# Local/package imports
from ziggiz_courier_dropoff_syslog.errors import ConfigurationError
from ziggiz_courier_dropoff_syslog.protocol.message import parse_facility, parse_severity

# Sentinel meaning "use the value from the server credentials"
CREDENTIAL_DEFAULT = "default"

VALID_PROTOCOLS = ["udp", "tcp"]
VALID_FRAMINGS = ["rfc3164", "rfc5424"]
VALID_TCP_FRAMINGS = ["octet_counting", "non_transparent"]


def _validate_choice(value: Any, valid: List[str], label: str) -> str:
    v = str(value).lower()
    if v not in valid:
        raise ValueError(f"Invalid {label}: {value}. Must be one of {valid}")
    return v


def _validate_framing(value: Any) -> str:
    # Boolean values follow the "RFC3164 (BSD)" option: True selects RFC 3164
    if isinstance(value, bool):
        return "rfc3164" if value else "rfc5424"
    return _validate_choice(value, VALID_FRAMINGS, "framing")


def _validate_port(value: int) -> int:
    if not 1 <= value <= 65535:
        raise ValueError(f"Invalid port: {value}. Must be between 1 and 65535")
    return value


class LoggerConfig(BaseModel):
    """
    Configuration for individual loggers.

    Attributes:
        name (str): Logger name.
        level (str): Logging level (default: "INFO").
        propagate (bool): Whether to propagate logs to parent (default: True).
    """

    name: str
    level: str = "INFO"
    propagate: bool = True


class SessionConfig(BaseModel):
    """
    Fully resolved, immutable settings of one forwarding session.

    Attributes:
        host (str): Syslog receiver address (IP or resolvable name).
        port (int): Receiver port (default: 514).
        protocol (str): "udp" or "tcp" (default: "udp").
        framing (str): Message layout, "rfc3164" or "rfc5424" (default: "rfc5424").
        local_hostname (str): HOSTNAME field of each message (default: "localhost").
        app_name (str): APP-NAME field, RFC 5424 only (default: "").
        tcp_framing (str): Stream framing for TCP, "octet_counting" or "non_transparent".
        restrict_facilities (bool): Reject facilities not offered to users (default: True).
    """

    model_config = ConfigDict(frozen=True)

    host: str
    port: int = 514
    protocol: str = "udp"
    framing: str = "rfc5424"
    local_hostname: str = "localhost"
    app_name: str = ""
    tcp_framing: str = "octet_counting"
    restrict_facilities: bool = True

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Validate that the host is not empty."""
        v = v.strip()
        if not v:
            raise ValueError("Host must not be empty")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate that the port is in the TCP/UDP port range."""
        return _validate_port(v)

    @field_validator("protocol")
    @classmethod
    def validate_protocol(cls, v: str) -> str:
        """Validate that the protocol is either UDP or TCP."""
        return _validate_choice(v, VALID_PROTOCOLS, "protocol")

    @field_validator("framing", mode="before")
    @classmethod
    def validate_framing(cls, v: Any) -> str:
        """Validate the message layout, accepting the boolean RFC 3164 option."""
        return _validate_framing(v)

    @field_validator("tcp_framing")
    @classmethod
    def validate_tcp_framing(cls, v: str) -> str:
        """Validate that the TCP framing mode is valid."""
        return _validate_choice(v, VALID_TCP_FRAMINGS, "TCP framing mode")


class ServerCredentials(BaseModel):
    """
    Stored connection settings for a syslog server.

    Attributes:
        host (str): Syslog server IP or hostname.
        port (int): Server port (default: 514).
        protocol (str): "udp" or "tcp" (default: "udp").
        rfc3164 (bool): Use RFC 3164 (BSD) instead of RFC 5424 (default: False).
            Stored credential payloads name this field "rfc".
    """

    model_config = ConfigDict(populate_by_name=True)

    host: str = ""
    port: int = 514
    protocol: str = "udp"
    rfc3164: bool = Field(default=False, alias="rfc")

    @field_validator("protocol")
    @classmethod
    def validate_protocol(cls, v: str) -> str:
        """Validate that the protocol is either UDP or TCP."""
        return _validate_choice(v, VALID_PROTOCOLS, "protocol")

    def as_session_params(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "protocol": self.protocol,
            "framing": self.rfc3164,
        }


def build_session_config(**params: Any) -> SessionConfig:
    """
    Build a SessionConfig, reporting invalid values as ConfigurationError.

    Raises:
        ConfigurationError: If a parameter is missing or invalid.
    """
    try:
        return SessionConfig(**params)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid session configuration: {e}") from e


def resolve_session_config(
    params: Mapping[str, Any], credentials: Optional[ServerCredentials] = None
) -> SessionConfig:
    """
    Resolve node parameters against server credentials into a SessionConfig.

    A parameter set to None or "default" takes the credential value. Connection
    parameters missing from params also come from the credentials when given.

    Args:
        params: Session parameters, possibly containing the "default" sentinel
        credentials: Optional stored server settings

    Returns:
        The resolved, validated session configuration

    Raises:
        ConfigurationError: If a default is requested without credentials, or
            the resolved configuration is invalid
    """
    defaults = credentials.as_session_params() if credentials else {}
    resolved: Dict[str, Any] = dict(defaults)

    for key, value in params.items():
        if value is None or value == CREDENTIAL_DEFAULT:
            if key not in defaults:
                raise ConfigurationError(
                    f"Parameter '{key}' uses the credential default, "
                    "but no server credentials provide it"
                )
            continue
        resolved[key] = value

    return build_session_config(**resolved)


class Config(BaseModel):
    """
    Main configuration class for the Ziggiz Courier Dropoff Syslog forwarder.

    This class defines all configuration options of the forwarder, including
    the destination, message defaults, logging and telemetry.
    """

    # Destination configuration
    host: str = ""  # Syslog receiver; required before forwarding
    port: int = 514
    protocol: str = "udp"  # "udp" or "tcp"
    framing: str = "rfc5424"  # "rfc3164" or "rfc5424"
    tcp_framing: str = "octet_counting"  # "octet_counting" or "non_transparent"
    local_hostname: str = "localhost"
    app_name: str = ""
    restrict_facilities: bool = True

    # Message defaults
    facility: int = 1  # User
    severity: int = 6  # Informational

    # Telemetry configuration
    enable_console_tracing: bool = False

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    loggers: List[LoggerConfig] = Field(default_factory=list)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that the log level is a valid Python logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate that the port is in the TCP/UDP port range."""
        return _validate_port(v)

    @field_validator("protocol")
    @classmethod
    def validate_protocol(cls, v: str) -> str:
        """Validate that the protocol is either UDP or TCP."""
        return _validate_choice(v, VALID_PROTOCOLS, "protocol")

    @field_validator("framing", mode="before")
    @classmethod
    def validate_framing(cls, v: Any) -> str:
        """Validate that the message layout is RFC 3164 or RFC 5424."""
        return _validate_framing(v)

    @field_validator("tcp_framing")
    @classmethod
    def validate_tcp_framing(cls, v: str) -> str:
        """Validate that the TCP framing mode is valid."""
        return _validate_choice(v, VALID_TCP_FRAMINGS, "TCP framing mode")

    @field_validator("facility", mode="before")
    @classmethod
    def validate_facility(cls, v: Union[int, str]) -> int:
        """Accept a facility code or name such as "local0"."""
        return parse_facility(v)

    @field_validator("severity", mode="before")
    @classmethod
    def validate_severity(cls, v: Union[int, str]) -> int:
        """Accept a severity code or name such as "warning"."""
        return parse_severity(v)

    def to_session_config(self) -> SessionConfig:
        """
        Build the immutable session configuration from the destination settings.

        Raises:
            ConfigurationError: If the destination settings are incomplete or invalid.
        """
        return build_session_config(
            host=self.host,
            port=self.port,
            protocol=self.protocol,
            framing=self.framing,
            tcp_framing=self.tcp_framing,
            local_hostname=self.local_hostname,
            app_name=self.app_name,
            restrict_facilities=self.restrict_facilities,
        )


def load_config(config_path: Optional[Union[str, Path]] = None) -> Config:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the configuration file. If None, will look for config.yaml
                   in the current directory and default directories.

    Returns:
        A Config object containing the loaded configuration.

    Raises:
        FileNotFoundError: If the configuration file cannot be found.
        yaml.YAMLError: If the configuration file contains invalid YAML.
    """
    # Default search paths
    search_paths = [
        Path.cwd() / "config.yaml",
        Path.cwd() / "config.yml",
        Path("/etc/ziggiz-courier-dropoff-syslog/config.yaml"),
        Path("/etc/ziggiz-courier-dropoff-syslog/config.yml"),
    ]

    # If config path is provided, try that first
    if config_path:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_file}")
    else:
        # Try default paths
        for path in search_paths:
            if path.exists():
                config_file = path
                break
        else:
            # No config file found, return default configuration
            logging.warning("No configuration file found, using default configuration")
            return Config()

    # Load YAML configuration
    with open(config_file, "r") as f:
        try:
            config_data = yaml.safe_load(f) or {}
            return Config(**config_data)
        except yaml.YAMLError as e:
            logging.error("Error parsing configuration file", extra={"error": e})
            raise
        except Exception as e:
            logging.error("Error loading configuration", extra={"error": e})
            raise


class SafeExtraFormatter(logging.Formatter):
    """
    Custom formatter that substitutes missing extra fields with a blank string.

    Lets a log format reference extra fields such as %(net.peer.name)s even
    for records that were logged without them.
    """

    _field_pattern = re.compile(r"%\(([^)]+)\)")

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None):
        super().__init__(fmt, datefmt=datefmt)
        self._fields = self._field_pattern.findall(fmt or "")

    def format(self, record: logging.LogRecord) -> str:
        # Add any expected extra fields with blank default if missing
        for field in self._fields:
            if not hasattr(record, field):
                setattr(record, field, "")
        return super().format(record)


def configure_logging(config: "Config") -> None:
    """
    Configure logging based on the provided configuration.

    Args:
        config: The loaded configuration object.
    """
    # Reset logging configuration
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    # Configure root logger
    level = getattr(logging, config.log_level, logging.INFO)
    formatter = SafeExtraFormatter(config.log_format, datefmt=config.log_date_format)

    # Add console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logging.root.setLevel(level)
    logging.root.addHandler(console_handler)

    # Configure additional loggers from config
    for logger_config in config.loggers:
        logger = logging.getLogger(logger_config.name)
        logger.setLevel(getattr(logging, logger_config.level, logging.INFO))
        logger.propagate = logger_config.propagate
