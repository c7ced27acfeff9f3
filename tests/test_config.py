# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Tests for the configuration module

# Standard library imports
import logging

from unittest.mock import mock_open, patch

# Third-party imports
import pytest
import yaml

from pydantic import ValidationError

# Local/package imports
from ziggiz_courier_dropoff_syslog.config import (
    Config,
    LoggerConfig,
    SafeExtraFormatter,
    ServerCredentials,
    SessionConfig,
    build_session_config,
    configure_logging,
    load_config,
    resolve_session_config,
)
from ziggiz_courier_dropoff_syslog.errors import ConfigurationError


class TestSessionConfig:
    """Tests for the SessionConfig model."""

    @pytest.mark.unit
    def test_defaults(self):
        config = SessionConfig(host="10.0.0.5")
        assert config.host == "10.0.0.5"
        assert config.port == 514
        assert config.protocol == "udp"
        assert config.framing == "rfc5424"
        assert config.local_hostname == "localhost"
        assert config.app_name == ""
        assert config.tcp_framing == "octet_counting"
        assert config.restrict_facilities is True

    @pytest.mark.unit
    def test_immutable(self):
        config = SessionConfig(host="10.0.0.5")
        with pytest.raises(ValidationError):
            config.port = 1514

    @pytest.mark.unit
    def test_normalises_case(self):
        config = SessionConfig(host=" syslog.local ", protocol="TCP", framing="RFC3164")
        assert config.host == "syslog.local"
        assert config.protocol == "tcp"
        assert config.framing == "rfc3164"

    @pytest.mark.unit
    @pytest.mark.parametrize("value,expected", [(True, "rfc3164"), (False, "rfc5424")])
    def test_boolean_framing(self, value, expected):
        assert SessionConfig(host="h", framing=value).framing == expected

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "params",
        [
            {"host": ""},
            {"host": "   "},
            {"host": "h", "port": 0},
            {"host": "h", "port": 65536},
            {"host": "h", "protocol": "tls"},
            {"host": "h", "framing": "rfc9999"},
            {"host": "h", "tcp_framing": "auto"},
            {"port": 514},
        ],
    )
    def test_build_session_config_invalid(self, params):
        with pytest.raises(ConfigurationError):
            build_session_config(**params)

    @pytest.mark.unit
    def test_build_session_config_valid(self):
        config = build_session_config(host="h", port=65535, protocol="tcp")
        assert config.port == 65535
        assert config.protocol == "tcp"


class TestResolveSessionConfig:
    """Tests for resolving parameters against server credentials."""

    @pytest.fixture
    def credentials(self):
        return ServerCredentials(
            host="creds.example.com", port=1514, protocol="tcp", rfc3164=True
        )

    @pytest.mark.unit
    def test_default_sentinel_uses_credentials(self, credentials):
        config = resolve_session_config(
            {"host": "default", "port": "default", "framing": None, "app_name": "api"},
            credentials,
        )
        assert config.host == "creds.example.com"
        assert config.port == 1514
        assert config.protocol == "tcp"
        assert config.framing == "rfc3164"
        assert config.app_name == "api"

    @pytest.mark.unit
    def test_explicit_parameters_override_credentials(self, credentials):
        config = resolve_session_config(
            {"host": "10.1.1.1", "framing": False, "protocol": "udp"}, credentials
        )
        assert config.host == "10.1.1.1"
        assert config.framing == "rfc5424"
        assert config.protocol == "udp"
        assert config.port == 1514

    @pytest.mark.unit
    def test_without_credentials(self):
        config = resolve_session_config({"host": "10.1.1.1", "port": 5514})
        assert config.port == 5514

    @pytest.mark.unit
    def test_default_without_credentials_fails(self):
        with pytest.raises(ConfigurationError):
            resolve_session_config({"host": "default"})

    @pytest.mark.unit
    def test_default_for_field_without_credential_value_fails(self, credentials):
        with pytest.raises(ConfigurationError):
            resolve_session_config({"app_name": "default"}, credentials)

    @pytest.mark.unit
    def test_credentials_payload_rfc_field(self):
        credentials = ServerCredentials.model_validate(
            {"host": "creds.example.com", "port": 1514, "protocol": "udp", "rfc": True}
        )
        assert credentials.rfc3164 is True

        config = resolve_session_config({"framing": "default"}, credentials)
        assert config.framing == "rfc3164"

    @pytest.mark.unit
    def test_credentials_invalid_protocol(self):
        with pytest.raises(ValidationError):
            ServerCredentials(host="h", protocol="unix")


class TestConfig:
    """Tests for the application configuration."""

    @pytest.mark.unit
    def test_config_defaults(self):
        """Test default configuration values."""
        config = Config()
        assert config.host == ""
        assert config.port == 514
        assert config.protocol == "udp"
        assert config.framing == "rfc5424"
        assert config.facility == 1
        assert config.severity == 6
        assert config.enable_console_tracing is False
        assert config.log_level == "INFO"
        assert config.loggers == []

    @pytest.mark.unit
    def test_logger_config(self):
        """Test logger configuration."""
        logger_config = LoggerConfig(name="test.logger", level="DEBUG")
        assert logger_config.name == "test.logger"
        assert logger_config.level == "DEBUG"
        assert logger_config.propagate is True

    @pytest.mark.unit
    def test_validate_log_level(self):
        assert Config(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValueError):
            Config(log_level="INVALID_LEVEL")

    @pytest.mark.unit
    def test_facility_and_severity_names(self):
        config = Config(facility="local3", severity="warning")
        assert config.facility == 19
        assert config.severity == 4

    @pytest.mark.unit
    def test_invalid_facility(self):
        with pytest.raises(ValueError):
            Config(facility="local9")

    @pytest.mark.unit
    def test_validate_protocol_invalid(self):
        with pytest.raises(ValueError):
            Config(protocol="unix")

    @pytest.mark.unit
    def test_to_session_config(self):
        config = Config(
            host="10.0.0.9",
            protocol="tcp",
            framing="rfc3164",
            local_hostname="web01",
            app_name="api",
            restrict_facilities=False,
        )
        session_config = config.to_session_config()
        assert isinstance(session_config, SessionConfig)
        assert session_config.host == "10.0.0.9"
        assert session_config.protocol == "tcp"
        assert session_config.framing == "rfc3164"
        assert session_config.local_hostname == "web01"
        assert session_config.app_name == "api"
        assert session_config.restrict_facilities is False

    @pytest.mark.unit
    def test_to_session_config_without_host(self):
        with pytest.raises(ConfigurationError):
            Config().to_session_config()


class TestLoadConfig:
    """Tests for loading YAML configuration files."""

    @pytest.mark.unit
    def test_load_config_from_file(self):
        yaml_content = """
        host: syslog.example.com
        protocol: tcp
        framing: rfc3164
        facility: local0
        log_level: DEBUG
        loggers:
          - name: ziggiz_courier_dropoff_syslog.protocol
            level: WARNING
        """
        with patch("builtins.open", mock_open(read_data=yaml_content)):
            with patch("pathlib.Path.exists", return_value=True):
                config = load_config("config.yaml")

        assert config.host == "syslog.example.com"
        assert config.protocol == "tcp"
        assert config.framing == "rfc3164"
        assert config.facility == 16
        assert config.log_level == "DEBUG"
        assert config.loggers[0].name == "ziggiz_courier_dropoff_syslog.protocol"

    @pytest.mark.unit
    def test_load_config_empty_file(self):
        with patch("builtins.open", mock_open(read_data="")):
            with patch("pathlib.Path.exists", return_value=True):
                config = load_config("config.yaml")
        assert config == Config()

    @pytest.mark.unit
    def test_load_config_file_not_found(self):
        with patch("pathlib.Path.exists", return_value=False):
            with pytest.raises(FileNotFoundError):
                load_config("nonexistent.yaml")

    @pytest.mark.unit
    def test_load_config_no_file_uses_defaults(self):
        with patch("pathlib.Path.exists", return_value=False):
            config = load_config()
        assert config == Config()

    @pytest.mark.unit
    def test_load_config_invalid_yaml(self):
        with patch("builtins.open", mock_open(read_data="host: [unclosed")):
            with patch("pathlib.Path.exists", return_value=True):
                with pytest.raises(yaml.YAMLError):
                    load_config("config.yaml")

    @pytest.mark.unit
    def test_load_example_config(self):
        config = load_config("examples/config_basic.yaml")
        assert config.host == "syslog.example.com"
        assert config.app_name == "courier"
        assert config.severity == 6


class TestConfigureLogging:
    """Tests for logging configuration."""

    @pytest.mark.unit
    def test_configure_logging(self):
        config = Config(
            log_level="DEBUG",
            loggers=[LoggerConfig(name="test.logger", level="ERROR", propagate=False)],
        )
        configure_logging(config)

        root_logger = logging.getLogger()
        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, SafeExtraFormatter)

        test_logger = logging.getLogger("test.logger")
        assert test_logger.level == logging.ERROR
        assert test_logger.propagate is False

    @pytest.mark.unit
    def test_safe_extra_formatter_blanks_missing_fields(self):
        formatter = SafeExtraFormatter("%(levelname)s %(net.peer.name)s|%(message)s")
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "hello", None, None)
        assert formatter.format(record) == "INFO |hello"

        record = logging.LogRecord("test", logging.INFO, __file__, 1, "hello", None, None)
        setattr(record, "net.peer.name", "10.0.0.1")
        assert formatter.format(record) == "INFO 10.0.0.1|hello"
