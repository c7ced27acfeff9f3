# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Factory for creating syslog transport clients
#
# Supported protocols:
#   - udp: SyslogUDPTransportClient, one datagram per message
#   - tcp: SyslogTCPTransportClient, one framed record per message
#
# Each client instance is owned by a single session and must not be shared.

# Standard library imports
import logging

from typing import TYPE_CHECKING

# Local/package imports
from ziggiz_courier_dropoff_syslog.errors import ConfigurationError
from ziggiz_courier_dropoff_syslog.protocol.base import BaseSyslogTransportClient
from ziggiz_courier_dropoff_syslog.protocol.tcp import SyslogTCPTransportClient
from ziggiz_courier_dropoff_syslog.protocol.udp import SyslogUDPTransportClient

if TYPE_CHECKING:
    from ziggiz_courier_dropoff_syslog.config import SessionConfig


class TransportClientFactory:
    """Factory class for creating syslog transport clients from a session configuration."""

    logger = logging.getLogger("ziggiz_courier_dropoff_syslog.protocol.client_factory")

    @classmethod
    def create_client(cls, config: "SessionConfig") -> BaseSyslogTransportClient:
        """
        Create a transport client for the configured protocol.

        Args:
            config: The session configuration

        Returns:
            A new, not yet connected transport client

        Raises:
            ConfigurationError: If the protocol is not supported
        """
        protocol = config.protocol.lower()
        if protocol == "udp":
            client: BaseSyslogTransportClient = SyslogUDPTransportClient(
                config.host, config.port
            )
        elif protocol == "tcp":
            client = SyslogTCPTransportClient(
                config.host, config.port, framing_mode=config.tcp_framing
            )
        else:
            raise ConfigurationError(f"Unsupported protocol: {config.protocol}")

        cls.logger.debug(
            f"Created {type(client).__name__} for {config.host}:{config.port}",
            extra={"net.transport": client.net_transport},
        )
        return client
