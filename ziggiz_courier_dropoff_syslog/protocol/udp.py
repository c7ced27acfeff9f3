# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# UDP transport client for forwarding syslog messages

# Standard library imports
import asyncio
import logging
import socket

from typing import Any, Optional, Tuple

# Local/package imports
from ziggiz_courier_dropoff_syslog.errors import TransportError
from ziggiz_courier_dropoff_syslog.protocol.base import (
    BaseSyslogTransportClient,
    ConnectionStateMixin,
)


class SyslogUDPClientProtocol(ConnectionStateMixin, asyncio.DatagramProtocol):
    """
    Datagram protocol for an unconnected UDP syslog client endpoint.

    Errors reported by the event loop are kept in pending_error so the client
    can tell whether the datagram it just handed over was refused by the OS.
    """

    def __init__(self):
        self.logger = logging.getLogger("ziggiz_courier_dropoff_syslog.protocol.udp")
        self.transport: Optional[asyncio.DatagramTransport] = None
        self.pending_error: Optional[Exception] = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        """
        Called when the endpoint is created.

        Args:
            transport: The datagram transport
        """
        self.transport = transport
        sockname = transport.get_extra_info("sockname")
        # Handle both IPv4 (host, port) and IPv6 (host, port, flowinfo, scopeid)
        if sockname and len(sockname) in (2, 4):
            host, port = sockname[0], sockname[1]
        else:
            host, port = "unknown", "unknown"
        self.logger.info(
            "UDP syslog endpoint ready",
            extra={
                "net.transport": "ip_udp",
                "net.host.ip": host,
                "net.host.port": port,
            },
        )

    def datagram_received(self, data: bytes, addr: Tuple[str, int]) -> None:
        self.logger.debug(
            "Ignoring datagram from syslog receiver",
            extra={"net.transport": "ip_udp", "bytes_received": len(data)},
        )

    def error_received(self, exc: Exception) -> None:
        """
        Called when a send or receive operation raises an OSError.

        Errors raised while a datagram is being handed over surface through the
        client; errors arriving outside a send can only be logged.

        Args:
            exc: The exception that was raised
        """
        self.pending_error = exc
        self.logger.warning(
            f"Error on UDP syslog endpoint: {exc}",
            extra={"net.transport": "ip_udp", "error": str(exc)},
        )

    def connection_lost(self, exc: Optional[Exception]) -> None:
        """
        Called when the endpoint is closed.

        Args:
            exc: The exception that caused the close, or None on a normal close
        """
        if exc:
            self.logger.debug(
                f"UDP syslog endpoint closed with error: {exc}",
                extra={"net.transport": "ip_udp", "error": str(exc)},
            )
        else:
            self.logger.debug(
                "UDP syslog endpoint closed",
                extra={"net.transport": "ip_udp"},
            )
        self.mark_connection_lost(exc)


class SyslogUDPTransportClient(BaseSyslogTransportClient):
    """
    Fire-and-forget syslog client sending one datagram per message.

    No framing is added and no size limit is imposed; fragmentation of
    oversized datagrams is up to the operating system. The endpoint is not
    connected: the receiver address is resolved once and passed to every
    sendto(), so an unreachable receiver never fails a later message.
    """

    def __init__(self, host: str, port: int):
        super().__init__(host, port)
        self.remote_addr: Optional[Tuple[Any, ...]] = None

    @property
    def logger_name(self) -> str:
        return "ziggiz_courier_dropoff_syslog.protocol.udp"

    @property
    def net_transport(self) -> str:
        return "ip_udp"

    async def _open(
        self, loop: asyncio.AbstractEventLoop
    ) -> Tuple[asyncio.BaseTransport, SyslogUDPClientProtocol]:
        # Resolve once; the socket stays unconnected so ICMP errors for an
        # earlier datagram are never reported against a later send
        infos = await loop.getaddrinfo(
            self.host, self.port, type=socket.SOCK_DGRAM, proto=socket.IPPROTO_UDP
        )
        family, _, _, _, sockaddr = infos[0]
        transport, protocol = await loop.create_datagram_endpoint(
            SyslogUDPClientProtocol, family=family
        )
        self.remote_addr = sockaddr
        self.logger.info(
            f"UDP syslog client targeting {self.host}:{self.port}",
            extra={"net.peer.ip": sockaddr[0], "net.peer.port": sockaddr[1]},
        )
        return transport, protocol

    async def _write(self, payload: bytes) -> None:
        if self.transport.is_closing():
            raise TransportError(f"UDP endpoint for {self.host}:{self.port} is closed")

        # The selector transport reports sendto() failures via error_received
        # instead of raising them
        self.protocol.pending_error = None
        self.transport.sendto(payload, self.remote_addr)
        error = self.protocol.pending_error
        if error is not None:
            self.protocol.pending_error = None
            raise error
