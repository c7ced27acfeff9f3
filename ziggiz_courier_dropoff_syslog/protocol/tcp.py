# -*- coding: utf-8 -*-
# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# TCP transport client for forwarding syslog messages with stream framing
# Standard library imports
import asyncio
import logging

from typing import Optional, Tuple, Union

# Local/package imports
from ziggiz_courier_dropoff_syslog.errors import TransportError
from ziggiz_courier_dropoff_syslog.protocol.base import (
    BaseSyslogTransportClient,
    ConnectionStateMixin,
)
from ziggiz_courier_dropoff_syslog.protocol.framing import FramingHelper, FramingMode


class SyslogTCPClientProtocol(ConnectionStateMixin, asyncio.Protocol):
    """
    Stream protocol for a TCP syslog client connection.

    The write buffer high-water mark is set to zero so that drain() only
    returns once every written byte has been handed to the kernel.
    """

    def __init__(self):
        self.logger = logging.getLogger("ziggiz_courier_dropoff_syslog.protocol.tcp")
        self.transport: Optional[asyncio.Transport] = None
        self.peername: Optional[Tuple[str, int]] = None
        self._paused = False
        self._drain_waiter: Optional["asyncio.Future[None]"] = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = transport
        self.peername = transport.get_extra_info("peername")
        transport.set_write_buffer_limits(high=0)
        host, port = self.peername[:2] if self.peername else ("unknown", "unknown")
        self.logger.info(
            "TCP connection to syslog receiver established",
            extra={
                "net.transport": "ip_tcp",
                "net.peer.ip": host,
                "net.peer.port": port,
            },
        )

    def data_received(self, data: bytes) -> None:
        self.logger.debug(
            "Ignoring data from syslog receiver",
            extra={"net.transport": "ip_tcp", "bytes_received": len(data)},
        )

    def eof_received(self) -> bool:
        self.logger.info(
            "Syslog receiver closed the connection", extra={"net.transport": "ip_tcp"}
        )
        # Returning False lets the transport close itself
        return False

    def pause_writing(self) -> None:
        self._paused = True

    def resume_writing(self) -> None:
        self._paused = False
        self._wake_drain_waiter(None)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        if exc:
            self.logger.warning(
                f"TCP connection to syslog receiver lost: {exc}",
                extra={"net.transport": "ip_tcp", "error": str(exc)},
            )
        else:
            self.logger.debug(
                "TCP connection to syslog receiver closed",
                extra={"net.transport": "ip_tcp"},
            )
        self.mark_connection_lost(exc)
        self._wake_drain_waiter(exc or ConnectionResetError("Connection lost"))

    def _wake_drain_waiter(self, exc: Optional[BaseException]) -> None:
        waiter = self._drain_waiter
        if waiter is None or waiter.done():
            return
        self._drain_waiter = None
        if exc is None:
            waiter.set_result(None)
        else:
            waiter.set_exception(exc)

    async def drain(self) -> None:
        """
        Wait until the write buffer is flushed to the kernel.

        Raises:
            OSError: If the connection failed or was closed before the flush
        """
        if self.transport is not None and self.transport.is_closing():
            # A failed write closes the transport; connection_lost follows
            await self.wait_closed()
        if self.lost:
            raise self.lost_exception or ConnectionResetError("Connection lost")
        if not self._paused:
            return
        self._drain_waiter = asyncio.get_running_loop().create_future()
        await self._drain_waiter


class SyslogTCPTransportClient(BaseSyslogTransportClient):
    """
    Connection-oriented syslog client holding one TCP connection.

    Each message is framed (octet counting by default) and written in a single
    write; send() returns once the kernel accepted the whole record. A lost
    connection is not re-established.
    """

    def __init__(
        self,
        host: str,
        port: int,
        framing_mode: Union[FramingMode, str] = FramingMode.TRANSPARENT,
    ):
        super().__init__(host, port)
        self.framing_helper = FramingHelper(framing_mode=framing_mode)

    @property
    def logger_name(self) -> str:
        return "ziggiz_courier_dropoff_syslog.protocol.tcp"

    @property
    def net_transport(self) -> str:
        return "ip_tcp"

    async def _open(
        self, loop: asyncio.AbstractEventLoop
    ) -> Tuple[asyncio.BaseTransport, SyslogTCPClientProtocol]:
        transport, protocol = await loop.create_connection(
            SyslogTCPClientProtocol, self.host, self.port
        )
        self.logger.info(
            f"TCP syslog client connected to {self.host}:{self.port} "
            f"with framing mode: {self.framing_helper.framing_mode.value}"
        )
        return transport, protocol

    async def _write(self, payload: bytes) -> None:
        record = self.framing_helper.frame(payload)
        if self.protocol.lost:
            raise self._lost_error()
        if self.transport.is_closing():
            raise TransportError(f"Connection to {self.host}:{self.port} is closing")

        self.transport.write(record)
        await self.protocol.drain()
