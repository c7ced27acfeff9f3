# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Base classes shared by the UDP and TCP syslog transport clients

# Standard library imports
import asyncio
import logging

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

# Local/package imports
from ziggiz_courier_dropoff_syslog.errors import TransportError
from ziggiz_courier_dropoff_syslog.telemetry import get_tracer


class ConnectionStateMixin:
    """
    Mixin for asyncio client protocols tracking whether the connection is gone.

    Provides wait_closed() so owners can release a transport deterministically,
    and keeps the exception (if any) the connection was lost with.
    """

    lost: bool = False
    lost_exception: Optional[BaseException] = None
    _closed_waiter: Optional["asyncio.Future[None]"] = None

    def mark_connection_lost(self, exc: Optional[BaseException]) -> None:
        self.lost = True
        self.lost_exception = exc
        if self._closed_waiter is not None and not self._closed_waiter.done():
            self._closed_waiter.set_result(None)

    async def wait_closed(self) -> None:
        """Wait until connection_lost has been called for this protocol."""
        if self.lost:
            return
        if self._closed_waiter is None:
            self._closed_waiter = asyncio.get_running_loop().create_future()
        await self._closed_waiter


class BaseSyslogTransportClient(ABC):
    """
    Abstract base class for syslog transport clients.

    A client owns one asyncio transport to host:port for its whole lifetime.
    The transport is opened lazily by the first send (or explicitly with
    connect()) and released by close(). A closed client is never reopened.
    There is no retry and no timeout: callers needing bounded latency wrap
    send() in asyncio.wait_for().
    """

    def __init__(self, host: str, port: int):
        self.logger = logging.getLogger(self.logger_name)
        self.host = host
        self.port = port
        self.transport: Optional[asyncio.BaseTransport] = None
        self.protocol: Optional[Any] = None
        self._closed = False

    @property
    @abstractmethod
    def logger_name(self) -> str:
        """Return the logger name for this client."""

    @property
    @abstractmethod
    def net_transport(self) -> str:
        """Return the OpenTelemetry net.transport value ("ip_udp" or "ip_tcp")."""

    @property
    def span_name(self) -> str:
        return f"syslog.{self.net_transport[3:]}.send"

    @property
    def connected(self) -> bool:
        return (
            self.transport is not None
            and self.protocol is not None
            and not self.protocol.lost
        )

    @property
    def closed(self) -> bool:
        return self._closed

    def span_attributes(self, payload: bytes) -> Dict[str, Any]:
        return {
            "net.transport": self.net_transport,
            "net.peer.name": self.host,
            "net.peer.port": self.port,
            "message.length": len(payload),
        }

    @abstractmethod
    async def _open(
        self, loop: asyncio.AbstractEventLoop
    ) -> Tuple[asyncio.BaseTransport, Any]:
        """Open the asyncio endpoint and return (transport, protocol)."""

    @abstractmethod
    async def _write(self, payload: bytes) -> None:
        """Write one encoded message; raise OSError on failure."""

    async def connect(self) -> None:
        """
        Open the connection to the syslog receiver if it is not open yet.

        Raises:
            TransportError: If the client is closed, the connection was lost,
                or the host cannot be resolved or connected to
        """
        if self._closed:
            raise TransportError(f"Client for {self.host}:{self.port} is closed")
        if self.transport is not None:
            if self.protocol.lost:
                raise self._lost_error()
            return

        loop = asyncio.get_running_loop()
        try:
            self.transport, self.protocol = await self._open(loop)
        except OSError as e:
            self.logger.error(
                f"Failed to connect to syslog receiver {self.host}:{self.port}: {e}",
                extra={
                    "net.transport": self.net_transport,
                    "net.peer.name": self.host,
                    "net.peer.port": self.port,
                    "error": str(e),
                },
            )
            raise TransportError(
                f"Failed to connect to {self.host}:{self.port}: {e}", cause=e
            ) from e

    async def send(self, payload: bytes) -> None:
        """
        Send one encoded syslog message.

        Returns once the operating system accepted the bytes. This is not an
        end-to-end delivery guarantee.

        Raises:
            TransportError: On connect, write or connection failures
        """
        await self.connect()
        tracer = get_tracer()
        with tracer.start_as_current_span(
            self.span_name, attributes=self.span_attributes(payload)
        ):
            try:
                await self._write(payload)
            except OSError as e:
                self.logger.error(
                    f"Failed to send syslog message to {self.host}:{self.port}: {e}",
                    extra={
                        "net.transport": self.net_transport,
                        "net.peer.name": self.host,
                        "net.peer.port": self.port,
                        "error": str(e),
                    },
                )
                raise TransportError(
                    f"Failed to send to {self.host}:{self.port}: {e}", cause=e
                ) from e

        self.logger.debug(
            "Syslog message sent",
            extra={
                "net.transport": self.net_transport,
                "net.peer.name": self.host,
                "net.peer.port": self.port,
                "message.length": len(payload),
            },
        )

    async def close(self) -> None:
        """Release the transport. Safe to call more than once."""
        self._closed = True
        if self.transport is None:
            return

        transport, protocol = self.transport, self.protocol
        self.transport = None
        self.logger.debug(
            "Closing syslog transport", extra={"net.transport": self.net_transport}
        )
        if not transport.is_closing():
            transport.close()
        # connection_lost follows close() on the next loop iteration
        await protocol.wait_closed()

    def _lost_error(self) -> TransportError:
        exc = self.protocol.lost_exception
        if exc is None:
            return TransportError(
                f"Connection to {self.host}:{self.port} was closed by the peer"
            )
        return TransportError(
            f"Connection to {self.host}:{self.port} was lost: {exc}", cause=exc
        )

    async def __aenter__(self) -> "BaseSyslogTransportClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
