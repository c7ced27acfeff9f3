# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Forwarding session tying the message encoder to a transport client

# Standard library imports
import asyncio
import logging

from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

# Third-party imports
from pydantic import BaseModel

# Local/package imports
from ziggiz_courier_dropoff_syslog.config import SessionConfig
from ziggiz_courier_dropoff_syslog.errors import (
    EncodingError,
    ForwardingError,
    SessionStateError,
    TransportError,
)
from ziggiz_courier_dropoff_syslog.protocol.base import BaseSyslogTransportClient
from ziggiz_courier_dropoff_syslog.protocol.client_factory import TransportClientFactory
from ziggiz_courier_dropoff_syslog.protocol.message import (
    EXPOSED_FACILITIES,
    LogRequest,
    MessageEncoder,
)

STATUS_SENT = "sent"


def local_clock() -> datetime:
    return datetime.now().astimezone()


class SessionState(Enum):
    """Enumeration for the state of a forwarding session."""

    IDLE = "idle"
    SENDING = "sending"
    FAILED = "failed"
    CLOSED = "closed"


class Acknowledgment(BaseModel):
    """
    Record of one message handed to the transport.

    Attributes:
        index (int): Position of the request within the session.
        message (str): The original message text.
        status (str): Always "sent".
    """

    index: int
    message: str
    status: str = STATUS_SENT

    def to_output(self) -> Dict[str, str]:
        return {"message": self.message, "status": self.status}


class ForwardResult:
    """
    Outcome of forwarding a sequence of log requests.

    Holds the acknowledgments of every request sent before the first failure,
    in input order, and the failure itself if there was one.
    """

    def __init__(
        self,
        acknowledgments: List[Acknowledgment],
        error: Optional[ForwardingError] = None,
    ):
        self.acknowledgments = acknowledgments
        self.error = error

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def outputs(self) -> List[Dict[str, str]]:
        return [ack.to_output() for ack in self.acknowledgments]

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error

    def __repr__(self) -> str:
        return (
            f"ForwardResult(sent={len(self.acknowledgments)}, "
            f"error={self.error!r})"
        )


class SyslogSession:
    """
    Sequential, fail-fast forwarding of log requests to one syslog receiver.

    Requests are encoded and sent strictly one at a time in submission order;
    each send completes before the next one starts. The first encoding or
    transport failure moves the session to FAILED and no further message is
    sent. The transport client is exclusively owned by the session and is
    released by close() or on leaving an ``async with`` block.
    """

    def __init__(
        self,
        config: SessionConfig,
        client: Optional[BaseSyslogTransportClient] = None,
        encoder: Optional[MessageEncoder] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the session.

        Args:
            config: The resolved session configuration
            client: Transport client to use; created from config when omitted
            encoder: Message encoder to use; created from config when omitted
            clock: Timestamp source for encoded messages (local time by default)
        """
        self.logger = logging.getLogger("ziggiz_courier_dropoff_syslog.session")
        self.config = config
        self.client = client or TransportClientFactory.create_client(config)
        self.encoder = encoder or MessageEncoder.from_session_config(config)
        self.clock = clock or local_clock
        self.state = SessionState.IDLE
        self.error: Optional[ForwardingError] = None
        self._next_index = 0
        self._lock = asyncio.Lock()

    @property
    def sent_count(self) -> int:
        return self._next_index

    async def send(self, request: LogRequest) -> Acknowledgment:
        """
        Encode and send one log request.

        Args:
            request: The message, facility and severity to forward

        Returns:
            The acknowledgment for the sent message

        Raises:
            ForwardingError: If encoding or sending fails; the session is failed
            SessionStateError: If the session has already failed or was closed
        """
        async with self._lock:
            if self.state == SessionState.FAILED:
                raise SessionStateError(
                    f"Session failed at index {self.error.index}; no further messages are sent"
                )
            if self.state == SessionState.CLOSED:
                raise SessionStateError("Session is closed")

            index = self._next_index
            self.state = SessionState.SENDING
            try:
                payload = self._encode(request)
                await self.client.send(payload)
            except (EncodingError, TransportError) as e:
                self.state = SessionState.FAILED
                self.error = ForwardingError(index, request.message, e)
                self.logger.error(
                    f"Forwarding stopped at message {index}: {e}",
                    extra={
                        "syslog.index": index,
                        "log_msg": request.message,
                        "error": str(e),
                    },
                )
                raise self.error from e
            except BaseException:
                # Cancellation leaves the delivery of this message undetermined
                self.state = SessionState.FAILED
                raise

            self._next_index += 1
            self.state = SessionState.IDLE
            return Acknowledgment(index=index, message=request.message)

    def _encode(self, request: LogRequest) -> bytes:
        if (
            self.config.restrict_facilities
            and request.facility not in EXPOSED_FACILITIES
        ):
            raise EncodingError(
                f"Facility {request.facility} is not one of the supported facilities"
            )
        return self.encoder.encode(request, self.clock())

    async def forward(self, requests: Iterable[LogRequest]) -> ForwardResult:
        """
        Send requests in order, stopping at the first failure.

        Args:
            requests: The log requests to forward

        Returns:
            Acknowledgments for the requests sent before any failure, and the
            failure itself
        """
        acknowledgments: List[Acknowledgment] = []
        for request in requests:
            try:
                acknowledgments.append(await self.send(request))
            except ForwardingError as e:
                return ForwardResult(acknowledgments, e)

        self.logger.info(
            f"Forwarded {len(acknowledgments)} messages to "
            f"{self.config.host}:{self.config.port}",
            extra={"net.transport": self.client.net_transport},
        )
        return ForwardResult(acknowledgments)

    async def close(self) -> None:
        """Release the transport client. Safe to call more than once."""
        if self.state != SessionState.FAILED:
            self.state = SessionState.CLOSED
        await self.client.close()

    async def __aenter__(self) -> "SyslogSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


async def forward_logs(
    config: SessionConfig,
    requests: Iterable[LogRequest],
    client: Optional[BaseSyslogTransportClient] = None,
) -> ForwardResult:
    """
    Forward log requests through a new session and close it afterwards.

    Args:
        config: The resolved session configuration
        requests: The log requests to forward, in order
        client: Optional transport client (created from config when omitted)

    Returns:
        The forwarding result
    """
    async with SyslogSession(config, client=client) as session:
        return await session.forward(requests)
