# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Syslog message encoder
#
# This module formats log requests into RFC 3164 (BSD) or RFC 5424 syslog
# messages. Encoding is a pure function of the encoder settings, the request
# and a timestamp; no framing is added here (see framing.py).

# Standard library imports
import logging

from datetime import datetime, timedelta
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, NamedTuple, Optional, Union

# Local/package imports
from ziggiz_courier_dropoff_syslog.errors import EncodingError

if TYPE_CHECKING:
    from ziggiz_courier_dropoff_syslog.config import SessionConfig

# Constants
NILVALUE = "-"
SYSLOG_VERSION = 1
RFC3164_MONTHS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)


class SyslogFormat(Enum):
    """Enumeration for the syslog message layout."""

    RFC3164 = "rfc3164"
    RFC5424 = "rfc5424"


class Facility(IntEnum):
    """Standard syslog facility codes."""

    KERN = 0
    USER = 1
    MAIL = 2
    DAEMON = 3
    AUTH = 4
    SYSLOG = 5
    LPR = 6
    NEWS = 7
    UUCP = 8
    CRON = 9
    AUTHPRIV = 10
    FTP = 11
    NTP = 12
    AUDIT = 13
    ALERT = 14
    CLOCK = 15
    LOCAL0 = 16
    LOCAL1 = 17
    LOCAL2 = 18
    LOCAL3 = 19
    LOCAL4 = 20
    LOCAL5 = 21
    LOCAL6 = 22
    LOCAL7 = 23


class Severity(IntEnum):
    """Standard syslog severity levels."""

    EMERGENCY = 0
    ALERT = 1
    CRITICAL = 2
    ERROR = 3
    WARNING = 4
    NOTICE = 5
    INFORMATIONAL = 6
    DEBUG = 7


# Facilities offered to users; the remaining standard codes are still encodable
EXPOSED_FACILITIES = frozenset(
    [
        Facility.KERN,
        Facility.USER,
        Facility.DAEMON,
        Facility.AUDIT,
        Facility.ALERT,
        Facility.LOCAL0,
        Facility.LOCAL1,
        Facility.LOCAL2,
        Facility.LOCAL3,
        Facility.LOCAL4,
        Facility.LOCAL5,
        Facility.LOCAL6,
        Facility.LOCAL7,
    ]
)

# Option labels used by the workflow UI, in addition to the standard names
FACILITY_ALIASES = {
    "kernel": Facility.KERN,
    "system": Facility.DAEMON,
    "security": Facility.AUTH,
}

SEVERITY_ALIASES = {
    "emerg": Severity.EMERGENCY,
    "crit": Severity.CRITICAL,
    "err": Severity.ERROR,
    "warn": Severity.WARNING,
    "info": Severity.INFORMATIONAL,
}


class LogRequest(NamedTuple):
    """A single message to forward with its facility and severity codes."""

    message: str
    facility: int = Facility.USER
    severity: int = Severity.INFORMATIONAL


def parse_facility(value: Union[int, str]) -> int:
    """
    Convert a facility code or name into its integer code.

    Args:
        value: An integer code, a digit string, or a facility name such as
            "local0", "user" or "kernel" (case-insensitive).

    Returns:
        The facility code.

    Raises:
        ValueError: If the value does not name a standard facility.
    """
    return _parse_code(value, Facility, FACILITY_ALIASES, "facility")


def parse_severity(value: Union[int, str]) -> int:
    """Convert a severity code or name (e.g. "warning", "info") into its integer code."""
    return _parse_code(value, Severity, SEVERITY_ALIASES, "severity")


def _parse_code(value, enum_cls, aliases, label: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid {label}: {value!r}")
    if isinstance(value, int):
        try:
            return int(enum_cls(value))
        except ValueError:
            raise ValueError(f"Invalid {label} code: {value}")
    text = str(value).strip().lower()
    if text.isdigit():
        return _parse_code(int(text), enum_cls, aliases, label)
    if text in aliases:
        return int(aliases[text])
    try:
        return int(enum_cls[text.upper()])
    except KeyError:
        valid = sorted(name.lower() for name in enum_cls.__members__)
        raise ValueError(f"Invalid {label}: {value}. Must be one of {valid}")


def compute_pri(facility: int, severity: int) -> int:
    """
    Compute the PRI value embedded in the syslog header.

    Raises:
        EncodingError: If facility is not in 0..23 or severity is not in 0..7.
    """
    if isinstance(facility, bool) or not isinstance(facility, int):
        raise EncodingError(f"Facility must be an integer, got {facility!r}")
    if isinstance(severity, bool) or not isinstance(severity, int):
        raise EncodingError(f"Severity must be an integer, got {severity!r}")
    if not Facility.KERN <= facility <= Facility.LOCAL7:
        raise EncodingError(f"Facility out of range (0-23): {facility}")
    if not Severity.EMERGENCY <= severity <= Severity.DEBUG:
        raise EncodingError(f"Severity out of range (0-7): {severity}")
    return facility * 8 + severity


def format_rfc3164_timestamp(timestamp: datetime) -> str:
    """Format a timestamp as "Mmm dd hh:mm:ss" with a space-padded day."""
    return (
        f"{RFC3164_MONTHS[timestamp.month - 1]} {timestamp.day:2d} "
        f"{timestamp.hour:02d}:{timestamp.minute:02d}:{timestamp.second:02d}"
    )


def format_rfc5424_timestamp(timestamp: datetime) -> str:
    """
    Format a timestamp as ISO-8601 with millisecond precision and zone offset.

    Naive timestamps are taken to be local time. UTC is written as "Z".
    """
    if timestamp.tzinfo is None:
        timestamp = timestamp.astimezone()
    text = timestamp.isoformat(timespec="milliseconds")
    if timestamp.utcoffset() == timedelta(0):
        text = text[: -len("+00:00")] + "Z"
    return text


class MessageEncoder:
    """
    Encoder turning log requests into syslog message bytes.

    The encoder holds the per-session header fields (hostname, app name and
    layout). It accepts the full standard facility range; narrowing it to the
    facilities exposed to users is left to the caller.
    """

    def __init__(
        self,
        local_hostname: str = "localhost",
        app_name: str = "",
        syslog_format: SyslogFormat = SyslogFormat.RFC5424,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the encoder.

        Args:
            local_hostname: HOSTNAME field identifying the message origin
            app_name: APP-NAME field (RFC 5424 only, "-" when empty)
            syslog_format: The message layout to produce
            logger: Logger instance
        """
        self.local_hostname = local_hostname
        self.app_name = app_name
        self.syslog_format = SyslogFormat(syslog_format)
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_session_config(cls, config: "SessionConfig") -> "MessageEncoder":
        """Create an encoder from the header fields of a session configuration."""
        return cls(
            local_hostname=config.local_hostname,
            app_name=config.app_name,
            syslog_format=SyslogFormat(config.framing),
        )

    def encode(self, request: LogRequest, timestamp: Optional[datetime] = None) -> bytes:
        """
        Encode a log request.

        Args:
            request: The message, facility and severity to encode
            timestamp: Message timestamp; the current local time when omitted

        Returns:
            The UTF-8 encoded syslog message

        Raises:
            EncodingError: If the facility or severity is out of range
        """
        pri = compute_pri(request.facility, request.severity)
        if timestamp is None:
            timestamp = datetime.now().astimezone()

        if self.syslog_format == SyslogFormat.RFC3164:
            text = self._format_rfc3164(pri, request.message, timestamp)
        else:
            text = self._format_rfc5424(pri, request.message, timestamp)

        self.logger.debug(
            "Encoded syslog message",
            extra={"syslog.format": self.syslog_format.value, "syslog.pri": pri},
        )
        return text.encode("utf-8")

    def _format_rfc3164(self, pri: int, message: str, timestamp: datetime) -> str:
        return (
            f"<{pri}>{format_rfc3164_timestamp(timestamp)} "
            f"{self.local_hostname or NILVALUE} {message}"
        )

    def _format_rfc5424(self, pri: int, message: str, timestamp: datetime) -> str:
        # PROCID, MSGID and STRUCTURED-DATA are always NILVALUE
        return (
            f"<{pri}>{SYSLOG_VERSION} {format_rfc5424_timestamp(timestamp)} "
            f"{self.local_hostname or NILVALUE} {self.app_name or NILVALUE} "
            f"{NILVALUE} {NILVALUE} {NILVALUE} {message}"
        )
