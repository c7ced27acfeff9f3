# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Exception hierarchy for the syslog forwarder

# Standard library imports
from typing import Optional


class SyslogForwarderError(Exception):
    """Base class for all errors raised by the syslog forwarder."""


class ConfigurationError(SyslogForwarderError, ValueError):
    """
    Raised when the session configuration is missing or invalid.

    Detected before any send attempt; no message is sent when this is raised.
    """


class EncodingError(SyslogForwarderError, ValueError):
    """Raised when a log request cannot be encoded (facility or severity out of range)."""


class TransportError(SyslogForwarderError):
    """
    Raised when a syslog message could not be handed to the network.

    Attributes:
        cause: The underlying OS or network error, if any.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class SessionStateError(SyslogForwarderError):
    """Raised when sending through a session that has failed or been closed."""


class ForwardingError(SyslogForwarderError):
    """
    Raised when forwarding a log request fails.

    Attributes:
        index: Position of the failing request within the session.
        log_message: Text of the message that could not be forwarded.
        cause: The EncodingError or TransportError that stopped forwarding.
    """

    def __init__(self, index: int, log_message: str, cause: SyslogForwarderError):
        super().__init__(f"Failed to forward message at index {index}: {cause}")
        self.index = index
        self.log_message = log_message
        self.cause = cause
