# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# ziggiz_courier_dropoff_syslog package
#
# This is the package initializer for the Ziggiz Courier Dropoff Syslog forwarder.
# It provides the syslog message encoder (RFC 3164 / RFC 5424) and UDP and TCP
# transport clients for forwarding log messages to a remote syslog receiver.

# Local/package imports
from ziggiz_courier_dropoff_syslog.config import (
    ServerCredentials,
    SessionConfig,
    build_session_config,
    resolve_session_config,
)
from ziggiz_courier_dropoff_syslog.errors import (
    ConfigurationError,
    EncodingError,
    ForwardingError,
    SessionStateError,
    SyslogForwarderError,
    TransportError,
)
from ziggiz_courier_dropoff_syslog.protocol.message import (
    Facility,
    LogRequest,
    MessageEncoder,
    Severity,
    SyslogFormat,
)
from ziggiz_courier_dropoff_syslog.session import (
    Acknowledgment,
    ForwardResult,
    SyslogSession,
    forward_logs,
)

__all__ = [
    "Acknowledgment",
    "ConfigurationError",
    "EncodingError",
    "Facility",
    "ForwardResult",
    "ForwardingError",
    "LogRequest",
    "MessageEncoder",
    "ServerCredentials",
    "SessionConfig",
    "SessionStateError",
    "Severity",
    "SyslogForwarderError",
    "SyslogFormat",
    "SyslogSession",
    "TransportError",
    "build_session_config",
    "forward_logs",
    "resolve_session_config",
]
