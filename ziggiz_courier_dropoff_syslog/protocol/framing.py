# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Framing helper for syslog messages sent over stream transports

# Standard library imports
import logging

from enum import Enum
from typing import Optional, Union

# Local/package imports
from ziggiz_courier_dropoff_syslog.errors import EncodingError

# Constants
DEFAULT_END_OF_MSG_MARKER = b"\n"


class FramingMode(Enum):
    """
    Enumeration for the stream framing mode.

    Values:
        TRANSPARENT: Octet-counting framing, each message prefixed with its length.
        NON_TRANSPARENT: Delimiter-based framing (message followed by a marker).
    """

    TRANSPARENT = "octet_counting"
    NON_TRANSPARENT = "non_transparent"


class FramingHelper:
    """
    Helper class for delimiting syslog messages written to a byte stream.

    A stream carries no record boundaries, so each encoded message is either
    prefixed with its byte length ("<len> <payload>") or terminated with an
    end-of-message marker so the receiver can split the stream again.
    """

    def __init__(
        self,
        framing_mode: Union[FramingMode, str] = FramingMode.TRANSPARENT,
        end_of_msg_marker: bytes = DEFAULT_END_OF_MSG_MARKER,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the framing helper.

        Args:
            framing_mode: The framing mode to use
            end_of_msg_marker: The marker appended in non-transparent framing
            logger: Logger instance
        """
        self.framing_mode = FramingMode(framing_mode)
        self.end_of_msg_marker = end_of_msg_marker
        self.logger = logger or logging.getLogger(__name__)

    def frame(self, payload: bytes) -> bytes:
        """
        Frame an encoded message for the stream.

        Args:
            payload: The encoded syslog message

        Returns:
            The bytes to write to the stream

        Raises:
            EncodingError: If an empty payload is framed with octet counting
        """
        if self.framing_mode == FramingMode.TRANSPARENT:
            if not payload:
                raise EncodingError("Cannot frame an empty message with octet counting")
            return str(len(payload)).encode("ascii") + b" " + payload

        if self.end_of_msg_marker in payload:
            self.logger.warning(
                "Message contains the end-of-message marker and will be split by the receiver",
                extra={"message.length": len(payload)},
            )
        return payload + self.end_of_msg_marker
