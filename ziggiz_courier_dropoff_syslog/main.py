# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Main entry point for the syslog forwarder

# Standard library imports
import argparse
import asyncio
import json
import logging
import sys

from typing import IO, List, Optional, Sequence

# Local/package imports
from ziggiz_courier_dropoff_syslog.config import Config, configure_logging, load_config
from ziggiz_courier_dropoff_syslog.errors import ConfigurationError
from ziggiz_courier_dropoff_syslog.protocol.message import LogRequest
from ziggiz_courier_dropoff_syslog.session import ForwardResult, forward_logs
from ziggiz_courier_dropoff_syslog.telemetry import configure_tracing


def setup_logging(log_level: str = "INFO", config: Optional[Config] = None) -> None:
    """
    Configure logging with appropriate formatters and handlers.

    Args:
        log_level: The logging level to set (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        config: Optional configuration object to use for logging setup
    """
    if config:
        # Use the configuration-based logging setup
        configure_logging(config)
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

        # Create a formatter with timestamp, level, and logger name
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        # Configure the root logger
        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        # Log to stderr, stdout carries the acknowledgments
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        # Set specific log levels for third-party libraries
        logging.getLogger("asyncio").setLevel(logging.WARNING)


def read_messages(messages: Optional[List[str]], stream: IO[str]) -> List[str]:
    """
    Collect the messages to forward.

    Args:
        messages: Messages given on the command line, if any
        stream: Stream to read one message per line from otherwise

    Returns:
        The messages in order, skipping blank lines from the stream
    """
    if messages:
        return list(messages)
    return [line.rstrip("\r\n") for line in stream if line.strip()]


def write_result(result: ForwardResult, out: IO[str]) -> None:
    for output in result.outputs():
        out.write(json.dumps(output) + "\n")
    out.flush()


def run_forwarder(config: Config, messages: Sequence[str], out: IO[str]) -> int:
    """
    Forward messages using the given configuration.

    Args:
        config: The loaded configuration
        messages: The message texts to forward, in order
        out: Stream receiving one JSON acknowledgment per sent message

    Returns:
        The process exit status (0 on success, 1 on failure)
    """
    logger = logging.getLogger("ziggiz_courier_dropoff_syslog.main")

    try:
        session_config = config.to_session_config()
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    if config.enable_console_tracing:
        configure_tracing(console_export=True)

    requests = [
        LogRequest(message, config.facility, config.severity) for message in messages
    ]
    logger.info(
        f"Forwarding {len(requests)} messages to {session_config.host}:{session_config.port} "
        f"using {session_config.protocol.upper()} ({session_config.framing.upper()})"
    )
    result = asyncio.run(forward_logs(session_config, requests))
    write_result(result, out)

    if result.error is not None:
        logger.error(
            f"Forwarding failed: {result.error}",
            extra={
                "syslog.index": result.error.index,
                "log_msg": result.error.log_message,
            },
        )
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Ziggiz Courier Syslog Forwarder",
        epilog="Messages are read from --message options, or one per line from stdin.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (overrides config file)",
    )
    parser.add_argument(
        "--host",
        type=str,
        help="Syslog receiver IP or hostname (overrides config file)",
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Syslog receiver port (overrides config file)",
    )
    parser.add_argument(
        "--protocol",
        type=str,
        choices=["udp", "tcp"],
        help="Protocol to use (udp or tcp, overrides config file)",
    )
    parser.add_argument(
        "--framing",
        type=str,
        choices=["rfc3164", "rfc5424"],
        help="Syslog message format (rfc3164 or rfc5424, overrides config file)",
    )
    parser.add_argument(
        "--tcp-framing",
        type=str,
        choices=["octet_counting", "non_transparent"],
        help="Stream framing for TCP (octet_counting or non_transparent, overrides config file)",
    )
    parser.add_argument(
        "--hostname",
        type=str,
        help="Hostname written into each message (overrides config file)",
    )
    parser.add_argument(
        "--app-name",
        type=str,
        help="Application name for RFC 5424 messages (overrides config file)",
    )
    parser.add_argument(
        "--facility",
        type=str,
        help="Message facility, code or name such as local0 (overrides config file)",
    )
    parser.add_argument(
        "--severity",
        type=str,
        help="Message severity, code or name such as warning (overrides config file)",
    )
    parser.add_argument(
        "--allow-all-facilities",
        action="store_true",
        help="Accept every standard facility code, not only the supported subset",
    )
    parser.add_argument(
        "--message",
        action="append",
        help="Message to send (repeatable)",
    )
    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Return a copy of config with command line arguments applied."""
    overrides = {
        "log_level": args.log_level,
        "host": args.host,
        "port": args.port,
        "protocol": args.protocol,
        "framing": args.framing,
        "tcp_framing": args.tcp_framing,
        "local_hostname": args.hostname,
        "app_name": args.app_name,
        "facility": args.facility,
        "severity": args.severity,
    }
    data = config.model_dump()
    data.update({key: value for key, value in overrides.items() if value is not None})
    if args.allow_all_facilities:
        data["restrict_facilities"] = False
    return Config(**data)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    Main entry point for the syslog forwarder.
    Parses command-line arguments, sets up logging, and forwards the messages.
    """
    args = build_parser().parse_args(argv)

    try:
        config = apply_overrides(load_config(args.config if args.config else None), args)

        # Setup logging based on configuration
        setup_logging(config=config)
        logger = logging.getLogger("ziggiz_courier_dropoff_syslog.main")

        # Log configuration source
        if args.config:
            logger.info(f"Loaded configuration from {args.config}")
        else:
            logger.info("Using default or automatically detected configuration")

        messages = read_messages(args.message, sys.stdin)
        status = run_forwarder(config, messages, sys.stdout)
    except KeyboardInterrupt:
        logger = logging.getLogger("ziggiz_courier_dropoff_syslog.main")
        logger.info("Forwarding interrupted by user")
        status = 1
    except Exception as e:
        # Setup basic logging if we couldn't load the configuration
        if not logging.root.handlers:
            setup_logging("ERROR")
        logger = logging.getLogger("ziggiz_courier_dropoff_syslog.main")
        logger.exception(f"Unexpected error: {e}")
        status = 1

    sys.exit(status)


if __name__ == "__main__":
    main()
