# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Pytest configuration file

# Standard library imports
import asyncio
import logging

# Third-party imports
import pytest


# Define test categories
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark a test as a unit test")
    config.addinivalue_line(
        "markers", "integration: mark a test as an integration test"
    )


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration after each test."""
    yield
    # Reset root logger after each test
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.WARNING)  # Default level


class UDPCollector(asyncio.DatagramProtocol):
    """Loopback UDP receiver recording every datagram."""

    def __init__(self):
        self.datagrams = []
        self.received = asyncio.Event()

    def datagram_received(self, data, addr):
        self.datagrams.append(data)
        self.received.set()

    async def wait_for(self, count, timeout=2.0):
        async def _wait():
            while len(self.datagrams) < count:
                self.received.clear()
                await self.received.wait()

        await asyncio.wait_for(_wait(), timeout)
        return self.datagrams


class TCPCollector:
    """Loopback TCP receiver recording the raw stream of each connection."""

    def __init__(self):
        self.streams = []
        self.received = asyncio.Event()
        self.close_on_connect = False

    async def handle(self, reader, writer):
        if self.close_on_connect:
            writer.close()
            return
        stream = bytearray()
        self.streams.append(stream)
        while True:
            chunk = await reader.read(65536)
            if not chunk:
                break
            stream.extend(chunk)
            self.received.set()
        writer.close()

    @property
    def data(self):
        return b"".join(bytes(stream) for stream in self.streams)

    async def wait_for(self, size, timeout=2.0):
        async def _wait():
            while len(self.data) < size:
                self.received.clear()
                await self.received.wait()

        await asyncio.wait_for(_wait(), timeout)
        return self.data


@pytest.fixture
def udp_receiver():
    """Return a coroutine function starting a loopback UDP receiver."""

    async def _start():
        loop = asyncio.get_running_loop()
        transport, collector = await loop.create_datagram_endpoint(
            UDPCollector, local_addr=("127.0.0.1", 0)
        )
        port = transport.get_extra_info("sockname")[1]
        return transport, collector, port

    return _start


@pytest.fixture
def tcp_receiver():
    """Return a coroutine function starting a loopback TCP receiver."""

    async def _start():
        collector = TCPCollector()
        server = await asyncio.start_server(collector.handle, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        return server, collector, port

    return _start
