# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Tests for the telemetry setup

# Standard library imports
from unittest.mock import patch

# Third-party imports
import pytest

from opentelemetry.sdk.trace import TracerProvider

# Local/package imports
from ziggiz_courier_dropoff_syslog.telemetry import (
    SERVICE_NAME,
    configure_tracing,
    get_tracer,
)


@pytest.mark.unit
class TestTelemetry:
    """Tests for the tracing helpers."""

    def test_configure_tracing_sets_service_name(self):
        with patch("opentelemetry.trace.set_tracer_provider") as mock_set:
            provider = configure_tracing()

        assert isinstance(provider, TracerProvider)
        assert provider.resource.attributes["service.name"] == SERVICE_NAME
        mock_set.assert_called_once_with(provider)

    def test_configure_tracing_console_export(self):
        with patch("opentelemetry.trace.set_tracer_provider"), patch.object(
            TracerProvider, "add_span_processor"
        ) as mock_add:
            configure_tracing(console_export=True)
        mock_add.assert_called_once()

    def test_get_tracer_starts_spans(self):
        tracer = get_tracer()
        with tracer.start_as_current_span("syslog.udp.send") as span:
            assert span is not None
