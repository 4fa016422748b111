"""Observability helpers.

structlog JSON logging with request IDs bound as contextvars, plus the
OpenTelemetry tracing bootstrap shared by both services.
"""
