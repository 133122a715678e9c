"""Observability module for tracing.

Provides OpenTelemetry integration for distributed tracing.
"""

from leaselink.core.observability.tracing import setup_tracing, shutdown_tracing


__all__ = ["setup_tracing", "shutdown_tracing"]
