"""Background job task definitions."""

from leaselink.core.jobs.tasks.cleanup import (
    cleanup_invite_tokens,
    cleanup_rate_limit_buckets,
)


__all__ = ["cleanup_invite_tokens", "cleanup_rate_limit_buckets"]
