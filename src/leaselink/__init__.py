"""Leaselink: multi-tenant property management backend."""

__version__ = "0.1.0"
