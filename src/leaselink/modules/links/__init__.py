"""Tenant-property links."""
