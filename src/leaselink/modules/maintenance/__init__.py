"""Maintenance requests raised by tenants."""
