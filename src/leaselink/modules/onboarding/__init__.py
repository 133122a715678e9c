"""Landlord onboarding."""
