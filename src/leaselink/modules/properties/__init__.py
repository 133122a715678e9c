"""Properties owned by landlords, with their areas and join codes."""
