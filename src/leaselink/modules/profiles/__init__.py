"""Profiles: the internal identity record behind each subject."""
