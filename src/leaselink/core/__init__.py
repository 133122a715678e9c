"""Core infrastructure: database, auth, policy, rate limiting, jobs."""
