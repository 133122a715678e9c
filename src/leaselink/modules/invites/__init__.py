"""Invite tokens: issue, validate, redeem and revoke."""
