"""Tests for bearer credential resolution."""

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from leaselink.config import settings
from leaselink.core.auth.identity import resolve_subject
from tests.factories.auth import make_token


pytestmark = pytest.mark.unit


class TestResolveSubject:
    """Tests for resolve_subject."""

    def test_valid_token(self):
        assert resolve_subject(make_token("subject-123")) == "subject-123"

    @pytest.mark.parametrize("subject", ["  subject-123 ", "subject-123\n", "\tsubject-123"])
    def test_padded_subject_is_rejected(self, subject):
        assert resolve_subject(make_token(subject)) is None

    def test_surrounding_whitespace_in_credential(self):
        assert resolve_subject(f"  {make_token('subject-123')}  ") == "subject-123"

    @pytest.mark.parametrize("credential", [None, "", "   "])
    def test_missing_credential(self, credential):
        assert resolve_subject(credential) is None

    def test_malformed_token(self):
        assert resolve_subject("not-a-jwt") is None

    def test_wrong_signature(self):
        token = jwt.encode(
            {
                "sub": "subject-123",
                "aud": settings.auth_jwt_audience,
                "exp": datetime.now(UTC) + timedelta(hours=1),
            },
            "a-completely-different-signing-secret-value",
            algorithm="HS256",
        )
        assert resolve_subject(token) is None

    def test_expired_token(self):
        token = make_token("subject-123", expires_in=timedelta(minutes=-5))
        assert resolve_subject(token) is None

    def test_missing_sub_claim(self):
        assert resolve_subject(make_token(None)) is None

    def test_blank_sub_claim(self):
        assert resolve_subject(make_token("   ")) is None

    def test_wrong_audience(self):
        assert resolve_subject(make_token("subject-123", aud="someone-else")) is None
