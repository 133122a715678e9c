"""Tests for the leaselink-admin CLI."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from typer.testing import CliRunner

from leaselink import __version__
from leaselink.cli import app
from leaselink.core.errors import NotFoundError
from leaselink.modules.profiles.models import ProfileRole


pytestmark = pytest.mark.unit

runner = CliRunner()


class TestSetRole:
    """Tests for the set-role command."""

    def test_changes_role(self):
        profile = SimpleNamespace(id=uuid4())

        with patch("leaselink.cli._set_role", AsyncMock(return_value=profile)) as set_role:
            result = runner.invoke(app, ["set-role", "subject-123", "tenant", "--yes"])

        assert result.exit_code == 0
        assert "tenant" in result.output
        set_role.assert_awaited_once_with("subject-123", ProfileRole.TENANT)

    def test_unknown_subject(self):
        with patch(
            "leaselink.cli._set_role",
            AsyncMock(side_effect=NotFoundError("Profile not found")),
        ):
            result = runner.invoke(app, ["set-role", "nobody", "landlord", "--yes"])

        assert result.exit_code == 1
        assert "No profile" in result.output

    def test_declined_confirmation(self):
        with patch("leaselink.cli._set_role", AsyncMock()) as set_role:
            result = runner.invoke(app, ["set-role", "subject-123", "landlord"], input="n\n")

        assert result.exit_code == 0
        assert "Cancelled" in result.output
        set_role.assert_not_called()

    def test_invalid_role(self):
        result = runner.invoke(app, ["set-role", "subject-123", "admin", "--yes"])

        assert result.exit_code != 0


class TestCleanup:
    """Tests for the cleanup command."""

    def test_prints_counts(self):
        counts = {"buckets_deleted": 4, "invites_deleted": 2}

        with patch("leaselink.cli._run_cleanup", AsyncMock(return_value=counts)):
            result = runner.invoke(app, ["cleanup"])

        assert result.exit_code == 0
        assert "buckets_deleted" in result.output
        assert "invites_deleted" in result.output


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output
