"""Tests for maintenance status transitions."""

import pytest

from leaselink.core.errors import ValidationError
from leaselink.modules.maintenance.models import MaintenanceStatus
from leaselink.modules.maintenance.services import check_transition


pytestmark = pytest.mark.unit

S = MaintenanceStatus


class TestCheckTransition:
    """Tests for check_transition."""

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (S.PENDING, S.IN_PROGRESS),
            (S.PENDING, S.CANCELLED),
            (S.IN_PROGRESS, S.COMPLETED),
            (S.IN_PROGRESS, S.CANCELLED),
            (S.COMPLETED, S.COMPLETED),
        ],
    )
    def test_allowed(self, current, target):
        check_transition(current, target)

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (S.PENDING, S.COMPLETED),
            (S.IN_PROGRESS, S.PENDING),
            (S.COMPLETED, S.PENDING),
            (S.COMPLETED, S.CANCELLED),
            (S.CANCELLED, S.IN_PROGRESS),
        ],
    )
    def test_rejected(self, current, target):
        with pytest.raises(ValidationError) as exc_info:
            check_transition(current, target)

        assert exc_info.value.error_code == "invalid_status_transition"
        assert exc_info.value.details == {"from": current.value, "to": target.value}
