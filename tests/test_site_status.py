"""Tests for site status transitions."""

import pytest

from app.core.exceptions import ValidationException
from app.schemas.railway_site import SiteStatus
from app.services.site_status import can_transition, check_transition


@pytest.mark.parametrize(
    "current,target",
    [
        ("planning", "survey"),
        ("survey", "design"),
        ("design", "construction"),
        ("construction", "operational"),
        ("operational", "maintenance"),
        ("maintenance", "operational"),
        ("design", "design"),
    ],
)
def test_allowed_transitions(current, target):
    assert can_transition(SiteStatus(current), SiteStatus(target))


@pytest.mark.parametrize(
    "current,target",
    [
        ("planning", "operational"),
        ("survey", "planning"),
        ("operational", "construction"),
        ("maintenance", "planning"),
    ],
)
def test_illegal_transitions(current, target):
    assert not can_transition(current, target)


def test_check_transition_is_free_form_by_default():
    check_transition(SiteStatus.PLANNING, SiteStatus.OPERATIONAL, enforce=False)


def test_check_transition_rejects_illegal_jump_when_enforced():
    with pytest.raises(ValidationException) as exc_info:
        check_transition(SiteStatus.PLANNING, SiteStatus.OPERATIONAL, enforce=True)
    assert "planning" in exc_info.value.message
    assert exc_info.value.status_code == 422
