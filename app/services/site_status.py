"""Railway site status transitions."""

from typing import Dict, FrozenSet, Optional

from app.core.exceptions import ValidationException
from app.schemas.railway_site import SiteStatus

ALLOWED_TRANSITIONS: Dict[SiteStatus, FrozenSet[SiteStatus]] = {
    SiteStatus.PLANNING: frozenset({SiteStatus.SURVEY}),
    SiteStatus.SURVEY: frozenset({SiteStatus.DESIGN}),
    SiteStatus.DESIGN: frozenset({SiteStatus.CONSTRUCTION}),
    SiteStatus.CONSTRUCTION: frozenset({SiteStatus.OPERATIONAL}),
    SiteStatus.OPERATIONAL: frozenset({SiteStatus.MAINTENANCE}),
    SiteStatus.MAINTENANCE: frozenset({SiteStatus.OPERATIONAL}),
}


def can_transition(current: SiteStatus, target: SiteStatus) -> bool:
    current, target = SiteStatus(current), SiteStatus(target)
    return current == target or target in ALLOWED_TRANSITIONS[current]


def check_transition(current: Optional[SiteStatus], target: SiteStatus, enforce: bool) -> None:
    """Raise ValidationException for an illegal jump when enforcement is on."""
    if not enforce or current is None:
        return
    if not can_transition(current, target):
        raise ValidationException(
            f"Site status cannot change from '{SiteStatus(current).value}' to '{SiteStatus(target).value}'"
        )
