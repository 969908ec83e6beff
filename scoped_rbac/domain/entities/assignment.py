"""
Assignment domain entity.

Captures the temporal business rule of a role assignment independent of
how it is stored.
"""

from dataclasses import dataclass
from datetime import datetime

from scoped_rbac.shared.utils.datetime import ensure_utc, utc_now


@dataclass
class AssignmentWindow:
    """
    Validity of a user-role assignment.

    ``is_active`` is the explicit revocation flag; the date window is checked
    independently of it.
    """

    is_active: bool
    start_date: datetime | None = None
    end_date: datetime | None = None

    def validate(self) -> None:
        """Business rule: an assignment cannot end before it starts"""
        if self.start_date and self.end_date:
            if ensure_utc(self.end_date) < ensure_utc(self.start_date):
                raise ValueError("end_date must not be earlier than start_date")

    def is_current(self, now: datetime | None = None) -> bool:
        """
        Business rule: an assignment grants its role only while it is active
        and ``now`` falls inside ``[start_date, end_date]``.
        """
        if not self.is_active:
            return False

        now = ensure_utc(now) if now else utc_now()
        if self.start_date and ensure_utc(self.start_date) > now:
            return False
        if self.end_date and ensure_utc(self.end_date) < now:
            return False
        return True
