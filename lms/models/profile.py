from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Profile:
    """Per-user learner profile.  ``id`` is the user id."""

    id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    role: str = "learner"
    test_completed: bool = False
    test_score: float | None = None
    certificate_issued: bool = False
    certificate_available_at: datetime | None = None
    certificate_url: str | None = None
    certificate_issued_at: datetime | None = None
