from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from lms.models.catalog import new_id

PAYMENT_PENDING = "PENDING"
PAYMENT_COMPLETED = "COMPLETED"
PAYMENT_FAILED = "FAILED"


@dataclass(frozen=True, slots=True)
class ModuleEnrollment:
    """One learner's relation to one module.  Unique on (user_id, module_id)."""

    id: str
    user_id: str
    module_id: str
    enrolled_at: datetime
    progress_percentage: int = 0
    completed_at: datetime | None = None
    payment_status: str = PAYMENT_PENDING  # PENDING|COMPLETED|FAILED
    completed_sub_topics: Any = None

    @staticmethod
    def new(*, user_id: str, module_id: str, enrolled_at: datetime) -> ModuleEnrollment:
        return ModuleEnrollment(
            id=new_id(),
            user_id=user_id,
            module_id=module_id,
            enrolled_at=enrolled_at,
        )


@dataclass(frozen=True, slots=True)
class ProgressUpdate:
    """Requested change to an enrollment.

    ``progress`` is None when the caller did not supply a value (an
    explicit null is treated the same way).  ``completed`` is always
    applied: truthy sets completed_at, falsy clears it.
    """

    progress: int | float | None = None
    completed: bool = False
