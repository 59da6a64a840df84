from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Protocol

from lms.models.profile import Profile
from lms.repos.memory import MemoryDB


class ProfileRepo(Protocol):
    async def get(self, user_id: str) -> Profile | None: ...
    async def add(self, profile: Profile) -> None: ...
    async def mark_certificate_issued(
        self, user_id: str, *, certificate_url: str, issued_at: datetime
    ) -> bool:
        """Set certificate_issued only if it is still false.

        Returns True when this call flipped the flag, False otherwise.
        """
        ...
    async def record_test_completion(
        self, user_id: str, *, score: float, available_at: datetime
    ) -> bool:
        """Mark the final test passed and set when the certificate unlocks.

        Does nothing once a certificate has been issued.  Returns True when
        the profile was updated.
        """
        ...


class InMemoryProfileRepo:
    def __init__(self, db: MemoryDB) -> None:
        self._db = db

    async def get(self, user_id: str) -> Profile | None:
        return self._db.profiles.get(user_id)

    async def add(self, profile: Profile) -> None:
        if profile.id in self._db.profiles:
            raise ValueError("profile already exists")
        self._db.profiles[profile.id] = profile

    async def mark_certificate_issued(
        self, user_id: str, *, certificate_url: str, issued_at: datetime
    ) -> bool:
        current = self._db.profiles.get(user_id)
        if current is None or current.certificate_issued:
            return False
        self._db.profiles[user_id] = replace(
            current,
            certificate_issued=True,
            certificate_url=certificate_url,
            certificate_issued_at=issued_at,
        )
        return True

    async def record_test_completion(
        self, user_id: str, *, score: float, available_at: datetime
    ) -> bool:
        current = self._db.profiles.get(user_id)
        if current is None or current.certificate_issued:
            return False
        self._db.profiles[user_id] = replace(
            current,
            test_completed=True,
            test_score=score,
            certificate_available_at=available_at,
        )
        return True
