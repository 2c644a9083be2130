"""Identity lookups used by the reporting layer.

Reports never reach through ``shift.cashier`` row by row: they collect
the cashier ids of a result set, fetch the matching users once, and map
them by id.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable
from uuid import UUID

from .models import User


@dataclass(frozen=True)
class CashierProfile:
    """Display data for a cashier, decoupled from the User row."""

    id: UUID
    full_name: str
    email: str

    @property
    def display_name(self) -> str:
        return self.full_name or self.email

    @classmethod
    def from_user(cls, user: User) -> "CashierProfile":
        return cls(id=user.pk, full_name=user.get_full_name(), email=user.email)

    @classmethod
    def missing(cls, user_id: UUID) -> "CashierProfile":
        return cls(id=user_id, full_name="", email="")


def fetch_cashier_profiles(user_ids: Iterable[UUID]) -> dict[UUID, CashierProfile]:
    """Return ``{user_id: CashierProfile}`` for the given ids in one query."""
    ids = {user_id for user_id in user_ids if user_id is not None}
    if not ids:
        return {}
    users = User.objects.filter(pk__in=ids).only("id", "first_name", "last_name", "email")
    return {user.pk: CashierProfile.from_user(user) for user in users}


def resolve_profile(profiles: dict[UUID, CashierProfile], user_id: UUID) -> CashierProfile:
    return profiles.get(user_id) or CashierProfile.missing(user_id)
