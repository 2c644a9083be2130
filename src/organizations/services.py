"""Service functions for the organizations app."""
from __future__ import annotations

import logging
import secrets
from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import QuerySet

from accounts.models import User
from core.clock import Clock, get_clock

from .models import AuditLog, Organization, OrganizationMember, access_code_validator

logger = logging.getLogger("shiftledger")


class AccessCodeError(ValueError):
    """The daily access code is missing, expired or wrong."""


def create_audit_log(
    actor: User | None,
    organization: Organization | None,
    action: str,
    entity_type: str,
    entity_id: str,
    before: dict[str, Any] | None = None,
    after: dict[str, Any] | None = None,
) -> AuditLog:
    """Create and return a new :class:`~organizations.models.AuditLog` entry."""
    return AuditLog.objects.create(
        actor=actor,
        organization=organization,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        before_json=before,
        after_json=after,
    )


# ==================================================================
# Membership
# ==================================================================

def get_user_organizations(user: User) -> QuerySet[Organization]:
    """Return the active organizations the *user* belongs to."""
    qs = Organization.objects.filter(is_active=True)
    if getattr(user, "is_superuser", False):
        return qs
    return qs.filter(members__user=user).distinct()


def user_organization_ids(user: User) -> list:
    return list(get_user_organizations(user).values_list("id", flat=True))


def is_member(user: User, organization: Organization) -> bool:
    if getattr(user, "is_superuser", False):
        return True
    return OrganizationMember.objects.filter(user=user, organization=organization).exists()


# ==================================================================
# Daily access code
# ==================================================================

def generate_access_code() -> str:
    """Return a random six-digit code (never starting with 0)."""
    return str(100000 + secrets.randbelow(900000))


def set_access_code(
    organization: Organization,
    code: str | None = None,
    *,
    actor: User | None = None,
    clock: Clock | None = None,
) -> str:
    """Set today's access code, generating one when *code* is empty.

    The code is valid until local midnight of the day it was set.
    """
    code = (code or "").strip() or generate_access_code()
    try:
        access_code_validator(code)
    except DjangoValidationError as exc:
        raise AccessCodeError("Le code d'acces doit comporter exactement 6 chiffres.") from exc

    clock = get_clock(clock)
    organization.daily_access_code = code
    organization.daily_access_code_set_at = clock.now()
    organization.save(update_fields=["daily_access_code", "daily_access_code_set_at", "updated_at"])

    create_audit_log(
        actor=actor,
        organization=organization,
        action="SET_ACCESS_CODE",
        entity_type="Organization",
        entity_id=str(organization.pk),
        after={"set_at": organization.daily_access_code_set_at.isoformat()},
    )
    logger.info("Access code set for organization %s", organization.pk)
    return code


def clear_access_code(organization: Organization, *, actor: User | None = None) -> None:
    """Remove the access code; staff then need a manager to open a session."""
    organization.daily_access_code = ""
    organization.daily_access_code_set_at = None
    organization.save(update_fields=["daily_access_code", "daily_access_code_set_at", "updated_at"])

    create_audit_log(
        actor=actor,
        organization=organization,
        action="CLEAR_ACCESS_CODE",
        entity_type="Organization",
        entity_id=str(organization.pk),
    )
    logger.info("Access code cleared for organization %s", organization.pk)


def is_access_code_current(organization: Organization, *, clock: Clock | None = None) -> bool:
    """True when a code exists and was set today (local time)."""
    if not organization.daily_access_code or organization.daily_access_code_set_at is None:
        return False
    clock = get_clock(clock)
    return organization.daily_access_code_set_at >= clock.start_of_today()


def check_access_code(
    organization: Organization,
    code: str | None,
    *,
    clock: Clock | None = None,
) -> None:
    """Raise :class:`AccessCodeError` unless *code* is today's valid code."""
    if not organization.daily_access_code:
        raise AccessCodeError(
            "Aucun code d'acces n'a ete defini aujourd'hui. Contactez votre responsable."
        )
    if not is_access_code_current(organization, clock=clock):
        raise AccessCodeError(
            "Le code d'acces d'hier a expire. Demandez un nouveau code a votre responsable."
        )
    if not secrets.compare_digest(organization.daily_access_code, (code or "").strip()):
        raise AccessCodeError("Code d'acces invalide.")
