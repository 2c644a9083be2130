"""Models for the organizations app (tenants, membership, audit trail)."""
import uuid

from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models

from core.models import TimeStampedModel


access_code_validator = RegexValidator(
    regex=r"^\d{6}$",
    message="Le code d'acces doit comporter exactement 6 chiffres.",
)


# ---------------------------------------------------------------------------
# Organization
# ---------------------------------------------------------------------------

class Organization(TimeStampedModel):
    """Tenant boundary: every shift, booking and report is scoped to one."""

    name = models.CharField("nom", max_length=255)
    slug = models.SlugField("identifiant", max_length=80, unique=True)
    currency = models.CharField("devise", max_length=10, default="USD")
    require_access_code = models.BooleanField(
        "code d'acces requis",
        default=False,
        help_text="Si actif, les caissiers doivent saisir le code du jour pour ouvrir une session.",
    )
    daily_access_code = models.CharField(
        "code d'acces du jour",
        max_length=6,
        blank=True,
        default="",
        validators=[access_code_validator],
    )
    daily_access_code_set_at = models.DateTimeField(
        "code defini le",
        null=True,
        blank=True,
    )
    is_active = models.BooleanField("active", default=True)

    class Meta:
        ordering = ["name"]
        verbose_name = "Organisation"
        verbose_name_plural = "Organisations"

    def __str__(self):
        return self.name


class OrganizationMember(models.Model):
    """Links a user to one or more organizations."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="members",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    is_default = models.BooleanField(
        default=False,
        help_text="If True, this organization is the user's default one.",
    )

    class Meta:
        unique_together = [("organization", "user")]
        verbose_name = "Membre"
        verbose_name_plural = "Membres"

    def __str__(self):
        return f"{self.user} - {self.organization}"


class AuditLog(models.Model):
    """Immutable log of every significant action in the system."""

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
    )
    organization = models.ForeignKey(
        Organization,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
    )
    action = models.CharField(max_length=100)
    entity_type = models.CharField(max_length=100, db_index=True)
    entity_id = models.CharField(max_length=255)
    before_json = models.JSONField(null=True, blank=True)
    after_json = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Journal d'audit"
        verbose_name_plural = "Journaux d'audit"
        indexes = [
            models.Index(fields=["organization", "created_at"], name="audit_org_created_idx"),
            models.Index(fields=["action", "created_at"], name="audit_action_created_idx"),
        ]

    def __str__(self):
        return f"[{self.created_at}] {self.action} on {self.entity_type} #{self.entity_id}"
