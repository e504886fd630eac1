"""Agreement, AgreementParty and AgreementAuditEntry models.

These tables back the ORM agreement store. Records are read and written
through django_agreements.stores only; the service layer is the only
supported write path:
- create_agreement()
- update_agreement()
- delete_agreement()

Nested structures that have no lifecycle of their own (items with their
product offerings and terms, the period, the specification reference) are
stored as JSON documents on the agreement row. Parties get their own rows so
agreements can be filtered by engaged party.
"""

from django.db import models

from .exceptions import ImmutableAuditEntryError
from .status import INITIAL_STATUS, AgreementStatus


class Agreement(models.Model):
    """
    Agreement aggregate root.

    ``agreement_id`` is the public identifier; the auto primary key only
    preserves insertion order. Deletion is a hard delete and cascades to the
    owned party and audit rows.

    Optional text fields are nullable so an absent value round-trips as
    absent rather than as an empty string.
    """

    agreement_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Public agreement identifier (client-supplied or UUID)",
    )
    name = models.CharField(max_length=255)
    agreement_type = models.CharField(
        max_length=100,
        help_text="Agreement type (Service Agreement, Partnership Agreement, etc.)",
    )
    description = models.TextField(null=True, blank=True)
    statement_of_intent = models.TextField(null=True, blank=True)
    version = models.CharField(max_length=50, null=True, blank=True)
    document_number = models.BigIntegerField(null=True, blank=True)

    items = models.JSONField(
        default=list,
        help_text="Agreement items with product offerings and terms",
    )
    period = models.JSONField(
        null=True,
        blank=True,
        help_text="Validity period {start, end?} as ISO-8601 strings",
    )
    specification = models.JSONField(
        null=True,
        blank=True,
        help_text="AgreementSpecification reference",
    )

    status = models.CharField(
        max_length=20,
        choices=AgreementStatus.choices,
        default=INITIAL_STATUS,
    )

    type_tag = models.CharField(max_length=100, null=True, blank=True)
    base_type = models.CharField(max_length=100, null=True, blank=True)
    schema_location = models.CharField(max_length=500, null=True, blank=True)

    created_at = models.DateTimeField()
    updated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        app_label = 'django_agreements'
        indexes = [
            models.Index(fields=['status'], name='agreement_status_idx'),
            models.Index(fields=['agreement_type'], name='agreement_type_idx'),
        ]
        ordering = ['pk']

    def __str__(self):
        return f"{self.name} ({self.agreement_type}) - {self.status}"


class AgreementParty(models.Model):
    """A party reference embedded in an agreement, in wire order."""

    class Relation(models.TextChoices):
        ENGAGED = "engaged", "Engaged party"
        RELATED = "related", "Related party"

    agreement = models.ForeignKey(
        Agreement,
        on_delete=models.CASCADE,
        related_name='parties',
    )
    relation = models.CharField(max_length=10, choices=Relation.choices)
    position = models.PositiveIntegerField()

    party_id = models.CharField(max_length=255)
    name = models.CharField(max_length=255, null=True, blank=True)
    role = models.CharField(max_length=100)
    href = models.CharField(max_length=500, null=True, blank=True)
    referred_type = models.CharField(max_length=50, default='Organization')

    class Meta:
        app_label = 'django_agreements'
        indexes = [
            models.Index(fields=['relation', 'party_id'], name='agreement_party_lookup_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['agreement', 'relation', 'position'],
                name='unique_agreement_party_position',
            ),
        ]
        ordering = ['relation', 'position']

    def __str__(self):
        return f"{self.party_id} ({self.role})"


class AgreementAuditEntry(models.Model):
    """
    Immutable audit entry for an agreement.

    This is the ledger. Never modified after creation; entries only leave
    the table when their agreement is hard-deleted.
    """

    agreement = models.ForeignKey(
        Agreement,
        on_delete=models.CASCADE,
        related_name='audit_entries',
    )
    timestamp = models.DateTimeField()
    action = models.CharField(max_length=50)
    by = models.CharField(max_length=200)
    changed_fields = models.JSONField(default=list, blank=True)

    class Meta:
        app_label = 'django_agreements'
        ordering = ['pk']

    def save(self, *args, **kwargs):
        """Enforce immutability - audit entries are ledger records."""
        if not self._state.adding:
            raise ImmutableAuditEntryError(self.pk)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.action} by {self.by} at {self.timestamp:%Y-%m-%d %H:%M:%S}"
