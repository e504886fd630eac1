"""Audit event model.

Records consent and agreement events for compliance reporting:
- Event type (ConsentGranted, ConsentRevoked, AgreementDeleted, ...)
- Subject references (customer id, agreement id) as plain strings
- Actor snapshot (user id)
- Free-form details (JSON)
- Request context (IP, user agent, request ID)

NOTE: Audit events are append-only. No soft delete - they're immutable records.
"""
import uuid

from django.db import models
from django.utils import timezone

from .exceptions import ImmutableAuditEventError


class AuditEventType(models.TextChoices):
    """Event types emitted by this project. Other types may be posted."""

    CONSENT_GRANTED = "ConsentGranted", "Consent granted"
    CONSENT_REVOKED = "ConsentRevoked", "Consent revoked"
    CONSENT_UPDATED = "ConsentUpdated", "Consent updated"
    CONSENT_EXPIRED = "ConsentExpired", "Consent expired"
    DATA_PROCESSING = "DataProcessing", "Data processing"
    AGREEMENT_CREATED = "AgreementCreated", "Agreement created"
    AGREEMENT_UPDATED = "AgreementUpdated", "Agreement updated"
    AGREEMENT_DELETED = "AgreementDeleted", "Agreement deleted"
    CUSTOMER_CREATED = "CustomerCreated", "Customer created"
    CUSTOMER_UPDATED = "CustomerUpdated", "Customer updated"


class AuditEvent(models.Model):
    """Immutable audit event.

    Records who did what to which customer or agreement, when and from where.
    Audit events are never deleted - they're the source of truth for auditors.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    event_type = models.CharField(
        max_length=50,
        db_index=True,
        help_text='Event type: ConsentGranted, AgreementDeleted, etc.',
    )
    timestamp = models.DateTimeField(default=timezone.now, db_index=True)

    # Subjects - plain identifiers, events outlive the records they describe
    customer_id = models.CharField(max_length=255, blank=True, db_index=True)
    agreement_id = models.CharField(max_length=255, blank=True, db_index=True)

    # Actor
    user_id = models.CharField(
        max_length=200,
        default='system',
        help_text='Who triggered the event (user id, customer id or "system")',
    )

    details = models.JSONField(
        default=dict,
        blank=True,
        help_text='Event context: consent type, action, method, reason, ...',
    )

    # Request context
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=500, blank=True)
    request_id = models.CharField(max_length=100, blank=True)

    class Meta:
        app_label = 'django_audit_log'
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['event_type', 'timestamp'], name='audit_event_type_ts_idx'),
        ]

    def save(self, *args, **kwargs):
        """Enforce immutability - audit events are written once."""
        if not self._state.adding:
            raise ImmutableAuditEventError(self.pk)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.event_type} ({self.customer_id or self.agreement_id or '-'}) at {self.timestamp}"
