"""
Customer model (TMF629 customer management).

Consent preferences are kept on the customer as a {category: bool} document.
They are changed through django_consent.services.update_preferences() so
every grant and revocation lands in the audit log.
"""
from django.db import models


class CustomerStatus(models.TextChoices):
    ACTIVE = "Active", "Active"
    INACTIVE = "Inactive", "Inactive"


class Customer(models.Model):
    """A data subject whose consents are managed."""

    customer_id = models.CharField(
        max_length=64,
        unique=True,
        help_text="Public customer identifier (cust_...)",
    )
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32, blank=True)
    preferred_language = models.CharField(max_length=10, default='en')

    consent_preferences = models.JSONField(
        default=dict,
        blank=True,
        help_text="Consent category -> granted flag",
    )

    status = models.CharField(
        max_length=20,
        choices=CustomerStatus.choices,
        default=CustomerStatus.ACTIVE,
        db_index=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        app_label = 'django_customers'
        ordering = ['pk']

    def __str__(self):
        return f"{self.name} ({self.customer_id})"

    @property
    def last_updated(self):
        return self.updated_at or self.created_at
