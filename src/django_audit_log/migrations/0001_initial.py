# Generated manually for the consent registry audit log

import uuid

import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AuditEvent",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                (
                    "event_type",
                    models.CharField(
                        db_index=True,
                        help_text="Event type: ConsentGranted, AgreementDeleted, etc.",
                        max_length=50,
                    ),
                ),
                (
                    "timestamp",
                    models.DateTimeField(db_index=True, default=django.utils.timezone.now),
                ),
                ("customer_id", models.CharField(blank=True, db_index=True, max_length=255)),
                ("agreement_id", models.CharField(blank=True, db_index=True, max_length=255)),
                (
                    "user_id",
                    models.CharField(
                        default="system",
                        help_text='Who triggered the event (user id, customer id or "system")',
                        max_length=200,
                    ),
                ),
                (
                    "details",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Event context: consent type, action, method, reason, ...",
                    ),
                ),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("user_agent", models.CharField(blank=True, max_length=500)),
                ("request_id", models.CharField(blank=True, max_length=100)),
            ],
            options={
                "ordering": ["-timestamp"],
                "indexes": [
                    models.Index(fields=["event_type", "timestamp"], name="audit_event_type_ts_idx"),
                ],
            },
        ),
    ]
