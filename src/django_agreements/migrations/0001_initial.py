# Generated manually for the django-agreements app

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Agreement",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "agreement_id",
                    models.CharField(
                        help_text="Public agreement identifier (client-supplied or UUID)",
                        max_length=255,
                        unique=True,
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                (
                    "agreement_type",
                    models.CharField(
                        help_text="Agreement type (Service Agreement, Partnership Agreement, etc.)",
                        max_length=100,
                    ),
                ),
                ("description", models.TextField(blank=True, null=True)),
                ("statement_of_intent", models.TextField(blank=True, null=True)),
                ("version", models.CharField(blank=True, max_length=50, null=True)),
                ("document_number", models.BigIntegerField(blank=True, null=True)),
                (
                    "items",
                    models.JSONField(
                        default=list,
                        help_text="Agreement items with product offerings and terms",
                    ),
                ),
                (
                    "period",
                    models.JSONField(
                        blank=True,
                        help_text="Validity period {start, end?} as ISO-8601 strings",
                        null=True,
                    ),
                ),
                (
                    "specification",
                    models.JSONField(
                        blank=True,
                        help_text="AgreementSpecification reference",
                        null=True,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("in process", "In process"),
                            ("active", "Active"),
                            ("terminated", "Terminated"),
                            ("suspended", "Suspended"),
                        ],
                        default="in process",
                        max_length=20,
                    ),
                ),
                ("type_tag", models.CharField(blank=True, max_length=100, null=True)),
                ("base_type", models.CharField(blank=True, max_length=100, null=True)),
                ("schema_location", models.CharField(blank=True, max_length=500, null=True)),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "ordering": ["pk"],
                "indexes": [
                    models.Index(fields=["status"], name="agreement_status_idx"),
                    models.Index(fields=["agreement_type"], name="agreement_type_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AgreementParty",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "relation",
                    models.CharField(
                        choices=[("engaged", "Engaged party"), ("related", "Related party")],
                        max_length=10,
                    ),
                ),
                ("position", models.PositiveIntegerField()),
                ("party_id", models.CharField(max_length=255)),
                ("name", models.CharField(blank=True, max_length=255, null=True)),
                ("role", models.CharField(max_length=100)),
                ("href", models.CharField(blank=True, max_length=500, null=True)),
                ("referred_type", models.CharField(default="Organization", max_length=50)),
                (
                    "agreement",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="parties",
                        to="django_agreements.agreement",
                    ),
                ),
            ],
            options={
                "ordering": ["relation", "position"],
                "indexes": [
                    models.Index(fields=["relation", "party_id"], name="agreement_party_lookup_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("agreement", "relation", "position"),
                        name="unique_agreement_party_position",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AgreementAuditEntry",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("timestamp", models.DateTimeField()),
                ("action", models.CharField(max_length=50)),
                ("by", models.CharField(max_length=200)),
                ("changed_fields", models.JSONField(blank=True, default=list)),
                (
                    "agreement",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="audit_entries",
                        to="django_agreements.agreement",
                    ),
                ),
            ],
            options={
                "ordering": ["pk"],
            },
        ),
    ]
