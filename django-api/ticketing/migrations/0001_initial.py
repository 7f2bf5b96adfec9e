import uuid

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="TicketType",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("event_id", models.UUIDField(db_index=True)),
                ("label", models.CharField(max_length=100)),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("total_capacity", models.PositiveIntegerField()),
                ("remaining_availability", models.PositiveIntegerField()),
                ("perks", models.JSONField(blank=True, default=list)),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("onSale", "On sale"), ("closed", "Closed")],
                        default="draft",
                        max_length=16,
                    ),
                ),
                ("has_purchases", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField()),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(remaining_availability__lte=models.F("total_capacity")),
                        name="ticket_type_remaining_within_capacity",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Purchase",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("event_id", models.UUIDField(db_index=True)),
                ("buyer_name", models.CharField(max_length=255)),
                ("buyer_email", models.EmailField(max_length=254)),
                ("buyer_phone", models.CharField(max_length=32)),
                ("line_items", models.JSONField(default=list)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("completed", "Completed"),
                            ("partiallyRefunded", "Partially refunded"),
                            ("refunded", "Refunded"),
                        ],
                        default="completed",
                        max_length=24,
                    ),
                ),
                ("refunded_quantity", models.PositiveIntegerField(default=0)),
                ("payment_id", models.CharField(blank=True, max_length=64, null=True)),
                ("version", models.PositiveIntegerField(default=1)),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField()),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["event_id", "status"], name="purchase_event_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="Rsvp",
            fields=[
                (
                    "document_number",
                    models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False),
                ),
                ("event_id", models.UUIDField(db_index=True)),
                ("full_name", models.CharField(max_length=255)),
                ("email_address", models.EmailField(max_length=254)),
                ("number_of_attendees", models.PositiveIntegerField()),
                ("checked_in_count", models.PositiveIntegerField(default=0)),
                ("last_checked_in_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField()),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(checked_in_count__lte=models.F("number_of_attendees")),
                        name="rsvp_checked_in_within_attendees",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CheckIn",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("document_number", models.UUIDField(db_index=True)),
                ("event_id", models.UUIDField()),
                ("checked_in_count", models.PositiveIntegerField()),
                ("checked_in_at", models.DateTimeField()),
                ("guest_name", models.CharField(max_length=255)),
                ("email_address", models.EmailField(max_length=254)),
            ],
            options={
                "ordering": ["checked_in_at"],
            },
        ),
    ]
