"""Tests for the reconcile management command.

Run with: pytest tests/test_commands.py -v
"""

from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from ticketing import models as orm

BUYER = {"name": "Ada Lovelace", "email": "ada@example.com", "phone": "+15550100"}


@pytest.mark.django_db
class TestReconcileCommand:
    def test_clean_database(self, django_container, event_id):
        ticket_type = django_container.catalog.create_ticket_type(event_id, "General", "10", 10, status="onSale")
        django_container.reservations.reserve(
            event_id, [{"ticketTypeId": str(ticket_type.id), "quantity": 3}], BUYER
        )
        out = StringIO()

        call_command("reconcile", "--event", event_id, stdout=out)

        assert "All counters match" in out.getvalue()

    def test_drift_fails_the_command(self, django_container, event_id):
        ticket_type = django_container.catalog.create_ticket_type(event_id, "General", "10", 10, status="onSale")
        orm.TicketType.objects.filter(pk=ticket_type.id.value).update(remaining_availability=4)
        out = StringIO()

        with pytest.raises(CommandError, match="1 discrepancies"):
            call_command("reconcile", stdout=out)

        assert str(ticket_type.id) in out.getvalue()
