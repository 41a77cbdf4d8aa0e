import pytest
from django.core.exceptions import PermissionDenied, ValidationError
from django.test import Client

from condo_core.models import AuditLog, SiteMembership, SupportTicket, Unit, User
from condo_core.services.tickets import open_ticket, update_ticket, visible_tickets

JSON = "application/json"


@pytest.fixture
def owner(site, units):
    user = User.objects.create_user(username="owner", password="pw")
    SiteMembership.objects.create(user=user, site=site, role="homeowner")
    user.default_site = site
    user.save()
    Unit.objects.filter(pk=units[1].pk).update(owner=user)
    return user


@pytest.fixture
def neighbour(site):
    user = User.objects.create_user(username="neighbour", password="pw")
    SiteMembership.objects.create(user=user, site=site, role="homeowner")
    user.default_site = site
    user.save()
    return user


@pytest.fixture
def owner_client(owner):
    client = Client()
    client.force_login(owner)
    return client


@pytest.mark.django_db
def test_open_ticket_links_the_owned_unit(site, units, owner):
    ticket = open_ticket(owner, site, "  Leak in the garage ", description="Since Monday",
                         category="plumbing")
    assert ticket.title == "Leak in the garage"
    assert ticket.unit == units[1]
    assert (ticket.status, ticket.priority, ticket.category) == ("open", "medium", "plumbing")
    assert AuditLog.objects.filter(object_type="SupportTicket", object_id=str(ticket.pk)).exists()


@pytest.mark.django_db
def test_open_ticket_validation(site, other_site, owner, neighbour):
    with pytest.raises(ValidationError):
        open_ticket(owner, site, "   ")
    with pytest.raises(ValidationError):
        open_ticket(owner, site, "Broken lamp", category="fireworks")
    # no membership at the other site
    with pytest.raises(PermissionDenied):
        open_ticket(owner, other_site, "Broken lamp")
    # members without a unit still get a ticket
    assert open_ticket(neighbour, site, "Noise").unit is None


@pytest.mark.django_db
def test_residents_see_only_their_own_tickets(site, manager, owner, neighbour):
    mine = open_ticket(owner, site, "Leak")
    open_ticket(neighbour, site, "Noise")

    assert list(visible_tickets(owner, site)) == [mine]
    assert visible_tickets(manager, site).count() == 2
    assert visible_tickets(manager, site, status="resolved").count() == 0


@pytest.mark.django_db
def test_resolving_stamps_and_reopening_clears(site, manager, owner):
    ticket = open_ticket(owner, site, "Leak")

    ticket = update_ticket(ticket, manager, status="resolved", resolution_notes="Pipe replaced",
                           assigned_to=manager)
    assert ticket.resolved_at is not None
    assert ticket.assigned_to == manager
    resolved_at = ticket.resolved_at

    # closing keeps the first resolution time
    ticket = update_ticket(ticket, manager, status="closed")
    assert ticket.resolved_at == resolved_at

    ticket = update_ticket(ticket, manager, status="in_progress")
    assert ticket.resolved_at is None
    assert ticket.resolution_notes == "Pipe replaced"


@pytest.mark.django_db
def test_only_managers_update_tickets(site, other_site, manager, owner):
    ticket = open_ticket(owner, site, "Leak")
    with pytest.raises(PermissionDenied):
        update_ticket(ticket, owner, status="closed")

    outsider = User.objects.create_user(username="outsider")
    SiteMembership.objects.create(user=outsider, site=other_site)
    with pytest.raises(ValidationError):
        update_ticket(ticket, manager, assigned_to=outsider)
    with pytest.raises(ValidationError):
        update_ticket(ticket, manager, status="archived")
    ticket.refresh_from_db()
    assert ticket.status == "open"


@pytest.mark.django_db
def test_ticket_endpoints(owner_client, manager_client, site, units, owner, manager):
    response = owner_client.post("/api/tickets/create/", {
        "title": "Elevator stuck", "category": "elevator", "priority": "urgent"},
        content_type=JSON)
    assert response.status_code == 201
    ticket = response.json()["ticket"]
    assert ticket["unit"] == "2"
    assert ticket["created_by"] == "owner"

    assert len(owner_client.get("/api/tickets/").json()["tickets"]) == 1

    # residents cannot change the status
    response = owner_client.post(f"/api/tickets/{ticket['id']}/update/", {"status": "closed"},
                                 content_type=JSON)
    assert response.status_code == 403

    response = manager_client.post(f"/api/tickets/{ticket['id']}/update/", {
        "status": "resolved", "assigned_to": manager.pk, "resolution_notes": "Reset"},
        content_type=JSON)
    assert response.status_code == 200
    assert response.json()["ticket"]["status"] == "resolved"
    assert response.json()["ticket"]["resolved_at"] is not None

    detail = owner_client.get(f"/api/tickets/{ticket['id']}/").json()["ticket"]
    assert detail["resolution_notes"] == "Reset"

    response = owner_client.post("/api/tickets/create/", {"title": ""}, content_type=JSON)
    assert response.status_code == 400


@pytest.mark.django_db
def test_other_residents_tickets_are_hidden(site, owner, neighbour):
    ticket = open_ticket(neighbour, site, "Noise")
    client = Client()
    client.force_login(owner)
    assert client.get(f"/api/tickets/{ticket.pk}/").status_code == 404
    assert SupportTicket.objects.count() == 1
