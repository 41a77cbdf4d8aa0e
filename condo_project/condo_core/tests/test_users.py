import pytest
from django.core.exceptions import ValidationError
from django.test import Client

from condo_core.models import AuditLog, SiteMembership, Unit, User
from condo_core.services.users import (invite_user, remove_user_from_site, set_user_active,
                                       site_users, update_user)

JSON = "application/json"


@pytest.fixture
def resident(site, units):
    """Homeowner of unit 1, also a member of another site."""
    user = User.objects.create_user(username="ayse", email="ayse@example.com",
                                    first_name="Ayşe", last_name="Yılmaz", password="pw")
    SiteMembership.objects.create(user=user, site=site, role="homeowner")
    Unit.objects.filter(pk=units[0].pk).update(owner=user)
    return user


# ---------- services ----------
@pytest.mark.django_db
def test_invite_creates_login_and_assigns_units(site, units, manager):
    membership = invite_user(site, " New.Owner@Example.com ", "homeowner",
                             full_name="New Owner", unit_ids=[units[1].pk, units[2].pk],
                             invited_by=manager)

    user = membership.user
    assert user.email == "new.owner@example.com"
    assert user.get_full_name() == "New Owner"
    assert not user.has_usable_password()
    assert user.default_site == site
    assert membership.role == "homeowner" and membership.is_active
    owned = Unit.objects.filter(owner=user).order_by("unit_number")
    assert [u.unit_number for u in owned] == ["2", "3"]
    assert owned[0].owner_email == "new.owner@example.com"
    assert AuditLog.objects.filter(action="invite_user", site=site).exists()


@pytest.mark.django_db
def test_reinvite_reactivates_with_new_role(site, resident):
    set_user_active(site, resident, False)
    membership = invite_user(site, "AYSE@example.com", "board_member")
    assert membership.user == resident
    assert (membership.role, membership.is_active) == ("board_member", True)
    assert User.objects.filter(email__iexact="ayse@example.com").count() == 1


@pytest.mark.django_db
@pytest.mark.parametrize("email, role", [("", "admin"), ("x@example.com", ""),
                                         ("x@example.com", "janitor")])
def test_invite_needs_email_and_known_role(site, email, role):
    with pytest.raises(ValidationError):
        invite_user(site, email, role)
    assert not User.objects.filter(email="x@example.com").exists()


@pytest.mark.django_db
def test_invite_rejects_units_of_other_sites(site, other_site):
    stranger = Unit.objects.create(site=other_site, unit_number="9")
    with pytest.raises(ValidationError):
        invite_user(site, "x@example.com", "homeowner", unit_ids=[stranger.pk])
    # nothing half-done
    assert not User.objects.filter(email="x@example.com").exists()


@pytest.mark.django_db
def test_update_replaces_owned_units(site, units, resident):
    update_user(site, resident, "homeowner", unit_ids=[units[2].pk])
    assert list(Unit.objects.filter(owner=resident)) == [units[2]]

    # other roles own nothing
    update_user(site, resident, "board_member")
    assert resident.role_for(site) == "board_member"
    assert not Unit.objects.filter(owner=resident).exists()


@pytest.mark.django_db
def test_update_of_non_member_fails(other_site, resident):
    with pytest.raises(ValidationError):
        update_user(other_site, resident, "admin")


@pytest.mark.django_db
def test_deactivated_member_loses_role(site, resident):
    set_user_active(site, resident, False)
    assert resident.role_for(site) is None
    set_user_active(site, resident, True)
    assert resident.role_for(site) == "homeowner"


@pytest.mark.django_db
def test_remove_keeps_the_login_and_releases_units(site, other_site, units, resident):
    SiteMembership.objects.create(user=resident, site=other_site, role="homeowner")
    resident.default_site = site
    resident.save()

    assert remove_user_from_site(site, resident) == 1

    resident.refresh_from_db()
    assert resident.default_site is None
    assert list(resident.memberships.values_list("site", flat=True)) == [other_site.pk]
    unit = Unit.objects.get(pk=units[0].pk)
    assert (unit.owner, unit.owner_name, unit.owner_email) == (None, "", "")


@pytest.mark.django_db
def test_site_users_lists_roles_and_units(site, other_site, units, manager, resident):
    outsider = User.objects.create_user(username="outsider", email="o@example.com")
    SiteMembership.objects.create(user=outsider, site=other_site)

    rows = {row["user"].username: row for row in site_users(site)}
    assert set(rows) == {"manager", "ayse"}
    assert rows["ayse"]["membership"].role == "homeowner"
    assert rows["ayse"]["units"] == [units[0]]
    assert rows["manager"]["units"] == []


# ---------- views ----------
@pytest.mark.django_db
def test_user_management_endpoints(manager_client, site, units, resident):
    users = manager_client.get("/api/users/").json()["users"]
    ayse = next(u for u in users if u["email"] == "ayse@example.com")
    assert ayse["full_name"] == "Ayşe Yılmaz"
    assert ayse["units"] == [{"id": units[0].pk, "unit_number": "1"}]

    response = manager_client.post("/api/users/invite/", {
        "email": "board@example.com", "role": "board_member"}, content_type=JSON)
    assert response.status_code == 201

    response = manager_client.post(f"/api/users/{resident.pk}/", {
        "role": "homeowner", "unit_ids": [str(units[1].pk)]}, content_type=JSON)
    assert response.status_code == 200
    assert list(Unit.objects.filter(owner=resident)) == [units[1]]

    response = manager_client.post(f"/api/users/{resident.pk}/active/", {"deactivated": True},
                                   content_type=JSON)
    assert response.json()["is_active"] is False

    response = manager_client.post(f"/api/users/{resident.pk}/remove/")
    assert response.json()["units_released"] == 1
    assert not SiteMembership.objects.filter(user=resident, site=site).exists()
    assert User.objects.filter(pk=resident.pk).exists()


@pytest.mark.django_db
def test_user_management_validation(manager_client, manager, other_site):
    response = manager_client.post("/api/users/invite/", {"email": "x@example.com"},
                                   content_type=JSON)
    assert response.json()["error"] == "Email and role required"

    response = manager_client.post("/api/users/invite/", {
        "email": "x@example.com", "role": "homeowner", "unit_ids": ["abc"]}, content_type=JSON)
    assert response.status_code == 400

    response = manager_client.post(f"/api/users/{manager.pk}/remove/")
    assert response.status_code == 400

    # members of other sites are out of reach
    stranger = User.objects.create_user(username="stranger")
    SiteMembership.objects.create(user=stranger, site=other_site)
    assert manager_client.post(f"/api/users/{stranger.pk}/remove/").status_code == 404


@pytest.mark.django_db
def test_board_members_cannot_manage_users(site, django_user_model):
    user = django_user_model.objects.create_user(username="board", password="pw")
    SiteMembership.objects.create(user=user, site=site, role="board_member")
    user.default_site = site
    user.save()
    client = Client()
    client.force_login(user)
    assert client.get("/api/users/").status_code == 403
