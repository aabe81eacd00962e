"""Users and buddies API: role rules, listing order, deletion reasons."""
from datetime import date, timedelta

from ibuddy.models.user import Role
from ibuddy.services import permissions

NEW_USER = {
    "first_name": "Tom",
    "last_name": "Berg",
    "email": "tom@example.com",
    "faculty": "Physics",
    "role": "BUDDY",
    "agreement_start_date": str(date.today()),
    "agreement_end_date": str(date.today() + timedelta(days=365)),
}


def test_hr_creates_buddy_with_temporary_password(login_as, make_user, users):
    client = login_as(make_user(Role.HR))
    r = client.post("/users", json=NEW_USER)
    assert r.status_code == 201
    body = r.json()
    assert body["user"]["id"] == "User#tom@example.com"
    assert users.verify_login("tom@example.com", body["temporary_password"]) is not None


def test_cannot_create_user_with_own_role(login_as, make_user):
    client = login_as(make_user(Role.HR))
    r = client.post("/users", json={**NEW_USER, "role": "HR"})
    assert r.status_code == 400
    assert r.json() == {"errors": {"role": "Not allowed to create a user with such access"}}


def test_admin_creates_admin(login_as, make_user):
    client = login_as(make_user(Role.ADMIN))
    assert client.post("/users", json={**NEW_USER, "role": "ADMIN"}).status_code == 201


def test_create_user_end_date_in_past(login_as, make_user):
    client = login_as(make_user(Role.ADMIN))
    r = client.post("/users", json={**NEW_USER, "agreement_end_date": str(date.today() - timedelta(days=1))})
    assert r.status_code == 400
    assert "agreement_end_date" in r.json()["errors"]


def test_roles_marks_assignable(login_as, make_user):
    client = login_as(make_user(Role.PRESIDENT))
    roles = {r["value"]: r["disabled"] for r in client.get("/users/roles").json()}
    assert roles == {"BUDDY": False, "HR": False, "PRESIDENT": True, "ADMIN": True}


def test_list_users_sorted_with_counts(login_as, make_user, make_mentee):
    buddy = make_user(Role.BUDDY)
    busy = make_user(Role.BUDDY)
    hr = make_user(Role.HR)
    make_mentee(busy)
    client = login_as(hr)
    rows = [(u["id"], u["mentee_count"]) for u in client.get("/users").json()]
    assert rows == [(hr.id, 0), (busy.id, 1), (buddy.id, 0)]


def test_user_detail_reports_delete_permission(login_as, make_user, make_mentee):
    hr = make_user(Role.HR)
    buddy = make_user(Role.BUDDY, email="b@example.com")
    make_mentee(buddy)
    body = login_as(hr).get("/users/B@example.com").json()
    assert body["user"]["id"] == buddy.id
    assert len(body["mentees"]) == 1
    assert body["can_be_deleted"] is False
    assert body["delete_reason"] == permissions.CANNOT_DELETE_WITH_MENTEES


def test_unknown_user_404(login_as, make_user):
    assert login_as(make_user(Role.HR)).get("/users/ghost@example.com").status_code == 404


def test_hr_deletes_buddy_without_mentees(login_as, make_user):
    buddy = make_user(Role.BUDDY, email="gone@example.com")
    client = login_as(make_user(Role.HR))
    assert client.delete("/users/gone@example.com").status_code == 204
    assert client.get(f"/users/{buddy.email}").status_code == 404


def test_president_cannot_delete_admin(login_as, make_user):
    make_user(Role.ADMIN, email="root@example.com")
    r = login_as(make_user(Role.PRESIDENT)).delete("/users/root@example.com")
    assert r.status_code == 403
    assert r.json() == {"detail": "cannot delete an admin"}


def test_cannot_delete_self(login_as, make_user):
    admin = make_user(Role.ADMIN, email="me@example.com")
    r = login_as(admin).delete("/users/me@example.com")
    assert r.status_code == 403
    assert r.json()["detail"] == "cannot delete yourself"


def test_edit_rules(login_as, make_user):
    buddy = make_user(Role.BUDDY, email="b@example.com")
    make_user(Role.HR, email="hr@example.com")
    client = login_as(buddy)
    assert client.patch("/users/hr@example.com", json={"faculty": "Law"}).status_code == 403
    r = client.patch("/users/b@example.com", json={"faculty": "Law"})
    assert r.status_code == 200
    assert r.json()["faculty"] == "Law"
    # a buddy cannot promote themselves
    promote = client.patch("/users/b@example.com", json={"role": "HR"})
    assert promote.status_code == 400
    assert "role" in promote.json()["errors"]


def test_buddies_list_only_for_staff(login_as, make_user):
    active = make_user(Role.BUDDY)
    make_user(Role.BUDDY, agreement_end_date=date.today() - timedelta(days=1))
    hr = make_user(Role.HR)
    assert login_as(active).get("/buddies").status_code == 403
    ids = {b["id"] for b in login_as(hr).get("/buddies").json()}
    assert ids == {active.id, hr.id}
    assert login_as(hr).get(f"/buddies/{active.email}").json()["id"] == active.id


def test_buddy_cannot_browse_users(login_as, make_user, make_mentee):
    me = make_user(Role.BUDDY)
    other = make_user(Role.BUDDY, email="other@example.com")
    mentee = make_mentee(other, email="secret@uni.example.org")
    client = login_as(me)
    assert client.get(f"/mentees/{mentee.id}").status_code == 403
    assert client.get("/users").status_code == 403
    assert client.get("/users/other@example.com").status_code == 403
    assert client.get(f"/users/{me.email}").status_code == 403
