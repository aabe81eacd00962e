"""FAQ API: staff create, authors and staff edit."""
from ibuddy.models.user import Role

FAQ = {"question": "Where do mentees pick up keys?", "answer": "At the housing office."}


def test_buddy_reads_but_cannot_create(login_as, make_user, faqs):
    hr = make_user(Role.HR)
    faqs.create(author_id=hr.id, **FAQ)
    client = login_as(make_user(Role.BUDDY))
    assert [f["question"] for f in client.get("/faqs").json()] == [FAQ["question"]]
    assert client.post("/faqs", json=FAQ).status_code == 403


def test_staff_create_update_delete(login_as, make_user):
    client = login_as(make_user(Role.HR))
    created = client.post("/faqs", json=FAQ)
    assert created.status_code == 201
    faq_id = created.json()["id"]
    updated = client.patch(f"/faqs/{faq_id}", json={"answer": "Housing office, room 2."})
    assert updated.json()["answer"] == "Housing office, room 2."
    assert updated.json()["question"] == FAQ["question"]
    assert client.delete(f"/faqs/{faq_id}").status_code == 204
    assert client.get(f"/faqs/{faq_id}").status_code == 404


def test_required_fields(login_as, make_user):
    r = login_as(make_user(Role.HR)).post("/faqs", json={"question": " ", "answer": "x"})
    assert r.status_code == 400
    assert r.json()["errors"] == {"question": "Question is required"}


def test_other_buddy_cannot_edit(login_as, make_user, faqs):
    author = make_user(Role.BUDDY)
    faq = faqs.create(author_id=author.id, **FAQ)
    assert login_as(make_user(Role.BUDDY)).patch(f"/faqs/{faq.id}", json={"answer": "x"}).status_code == 403
    assert login_as(author).patch(f"/faqs/{faq.id}", json={"answer": "y"}).status_code == 200
