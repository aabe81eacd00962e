"""Bulk email: recipient checks, placeholders and personalised sends."""
import pytest

from ibuddy.errors import ExternalServiceError, FormValidationError
from ibuddy.services import templating
from ibuddy.services.bulk_email import send_bulk_email


@pytest.fixture
def buddy_with_mentees(make_user, make_mentee):
    buddy = make_user(first_name="Lucia", email="lucia@example.com")
    ana = make_mentee(buddy, email="ana@uni.example.org", first_name="Ana")
    ben = make_mentee(buddy, email="ben@uni.example.org", first_name="Ben", gender="male")
    return buddy, ana, ben


def test_find_and_resolve_variables(make_mentee_model):
    body = "<p>Hi {{ firstName }} {{lastName}}, {{firstName}}!</p>"
    assert templating.find_variables(body) == ["firstName", "lastName"]
    mentee = make_mentee_model("User#b@example.com", first_name="Zoë", last_name="<O'Neil>")
    assert templating.resolve_body(body, mentee) == "<p>Hi Zoë &lt;O&#x27;Neil&gt;, Zoë!</p>"


def test_unknown_and_empty():
    assert templating.unknown_variables(["firstName", "password"]) == ["password"]
    assert templating.is_empty_html("<p> </p><br>")
    assert not templating.is_empty_html("<p>x</p>")


def test_plain_body_is_one_email_to_everyone(buddy_with_mentees, mentees, email_service):
    buddy, ana, ben = buddy_with_mentees
    sent = send_bulk_email(buddy, [ana.email, ben.email], "Welcome", "<p>Hello all</p>", mentees, email_service)
    assert sent == 1
    assert len(email_service.outbox) == 1
    message = email_service.outbox[0]
    assert sorted(message.to) == [ana.email, ben.email]
    assert message.sender_name == "Lucia"
    assert message.reply_to == "lucia@example.com"


def test_placeholders_send_one_email_each(buddy_with_mentees, mentees, email_service):
    buddy, ana, ben = buddy_with_mentees
    sent = send_bulk_email(buddy, [ana.email, ben.email], "Hi", "<p>Dear {{firstName}}</p>", mentees, email_service)
    assert sent == 2
    bodies = {m.to[0]: m.html_body for m in email_service.outbox}
    assert bodies == {ana.email: "<p>Dear Ana</p>", ben.email: "<p>Dear Ben</p>"}


def test_recipients_must_be_own_mentees(buddy_with_mentees, mentees, email_service, make_user, make_mentee):
    buddy, ana, _ = buddy_with_mentees
    someone_elses = make_mentee(make_user(), email="other@uni.example.org")
    with pytest.raises(FormValidationError) as exc:
        send_bulk_email(buddy, [ana.email, someone_elses.email], "Hi", "<p>x</p>", mentees, email_service)
    assert exc.value.errors == {"recipients": "Invalid recipients"}
    assert email_service.outbox == []


def test_recipient_match_ignores_case(buddy_with_mentees, mentees, email_service):
    buddy, ana, _ = buddy_with_mentees
    assert send_bulk_email(buddy, ["ANA@uni.example.org"], "Hi", "<p>x</p>", mentees, email_service) == 1


def test_unknown_variable_rejected(buddy_with_mentees, mentees, email_service):
    buddy, ana, _ = buddy_with_mentees
    with pytest.raises(FormValidationError) as exc:
        send_bulk_email(buddy, [ana.email], "Hi", "<p>{{ password }}</p>", mentees, email_service)
    assert exc.value.errors == {"body": "Invalid variables in body"}
    assert email_service.outbox == []


def test_body_sanitized_and_required(buddy_with_mentees, mentees, email_service):
    buddy, ana, _ = buddy_with_mentees
    with pytest.raises(FormValidationError) as exc:
        send_bulk_email(buddy, [ana.email], "Hi", "<script>alert(1)</script>", mentees, email_service)
    assert "body" in exc.value.errors
    send_bulk_email(buddy, [ana.email], "Hi", "<p>ok</p><script>alert(1)</script>", mentees, email_service)
    assert email_service.outbox[0].html_body == "<p>ok</p>"


def test_transport_failure_propagates(buddy_with_mentees, mentees):
    buddy, ana, ben = buddy_with_mentees

    class BrokenTransport:
        def send(self, **kwargs):
            raise ExternalServiceError("email", "SES unavailable")

    with pytest.raises(ExternalServiceError):
        send_bulk_email(buddy, [ana.email, ben.email], "Hi", "<p>{{firstName}}</p>", mentees, BrokenTransport())


def test_duplicate_recipients_get_one_email(buddy_with_mentees, mentees, email_service):
    buddy, ana, ben = buddy_with_mentees
    recipients = [ana.email, "ANA@uni.example.org", ben.email, ana.email]
    sent = send_bulk_email(buddy, recipients, "Hi", "<p>Dear {{firstName}}</p>", mentees, email_service)
    assert sent == 2
    assert sorted(m.html_body for m in email_service.outbox) == ["<p>Dear Ana</p>", "<p>Dear Ben</p>"]
