"""Tests for the inbound message webhook (POST /messaging)."""

import xml.etree.ElementTree as ET

import pytest

from conftest import TEST_BOT_NUMBER, TEST_CUSTOMER
from jokewall.domain.jokes import JOKES
from jokewall.messaging.templates import render


def _post(client, body, sender=TEST_CUSTOMER):
    return client.post(
        "/messaging",
        data={"From": sender, "To": TEST_BOT_NUMBER, "Body": body},
    )


def _messages(response) -> list[str]:
    root = ET.fromstring(response.content)
    assert root.tag == "Response"
    return [m.text or "" for m in root.findall("Message")]


class TestMessagingWebhook:
    @pytest.mark.parametrize("body", ["help", "  Hello ", "START"])
    def test_keywords_get_onboarding(self, client, body):
        response = _post(client, body)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/xml")
        [text] = _messages(response)
        assert "$2.99" in text

    def test_paid_user_keyword_gets_onboarding(self, client, store):
        store.mark_paid(TEST_CUSTOMER)
        [text] = _messages(_post(client, "help"))
        assert "$2.99" in text

    @pytest.mark.parametrize("paid", [True, False])
    def test_button_ack_gets_empty_response(self, client, store, fake_stripe, paid):
        if paid:
            store.mark_paid(TEST_CUSTOMER)
        response = _post(client, "get more jokes")
        assert response.status_code == 200
        assert _messages(response) == []
        assert fake_stripe.created == []

    def test_paid_user_gets_joke(self, client, store):
        store.mark_paid(TEST_CUSTOMER)
        [text] = _messages(_post(client, "more!"))
        assert "🎭" in text
        assert sum(joke in text for joke in JOKES) == 1

    def test_unpaid_user_gets_link_via_template(self, client, fake_stripe, fake_sender):
        response = _post(client, "give me jokes")

        assert response.status_code == 200
        assert _messages(response) == []
        assert len(fake_stripe.created) == 1
        [template] = fake_sender.templates
        assert template["to"] == TEST_CUSTOMER
        assert template["from_"] == TEST_BOT_NUMBER
        assert template["variables"] == {"1": "cs_test_123"}

    def test_checkout_failure_gets_error_reply(self, client, fake_stripe):
        fake_stripe.create_error = RuntimeError("stripe down")
        response = _post(client, "give me jokes")
        assert response.status_code == 200
        assert _messages(response) == [render("checkout_error")]

    def test_store_failure_gets_error_reply(self, client, store, monkeypatch):
        def broken(identity):
            raise RuntimeError("store down")

        monkeypatch.setattr(store, "is_paid", broken)
        response = _post(client, "give me jokes")
        assert response.status_code == 200
        assert _messages(response) == [render("checkout_error")]

    def test_missing_fields_default_to_empty(self, client, fake_stripe):
        response = client.post("/messaging", data={"AccountSid": "ACtest"})
        assert response.status_code == 200
        # empty body from an unknown sender goes to checkout
        assert fake_stripe.created[0]["metadata"] == {"phone": ""}

    def test_store_failure_keeps_acknowledgement_silent(self, client, store, monkeypatch):
        def broken(identity):
            raise RuntimeError("store down")

        monkeypatch.setattr(store, "is_paid", broken)
        response = _post(client, "get more jokes")
        assert response.status_code == 200
        assert _messages(response) == []
