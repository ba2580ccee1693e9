"""Tests for the payment confirmation handler."""

import random

import pytest

from conftest import TEST_CUSTOMER, TEST_SESSION_ID
from jokewall.domain.confirmation import PaymentConfirmationHandler, extract_phone
from jokewall.domain.jokes import JOKES
from jokewall.errors import MissingParameter, SessionLookupFailed


@pytest.fixture
def handler(store, fake_stripe, fake_sender, settings):
    return PaymentConfirmationHandler(
        store, fake_stripe, fake_sender, settings, rng=random.Random(3)
    )


class TestExtractPhone:
    def test_present(self):
        assert extract_phone({"phone": TEST_CUSTOMER}) == TEST_CUSTOMER

    @pytest.mark.parametrize(
        "metadata", [None, {}, {"phone": ""}, {"phone": "undefined"}, {"phone": "N/A"}]
    )
    def test_unavailable(self, metadata):
        assert extract_phone(metadata) is None


class TestConfirm:
    @pytest.mark.parametrize("session_id", [None, ""])
    def test_missing_session_id(self, handler, fake_stripe, session_id):
        with pytest.raises(MissingParameter):
            handler.confirm(session_id)
        assert fake_stripe.retrieved == []

    def test_lookup_failure(self, handler, store, fake_sender):
        with pytest.raises(SessionLookupFailed):
            handler.confirm("cs_unknown")
        assert len(store) == 0
        assert fake_sender.texts == []

    def test_phone_unlocks_and_welcomes(self, handler, store, fake_stripe, fake_sender):
        fake_stripe.add_session(metadata={"phone": TEST_CUSTOMER})

        result = handler.confirm(TEST_SESSION_ID)

        assert store.is_paid(TEST_CUSTOMER)
        assert result.newly_paid is True
        assert result.welcome_sent is True
        assert result.redirect_url == "sms:jokewall_agent@rbm.goog?body=I want my dad jokes!"

        assert len(fake_sender.texts) == 1
        sent = fake_sender.texts[0]
        assert sent["from_"] == "rcs:jokewall_agent"
        assert sent["to"] == TEST_CUSTOMER
        assert "Thank you for your purchase" in sent["body"]
        assert any(joke in sent["body"] for joke in JOKES)

    def test_no_phone_skips_unlock(self, handler, store, fake_stripe, fake_sender):
        fake_stripe.add_session(metadata={})

        result = handler.confirm(TEST_SESSION_ID)

        assert result.phone is None
        assert result.redirect_url.startswith("sms:")
        assert len(store) == 0
        assert fake_sender.texts == []

    def test_welcome_failure_keeps_user_paid(self, handler, store, fake_stripe, fake_sender):
        fake_stripe.add_session(metadata={"phone": TEST_CUSTOMER})
        fake_sender.error = RuntimeError("twilio down")

        result = handler.confirm(TEST_SESSION_ID)

        assert store.is_paid(TEST_CUSTOMER)
        assert result.welcome_sent is False
        assert result.redirect_url.startswith("sms:")

    def test_repeat_confirmation_is_idempotent(self, handler, store, fake_stripe):
        fake_stripe.add_session(metadata={"phone": TEST_CUSTOMER})

        first = handler.confirm(TEST_SESSION_ID)
        second = handler.confirm(TEST_SESSION_ID)

        assert first.newly_paid is True
        assert second.newly_paid is False
        assert len(store) == 1

    def test_missing_amount_still_confirms(self, handler, store, fake_stripe):
        fake_stripe.add_session(metadata={"phone": TEST_CUSTOMER}, amount_total=None)
        handler.confirm(TEST_SESSION_ID)
        assert store.is_paid(TEST_CUSTOMER)
