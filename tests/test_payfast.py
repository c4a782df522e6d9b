"""Tests for PayFast request signing and notification verification."""

import asyncio
import hashlib

import httpx
import pytest

from medmap import webhook_security
from medmap.domain.payments.payfast_service import (
    BOOKING_PAYMENT,
    PaymentGatewayError,
    PayFastService,
    build_param_string,
    cents_to_amount,
    generate_signature,
)
from medmap.models import Profile


def payer():
    return Profile(id="patient-1", email="thandi@example.com", first_name="Thandi", last_name="Nkosi")


class TestAmounts:
    """Tests for cents to gateway amount conversion."""

    @pytest.mark.parametrize(
        "cents,expected",
        [(51000, "510.00"), (1000, "10.00"), (29900, "299.00"), (1, "0.01"), (12345, "123.45")],
    )
    def test_cents_to_amount(self, cents, expected):
        """Amounts are two-decimal rand strings."""
        assert cents_to_amount(cents) == expected


class TestSignature:
    """Tests for the signed parameter string."""

    def test_keys_sorted_and_empty_values_skipped(self):
        """Outbound requests sign non-empty fields in key order."""
        data = {"merchant_key": "abc", "amount": "10.00", "name_last": "", "merchant_id": "1"}
        assert build_param_string(data) == "amount=10.00&merchant_id=1&merchant_key=abc"

    def test_values_are_form_encoded(self):
        """Spaces become + and reserved characters are percent-encoded."""
        data = {"item_name": "Consultation - Dr A&B", "email_address": "a+b@example.com"}
        assert build_param_string(data) == (
            "email_address=a%2Bb%40example.com&item_name=Consultation+-+Dr+A%26B"
        )

    def test_signature_field_excluded(self):
        """An existing signature never signs itself."""
        assert build_param_string({"amount": "1.00", "signature": "x"}) == "amount=1.00"

    def test_passphrase_appended_before_hashing(self):
        """The digest is MD5 over the parameter string plus the passphrase."""
        data = {"merchant_id": "10000100", "amount": "510.00"}
        expected = hashlib.md5(
            b"amount=510.00&merchant_id=10000100&passphrase=jt7NOE43FZPn"
        ).hexdigest()
        assert generate_signature(data, "jt7NOE43FZPn") == expected

    def test_no_passphrase(self):
        """Without a passphrase only the parameters are hashed."""
        expected = hashlib.md5(b"amount=510.00").hexdigest()
        assert generate_signature({"amount": "510.00"}) == expected

    def test_notification_order_kept(self):
        """Notifications are signed in posted order, empty fields included."""
        data = {"pf_payment_id": "1", "m_payment_id": "", "amount_gross": "10.00"}
        assert build_param_string(data, sort_keys=False, skip_empty=False) == (
            "pf_payment_id=1&m_payment_id=&amount_gross=10.00"
        )


class TestPaymentRedirect:
    """Tests for building the checkout redirect."""

    def test_redirect_signed_over_posted_fields(self):
        """The signature in the URL verifies against the other URL parameters."""
        service = PayFastService()
        redirect = service.create_payment_redirect(
            reference_id="booking-123",
            payer=payer(),
            amount_cents=51000,
            item_name="Consultation",
            item_description="GP appointment",
            payment_type=BOOKING_PAYMENT,
            return_path="/booking/success",
            cancel_path="/booking/cancelled",
        )
        params = dict(httpx.URL(redirect.redirect_url).params)
        signature = params.pop("signature")

        assert signature == generate_signature(params, service.passphrase)
        assert redirect.amount == 51000
        assert redirect.currency == "ZAR"
        assert redirect.correlation_id == "booking-123"
        assert redirect.reference.startswith("PF_booking-123_")

    def test_missing_credentials(self):
        """A service without merchant credentials refuses to build redirects."""
        service = PayFastService()
        service.merchant_key = None
        assert service.is_available() is False
        with pytest.raises(PaymentGatewayError):
            service.create_payment_redirect(
                reference_id="booking-123",
                payer=payer(),
                amount_cents=51000,
                item_name="Consultation",
                item_description="GP appointment",
                payment_type=BOOKING_PAYMENT,
                return_path="/",
                cancel_path="/",
            )


class TestNotificationVerification:
    """Tests for ITN signature checks and server validation."""

    def test_valid_signature(self):
        fields = {"payment_status": "COMPLETE", "custom_str1": "b-1"}
        fields["signature"] = generate_signature(fields, "secret", sort_keys=False, skip_empty=False)
        assert webhook_security.verify_payfast_signature(fields, "secret") is True

    def test_reordered_fields_fail(self):
        """Reordering the posted fields changes the signed string."""
        fields = {"payment_status": "COMPLETE", "custom_str1": "b-1"}
        signature = generate_signature(fields, "secret", sort_keys=False, skip_empty=False)
        reordered = {"custom_str1": "b-1", "payment_status": "COMPLETE", "signature": signature}
        assert webhook_security.verify_payfast_signature(reordered, "secret") is False

    def test_wrong_passphrase(self):
        fields = {"payment_status": "COMPLETE"}
        fields["signature"] = generate_signature(fields, "secret", sort_keys=False, skip_empty=False)
        assert webhook_security.verify_payfast_signature(fields, "other") is False

    def test_constant_time_compare_rejects_empty(self):
        assert webhook_security.constant_time_compare("", "") is False
        assert webhook_security.constant_time_compare("abc", "abc") is True

    @pytest.mark.parametrize("body,status,expected", [("VALID", 200, True), ("INVALID", 200, False), ("VALID", 500, False)])
    def test_validate_with_payfast(self, monkeypatch, body, status, expected):
        """Server validation posts the parameter string and expects VALID."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = request.content.decode()
            return httpx.Response(status, text=body)

        real_client = httpx.AsyncClient
        monkeypatch.setattr(
            webhook_security.httpx,
            "AsyncClient",
            lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
        )

        fields = {"pf_payment_id": "1", "payment_status": "COMPLETE", "signature": "abc"}
        assert asyncio.run(webhook_security.validate_with_payfast(fields)) is expected
        assert seen["body"] == "pf_payment_id=1&payment_status=COMPLETE"

    def test_validate_transport_error(self, monkeypatch):
        """Network failures count as not validated."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        real_client = httpx.AsyncClient
        monkeypatch.setattr(
            webhook_security.httpx,
            "AsyncClient",
            lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
        )
        assert asyncio.run(webhook_security.validate_with_payfast({"a": "1"})) is False
