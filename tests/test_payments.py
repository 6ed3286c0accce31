from urllib.parse import parse_qs

import anyio
import httpx
import pytest
from bson import ObjectId

from app.core.config import Settings
from app.services.payment.gateways.base import BasePaymentGateway
from app.services.payment.gateways.factory import PaymentGatewayFactory
from app.services.payment.gateways.stripe import StripeGateway
from app.services.payment.payment_service import PaymentService

from tests.conftest import CREATOR_EMAIL, OTHER_USER_EMAIL, USER_EMAIL

stripe_requests = []


def stripe_handler(request: httpx.Request) -> httpx.Response:
    stripe_requests.append(request)
    form = parse_qs(request.content.decode())
    if form["amount"] == ["0"]:
        return httpx.Response(400, json={"error": {"message": "Amount must be at least 50 cents"}})
    return httpx.Response(200, json={
        "id": "pi_123",
        "client_secret": "pi_123_secret_abc",
        "amount": int(form["amount"][0]),
        "currency": form["currency"][0],
    })


@pytest.fixture
def stripe_gateway():
    stripe_requests.clear()
    return StripeGateway(
        {"secret_key": "sk_test_123", "currency": "usd"},
        transport=httpx.MockTransport(stripe_handler)
    )


def stored_payments(database, **query):
    async def lookup():
        return await database.payments.find(query).to_list(length=None)
    return anyio.run(lookup)


@pytest.mark.parametrize("price,cents", [
    (19.99, 1999),
    (0.1, 10),
    (10, 1000),
    (4.005, 401),
    (1234.56, 123456),
])
def test_minor_units_are_decimal_exact(price, cents):
    assert BasePaymentGateway.to_minor_units(price) == cents


class TestStripeGateway:

    @pytest.mark.anyio
    async def test_creates_card_intent(self, stripe_gateway):
        result = await stripe_gateway.create_payment_intent(1999, "usd", {"email": USER_EMAIL})

        assert result.success is True
        assert result.client_secret == "pi_123_secret_abc"
        request = stripe_requests[-1]
        assert request.url == "https://api.stripe.com/v1/payment_intents"
        assert request.headers["authorization"].startswith("Basic ")
        form = parse_qs(request.content.decode())
        assert form["payment_method_types[]"] == ["card"]
        assert form["metadata[email]"] == [USER_EMAIL]

    @pytest.mark.anyio
    async def test_gateway_error_is_reported(self, stripe_gateway):
        result = await stripe_gateway.create_payment_intent(0, "usd")

        assert result.success is False
        assert result.error_message == "Amount must be at least 50 cents"

    def test_secret_key_is_required(self):
        with pytest.raises(ValueError):
            StripeGateway({"secret_key": ""})

    def test_factory_without_key_returns_none(self):
        assert PaymentGatewayFactory.from_settings(Settings(stripe_secret_key=None)) is None

    def test_factory_builds_configured_gateway(self):
        gateway = PaymentGatewayFactory.from_settings(
            Settings(stripe_secret_key="sk_test_1", payment_currency="eur")
        )

        assert isinstance(gateway, StripeGateway)
        assert gateway.config["currency"] == "eur"

    def test_factory_rejects_unknown_gateway(self):
        with pytest.raises(ValueError):
            PaymentGatewayFactory.get_gateway("paypal", {})

    def test_registered_gateway_can_be_built(self, monkeypatch):
        monkeypatch.setattr(PaymentGatewayFactory, "_gateways", dict(PaymentGatewayFactory._gateways))

        class SandboxGateway(StripeGateway):
            gateway_id = "sandbox"

        PaymentGatewayFactory.register_gateway("sandbox", SandboxGateway)

        assert "sandbox" in PaymentGatewayFactory.get_available_gateways()
        gateway = PaymentGatewayFactory.get_gateway("sandbox", {"secret_key": "sk_test_1"})
        assert isinstance(gateway, SandboxGateway)


class TestPaymentIntentEndpoint:

    @pytest.fixture
    def payment_gateway(self, stripe_gateway):
        return stripe_gateway

    def test_returns_client_secret(self, client, auth_headers, users):
        response = client.post(
            "/create-payment-intent",
            json={"price": 19.99},
            headers=auth_headers(USER_EMAIL)
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"clientSecret": "pi_123_secret_abc"}
        form = parse_qs(stripe_requests[-1].content.decode())
        assert form["amount"] == ["1999"]
        assert form["currency"] == ["usd"]

    def test_requires_token(self, client):
        assert client.post("/create-payment-intent", json={"price": 5}).status_code == 401

    def test_price_must_be_positive(self, client, auth_headers, users):
        response = client.post(
            "/create-payment-intent",
            json={"price": 0},
            headers=auth_headers(USER_EMAIL)
        )

        assert response.status_code == 422


def test_payment_intent_without_gateway(client, auth_headers, users):
    response = client.post(
        "/create-payment-intent",
        json={"price": 10},
        headers=auth_headers(USER_EMAIL)
    )

    assert response.status_code == 502
    assert response.json()["success"] is False


class TestRecordPayment:

    def test_record_increments_participation(self, client, auth_headers, database, make_contest, make_payment):
        contest_id = make_contest()

        make_payment(contest_id, USER_EMAIL)
        make_payment(contest_id, OTHER_USER_EMAIL)

        contest = client.get(f"/contests/{contest_id}").json()["data"]["contest"]
        assert contest["participationCount"] == 2
        assert len(stored_payments(database, contestId=contest_id)) == 2

    def test_payment_row_uses_token_email(self, client, auth_headers, database, make_contest):
        contest_id = make_contest()

        response = client.post(
            "/payments",
            json={
                "contestId": contest_id,
                "price": 10,
                "transactionId": "pi_abc",
                "email": "someone-else@contesthub.io",
            },
            headers=auth_headers(USER_EMAIL)
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["paymentResult"]["insertedId"]
        assert data["contestResult"]["modifiedCount"] == 1

        [payment] = stored_payments(database, contestId=contest_id)
        assert payment["email"] == USER_EMAIL
        assert payment["status"] == "paid"
        assert payment["transactionId"] == "pi_abc"

    def test_unknown_contest_is_not_found(self, client, auth_headers, database, users):
        response = client.post(
            "/payments",
            json={"contestId": str(ObjectId()), "price": 10, "transactionId": "pi_x"},
            headers=auth_headers(USER_EMAIL)
        )

        assert response.status_code == 404
        assert stored_payments(database) == []

    def test_malformed_contest_id(self, client, auth_headers, users):
        response = client.post(
            "/payments",
            json={"contestId": "nope", "price": 10, "transactionId": "pi_x"},
            headers=auth_headers(USER_EMAIL)
        )

        assert response.status_code == 400


class TestListPayments:

    def test_listing_is_self_only(self, client, auth_headers, users):
        other = client.get("/payments", params={"email": OTHER_USER_EMAIL}, headers=auth_headers(USER_EMAIL))
        by_path = client.get(f"/payments/user/{OTHER_USER_EMAIL}", headers=auth_headers(USER_EMAIL))

        assert other.status_code == 403
        assert by_path.status_code == 403

    def test_missing_email_query_is_forbidden(self, client, auth_headers, users):
        response = client.get("/payments", headers=auth_headers(USER_EMAIL))

        assert response.status_code == 403

    @pytest.mark.parametrize("path", ["/payments?email={email}", "/payments/user/{email}"])
    def test_lists_own_entries_with_contest_details(self, client, auth_headers, make_contest, make_payment, path):
        contest_id = make_contest(image="https://img.contesthub.io/logo-sprint.png")
        payment_id = make_payment(contest_id, USER_EMAIL, price=10)
        make_payment(contest_id, OTHER_USER_EMAIL)

        response = client.get(path.format(email=USER_EMAIL), headers=auth_headers(USER_EMAIL))

        assert response.status_code == 200
        [row] = response.json()["data"]["payments"]
        assert row["_id"] == payment_id
        assert row["price"] == 10
        assert row["contestId"] == contest_id
        assert row["status"] == "paid"
        assert row["contestName"] == "Logo Sprint"
        assert row["contestType"] == "Design"
        assert row["image"] == "https://img.contesthub.io/logo-sprint.png"
        assert row["prizeMoney"] == 200
        assert row["deadline"] == "2030-01-31T00:00:00Z"

    def test_newest_entry_first(self, client, auth_headers, make_contest, make_payment):
        older = make_payment(make_contest(contestName="First"), USER_EMAIL)
        newer = make_payment(make_contest(contestName="Second"), USER_EMAIL)

        response = client.get(f"/payments/user/{USER_EMAIL}", headers=auth_headers(USER_EMAIL))

        rows = response.json()["data"]["payments"]
        assert [(r["_id"], r["contestName"]) for r in rows] == [(newer, "Second"), (older, "First")]

    def test_entries_of_deleted_contests_are_dropped(self, client, auth_headers, make_contest, make_payment):
        kept = make_payment(make_contest(contestName="Kept"), USER_EMAIL)
        removed_contest = make_contest(contestName="Removed")
        make_payment(removed_contest, USER_EMAIL)
        client.delete(f"/contests/{removed_contest}", headers=auth_headers(CREATOR_EMAIL))

        response = client.get(f"/payments/user/{USER_EMAIL}", headers=auth_headers(USER_EMAIL))

        assert [r["_id"] for r in response.json()["data"]["payments"]] == [kept]

    def test_email_domain_case_is_ignored(self, client, auth_headers, make_contest, make_payment):
        payment_id = make_payment(make_contest(), USER_EMAIL)
        typed = USER_EMAIL.replace("contesthub.io", "ContestHub.IO")

        response = client.get(f"/payments/user/{typed}", headers=auth_headers(USER_EMAIL))

        assert response.status_code == 200
        assert [r["_id"] for r in response.json()["data"]["payments"]] == [payment_id]


@pytest.mark.anyio
async def test_service_lists_nothing_for_unknown_email(database):
    assert await PaymentService(database).get_user_payments("nobody@contesthub.io") == []
