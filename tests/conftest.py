import anyio
import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from app.core.config import Settings
from app.database import Database
from app.main import create_app
from app.services.auth.security import TokenService

ADMIN_EMAIL = "admin@contesthub.io"
CREATOR_EMAIL = "creator@contesthub.io"
OTHER_CREATOR_EMAIL = "maker@contesthub.io"
USER_EMAIL = "player@contesthub.io"
OTHER_USER_EMAIL = "rival@contesthub.io"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings():
    return Settings(access_token_secret="test-secret", debug=True)


@pytest.fixture
def database():
    return Database(AsyncMongoMockClient(), "contestHubTest")


@pytest.fixture
def payment_gateway():
    """Replaced by tests that exercise payment intents"""
    return None


@pytest.fixture
def app(settings, database, payment_gateway):
    return create_app(settings=settings, database=database, payment_gateway=payment_gateway)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def token_service(settings):
    return TokenService.from_settings(settings)


@pytest.fixture
def auth_headers(token_service):
    """Build an Authorization header for ``email``"""
    def _headers(email):
        token = token_service.issue({"email": email})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def users(database):
    """One account per role plus a second creator and participant"""
    rows = [
        {"email": ADMIN_EMAIL, "name": "Ada Admin", "photo": "https://img.contesthub.io/ada.png", "role": "admin"},
        {"email": CREATOR_EMAIL, "name": "Cora Creator", "photo": "https://img.contesthub.io/cora.png", "role": "creator"},
        {"email": OTHER_CREATOR_EMAIL, "name": "Milo Maker", "photo": None, "role": "creator"},
        {"email": USER_EMAIL, "name": "Pat Player", "photo": "https://img.contesthub.io/pat.png", "role": "user"},
        {"email": OTHER_USER_EMAIL, "name": "Rae Rival", "photo": None, "role": "user"},
    ]

    async def seed():
        await database.users.insert_many([dict(row) for row in rows])

    anyio.run(seed)
    return rows


@pytest.fixture
def make_contest(client, auth_headers, users):
    """Create a contest through the API, optionally accepting it as admin"""
    def _make(accept=True, creator=CREATOR_EMAIL, **fields):
        payload = {
            "contestName": "Logo Sprint",
            "contestType": "Design",
            "description": "Design a logo for a coffee shop",
            "price": 10,
            "prizeMoney": 200,
            "taskInstruction": "Upload a PNG link",
            "deadline": "2030-01-31T00:00:00Z",
        }
        payload.update(fields)

        response = client.post("/contests", json=payload, headers=auth_headers(creator))
        assert response.status_code == 201, response.text
        contest_id = response.json()["data"]["insertedId"]

        if accept:
            response = client.patch(
                f"/contests/status/{contest_id}",
                json={"status": "accepted"},
                headers=auth_headers(ADMIN_EMAIL)
            )
            assert response.status_code == 200, response.text

        return contest_id
    return _make


@pytest.fixture
def make_payment(client, auth_headers):
    """Record a paid entry for ``email`` and return its id"""
    def _pay(contest_id, email=USER_EMAIL, price=10, transaction_id=None):
        response = client.post(
            "/payments",
            json={
                "contestId": contest_id,
                "price": price,
                "transactionId": transaction_id or f"pi_{email.split('@')[0]}_{contest_id[-6:]}",
            },
            headers=auth_headers(email)
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]["paymentResult"]["insertedId"]
    return _pay
