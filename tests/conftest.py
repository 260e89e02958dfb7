import asyncio
from urllib.parse import urlparse, parse_qs

import pytest
from cloudinary.exceptions import BadRequest, Error as CloudinaryError
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from main import create_app
from models.user import GoogleProfile
from utils.cloudinary import UploadRelay
from utils.context import AppContext
from utils.errors import Unauthorized
from utils.google_oauth import GoogleOAuthClient
from utils.jwt import TokenCodec

TEST_SECRET = "test-secret"
FRONTEND_URL = "http://frontend.test"


class StubGoogle(GoogleOAuthClient):
    """Answers the code exchange from a dict instead of calling Google."""

    def __init__(self):
        super().__init__("client-id", "client-secret", "http://testserver/auth/external/callback")
        self.accounts = {}

    def fetch_profile(self, code):
        if code not in self.accounts:
            raise Unauthorized("Google sign-in failed")
        return self.accounts[code]


class StubRelay(UploadRelay):
    """
    Keeps uploads in memory. ``fail`` simulates a Cloudinary outage,
    ``reject`` a file Cloudinary cannot read as an image.
    """

    def __init__(self):
        super().__init__("demo", "key", "secret")
        self.uploads = []
        self.fail = False
        self.reject = False

    def _upload(self, fileobj):
        if self.reject:
            raise BadRequest("Invalid image file")
        if self.fail:
            raise CloudinaryError("service unavailable")
        self.uploads.append(fileobj.read())
        return {
            "secure_url": f"https://res.cloudinary.com/demo/image/upload/shops/img{len(self.uploads)}.jpg"
        }


@pytest.fixture
def db():
    return AsyncMongoMockClient()["shopfront_test"]


@pytest.fixture
def google():
    return StubGoogle()


@pytest.fixture
def relay():
    return StubRelay()


@pytest.fixture
def tokens():
    return TokenCodec(secret=TEST_SECRET)


@pytest.fixture
def context(db, tokens, relay, google):
    return AppContext(
        db=db,
        tokens=tokens,
        relay=relay,
        oauth=google,
        frontend_url=FRONTEND_URL,
        cookie_secure=False,
    )


@pytest.fixture
def client(context):
    with TestClient(create_app(context)) as c:
        yield c


def auth(token):
    return {"Cookie": f"token={token}"}


def audit_actions(db) -> list[str]:
    async def _collect():
        return [entry["action"] async for entry in db.audit_logs.find().sort("_id", 1)]

    return asyncio.run(_collect())


def products_in(db) -> list[dict]:
    async def _collect():
        return [p async for p in db.products.find()]

    return asyncio.run(_collect())


def photo(name="shop.jpg", content_type="image/jpeg"):
    return (name, b"\xff\xd8\xff\xe0fake-jpeg", content_type)


@pytest.fixture
def login(client, google):
    """Run the Google sign-in round trip and return the issued token."""

    def _login(sub: str, name: str = "Test User") -> str:
        code = f"code-{sub}"
        google.accounts[code] = GoogleProfile(
            sub=sub,
            name=name,
            email=f"user{sub}@gmail.com",
            picture=f"https://lh3.googleusercontent.com/{sub}.png",
        )

        start = client.get("/auth/external/start", follow_redirects=False)
        state = parse_qs(urlparse(start.headers["location"]).query)["state"][0]

        resp = client.get(
            "/auth/external/callback",
            params={"code": code, "state": state},
            follow_redirects=False,
        )
        assert resp.status_code == 302, resp.text
        token = resp.cookies["token"]
        client.cookies.clear()
        return token

    return _login


@pytest.fixture
def make_seller(client, login):
    """Log a new user in and register a shop for them."""

    def _make_seller(sub: str, shop_name: str = "Gadget Hub") -> tuple[str, dict]:
        token = login(sub)
        resp = client.post(
            "/seller/register",
            data={"shopName": shop_name, "shopType": "Mobiles", "shopLocation": "Pune"},
            files={"shopPhoto": photo()},
            headers=auth(token),
        )
        assert resp.status_code == 200, resp.text
        return token, resp.json()["seller"]

    return _make_seller


@pytest.fixture
def add_product(client):
    def _add_product(token: str, **fields) -> dict:
        data = {
            "brand": "Samsung",
            "model": "Galaxy S23",
            "productType": "mobile",
            "color": "Black",
            "storage": "256GB",
            "ram": "8GB",
            "price": "74999",
        }
        data.update(fields)
        resp = client.post("/product/add", data=data, headers=auth(token))
        assert resp.status_code == 200, resp.text
        return resp.json()["product"]

    return _add_product
