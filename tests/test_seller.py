import pytest

from conftest import auth, photo, audit_actions

SHOP = {"shopName": "Gadget Hub", "shopType": "Mobiles", "shopLocation": "Pune"}


def test_register_requires_login(client):
    resp = client.post("/seller/register", data=SHOP)
    assert resp.status_code == 401


def test_register_creates_shop_and_promotes_user(client, login, relay):
    token = login("g-1", name="Asha")
    user = client.get("/profile", headers=auth(token)).json()["user"]

    resp = client.post("/seller/register", data=SHOP, files={"shopPhoto": photo()}, headers=auth(token))

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Seller registered successfully"
    seller = body["seller"]
    assert seller["userId"] == user["_id"]
    assert seller["name"] == "Asha"
    assert seller["email"] == "userg-1@gmail.com"
    assert seller["shopName"] == "Gadget Hub"
    assert seller["shopLocation"] == "Pune"
    assert seller["shopPhoto"] == "https://res.cloudinary.com/demo/image/upload/shops/img1.jpg"
    assert len(relay.uploads) == 1

    profile = client.get("/profile", headers=auth(token)).json()["user"]
    assert profile["role"] == "seller"


def test_register_without_photo(client, login):
    token = login("g-1")

    resp = client.post("/seller/register", data=SHOP, headers=auth(token))

    assert resp.status_code == 200
    assert resp.json()["seller"]["shopPhoto"] is None


def test_second_registration_conflicts(client, make_seller, relay):
    token, _ = make_seller("g-1")

    resp = client.post("/seller/register", data=SHOP, files={"shopPhoto": photo()}, headers=auth(token))

    assert resp.status_code == 400
    assert resp.json() == {"message": "You are already a seller"}
    # the rejected attempt never reached Cloudinary
    assert len(relay.uploads) == 1


def test_failed_upload_leaves_no_shop(client, login, relay):
    token = login("g-1")
    relay.fail = True

    resp = client.post("/seller/register", data=SHOP, files={"shopPhoto": photo()}, headers=auth(token))

    assert resp.status_code == 500
    assert resp.json() == {"message": "Server error"}
    assert client.get("/profile", headers=auth(token)).json()["user"]["role"] == "customer"

    relay.fail = False
    retry = client.post("/seller/register", data=SHOP, files={"shopPhoto": photo()}, headers=auth(token))
    assert retry.status_code == 200


def test_non_image_photo_is_rejected(client, login):
    token = login("g-1")

    resp = client.post(
        "/seller/register",
        data=SHOP,
        files={"shopPhoto": ("shop.gif", b"GIF89a", "image/gif")},
        headers=auth(token),
    )

    assert resp.status_code == 400
    assert client.get("/seller/me", headers=auth(token)).status_code == 403


def test_seller_me_requires_login(client):
    assert client.get("/seller/me").status_code == 401


def test_seller_me_forbidden_for_customer(client, login):
    resp = client.get("/seller/me", headers=auth(login("g-1")))

    assert resp.status_code == 403
    assert resp.json() == {"message": "Access denied"}


def test_seller_me(client, make_seller):
    token, seller = make_seller("g-1", shop_name="Asha Electronics")

    resp = client.get("/seller/me", headers=auth(token))

    assert resp.status_code == 200
    assert resp.json()["seller"]["_id"] == seller["_id"]
    assert resp.json()["seller"]["shopName"] == "Asha Electronics"


def test_token_issued_before_promotion_still_works(client, login, tokens):
    token = login("g-1")
    assert tokens.verify(token)[1] == "customer"

    client.post("/seller/register", data=SHOP, headers=auth(token))

    # role is read from the user record, not from the token
    assert client.get("/seller/me", headers=auth(token)).status_code == 200


def test_image_cloudinary_cannot_read_is_rejected(client, login, relay):
    token = login("g-1")
    relay.reject = True

    resp = client.post("/seller/register", data=SHOP, files={"shopPhoto": photo("x.jpg")}, headers=auth(token))

    assert resp.status_code == 400
    assert resp.json() == {"message": "Invalid image file"}
    assert client.get("/profile", headers=auth(token)).json()["user"]["role"] == "customer"


def test_interrupted_promotion_is_finished_on_retry(client, login, context, monkeypatch):
    token = login("g-1")
    set_role = context.users.set_role
    calls = []

    async def crash_once(user_id, role):
        calls.append(role)
        if len(calls) == 1:
            raise RuntimeError("connection reset")
        await set_role(user_id, role)

    monkeypatch.setattr(context.users, "set_role", crash_once)

    with pytest.raises(RuntimeError):
        client.post("/seller/register", data=SHOP, headers=auth(token))
    assert client.get("/profile", headers=auth(token)).json()["user"]["role"] == "customer"

    retry = client.post("/seller/register", data=SHOP, headers=auth(token))

    assert retry.status_code == 400
    assert retry.json() == {"message": "You are already a seller"}
    assert client.get("/profile", headers=auth(token)).json()["user"]["role"] == "seller"
    assert client.get("/seller/me", headers=auth(token)).status_code == 200


def test_concurrent_registration_loses_on_unique_index(client, make_seller, context, monkeypatch):
    token, seller = make_seller("g-1")

    # the other request checked before this one's shop existed
    async def not_yet_registered(user_id):
        return None

    monkeypatch.setattr(context.sellers, "find_by_user", not_yet_registered)

    resp = client.post("/seller/register", data={**SHOP, "shopName": "Second"}, headers=auth(token))

    assert resp.status_code == 400
    assert resp.json() == {"message": "You are already a seller"}
    monkeypatch.undo()
    assert client.get("/seller/me", headers=auth(token)).json()["seller"]["shopName"] == seller["shopName"]


def test_registration_is_audited(client, make_seller, db):
    make_seller("g-1")
    assert audit_actions(db) == ["SELLER_REGISTERED"]


def test_missing_shop_name_is_invalid_request(client, login):
    resp = client.post("/seller/register", data={"shopType": "Mobiles"}, headers=auth(login("g-1")))

    assert resp.status_code == 422
    body = resp.json()
    assert body["message"] == "Invalid request"
    assert body["errors"][0]["loc"][-1] == "shopName"
