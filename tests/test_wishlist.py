import pytest
from conftest import register, url_prefix

wishlist_url = f"{url_prefix}/wishlist"


@pytest.mark.asyncio
async def test_wishlist_created_on_first_read(ac_client, user_headers):
    resp = await ac_client.get(wishlist_url, headers=user_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["products"] == []


@pytest.mark.asyncio
async def test_toggle_adds_then_removes(ac_client, user_headers, cable, charger):
    resp = await ac_client.post(wishlist_url, json={"product_id": cable["id"]}, headers=user_headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["presence"] == "added"
    assert [p["product_id"] for p in data["products"]] == [cable["id"]]

    resp = await ac_client.post(wishlist_url, json={"product_id": charger["id"]}, headers=user_headers)
    assert resp.json()["data"]["presence"] == "added"
    assert len(resp.json()["data"]["products"]) == 2

    resp = await ac_client.post(wishlist_url, json={"product_id": cable["id"]}, headers=user_headers)
    data = resp.json()["data"]
    assert data["presence"] == "removed"
    assert [p["product_id"] for p in data["products"]] == [charger["id"]]


@pytest.mark.asyncio
async def test_toggle_unknown_product(ac_client, user_headers):
    resp = await ac_client.post(wishlist_url, json={"product_id": "0190c7a2-8f3e-7cc1-9d5e-1f2a3b4c5d6e"},
                                headers=user_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_remove_from_wishlist(ac_client, user_headers, cable):
    resp = await ac_client.delete(f"{wishlist_url}/{cable['id']}", headers=user_headers)
    assert resp.status_code == 404

    await ac_client.post(wishlist_url, json={"product_id": cable["id"]}, headers=user_headers)
    resp = await ac_client.delete(f"{wishlist_url}/{cable['id']}", headers=user_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["products"] == []


@pytest.mark.asyncio
async def test_wishlists_are_per_account(ac_client, user_headers, cable):
    other_headers = await register(ac_client, "grace@shop.io")

    await ac_client.post(wishlist_url, json={"product_id": cable["id"]}, headers=user_headers)
    resp = await ac_client.get(wishlist_url, headers=other_headers)
    assert resp.json()["data"]["products"] == []
