import pytest
from conftest import add_to_cart, cart_total, url_prefix

cart_url = f"{url_prefix}/cart"


@pytest.mark.asyncio
async def test_get_cart_before_first_add(ac_client, user_headers):
    resp = await ac_client.get(cart_url, headers=user_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_add_sets_quantity_and_total(ac_client, user_headers, cable, charger):
    cart = await add_to_cart(ac_client, user_headers, cable["id"], 2)
    assert cart["total_price"] == 20.0
    assert cart["items"][0]["quantity"] == 2
    assert cart["items"][0]["available"] is True

    # adding again replaces the quantity
    cart = await add_to_cart(ac_client, user_headers, cable["id"], 3)
    assert len(cart["items"]) == 1
    assert cart["items"][0]["quantity"] == 3
    assert cart["total_price"] == 30.0

    cart = await add_to_cart(ac_client, user_headers, charger["id"], 1)
    assert len(cart["items"]) == 2
    assert cart["total_price"] == 65.5


@pytest.mark.asyncio
async def test_add_more_than_stock(ac_client, user_headers, charger):
    resp = await ac_client.post(cart_url, json={"product_id": charger["id"], "quantity": 6}, headers=user_headers)
    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["code"] == "INSUFFICIENT_STOCK"
    assert error["details"]["available"] == 5


@pytest.mark.asyncio
async def test_add_unknown_product(ac_client, user_headers):
    resp = await ac_client.post(cart_url, json={"product_id": "0190c7a2-8f3e-7cc1-9d5e-1f2a3b4c5d6e", "quantity": 1},
                                headers=user_headers)
    assert resp.status_code == 404

    resp = await ac_client.post(cart_url, json={"product_id": "cable", "quantity": 1}, headers=user_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_add_rejects_zero_quantity(ac_client, user_headers, cable):
    resp = await ac_client.post(cart_url, json={"product_id": cable["id"], "quantity": 0}, headers=user_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_update_item_quantity(ac_client, user_headers, cable, charger):
    await add_to_cart(ac_client, user_headers, cable["id"], 1)

    resp = await ac_client.put(f"{cart_url}/{cable['id']}", json={"quantity": 4}, headers=user_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["total_price"] == 40.0

    # a product that is not in the cart cannot be updated
    resp = await ac_client.put(f"{cart_url}/{charger['id']}", json={"quantity": 1}, headers=user_headers)
    assert resp.status_code == 404

    resp = await ac_client.put(f"{cart_url}/{cable['id']}", json={"quantity": 51}, headers=user_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_update_without_cart(ac_client, user_headers, cable):
    resp = await ac_client.put(f"{cart_url}/{cable['id']}", json={"quantity": 1}, headers=user_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_remove_item(ac_client, user_headers, cable, charger):
    await add_to_cart(ac_client, user_headers, cable["id"], 1)
    await add_to_cart(ac_client, user_headers, charger["id"], 2)

    resp = await ac_client.delete(f"{cart_url}/{charger['id']}", headers=user_headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [i["product_id"] for i in data["items"]] == [cable["id"]]
    assert data["total_price"] == 10.0


@pytest.mark.asyncio
async def test_clear_cart_keeps_the_cart(ac_client, user_headers, cable):
    cart = await add_to_cart(ac_client, user_headers, cable["id"], 2)

    resp = await ac_client.delete(cart_url, headers=user_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["items"] == []
    assert resp.json()["data"]["id"] == cart["id"]
    assert str(await cart_total(cart["id"])) == "0.00"

    resp = await ac_client.get(cart_url, headers=user_headers)
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_total_follows_price_change_on_next_mutation(ac_client, user_headers, admin_headers, cable, charger):
    cart = await add_to_cart(ac_client, user_headers, cable["id"], 2)

    await ac_client.patch(f"{url_prefix}/admin/products/{cable['id']}", json={"price": "12.50"}, headers=admin_headers)
    # the stored total is a cache until the cart changes again
    assert str(await cart_total(cart["id"])) == "20.00"

    cart = await add_to_cart(ac_client, user_headers, charger["id"], 1)
    assert cart["total_price"] == 60.5


@pytest.mark.asyncio
async def test_deleted_product_is_flagged_and_removable(ac_client, user_headers, admin_headers, cable):
    await add_to_cart(ac_client, user_headers, cable["id"], 1)
    await ac_client.delete(f"{url_prefix}/admin/products/{cable['id']}", headers=admin_headers)

    resp = await ac_client.get(cart_url, headers=user_headers)
    assert resp.json()["data"]["items"][0]["available"] is False

    resp = await ac_client.delete(f"{cart_url}/{cable['id']}", headers=user_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["items"] == []


@pytest.mark.asyncio
async def test_total_skips_deleted_products(ac_client, user_headers, admin_headers, cable, charger):
    await add_to_cart(ac_client, user_headers, cable["id"], 2)
    await ac_client.delete(f"{url_prefix}/admin/products/{cable['id']}", headers=admin_headers)

    cart = await add_to_cart(ac_client, user_headers, charger["id"], 1)
    assert cart["total_price"] == 35.5
    assert str(await cart_total(cart["id"])) == "35.50"
