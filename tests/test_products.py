import pytest
from conftest import create_product, register, url_prefix

admin_url = f"{url_prefix}/admin/products"


@pytest.mark.asyncio
async def test_admin_creates_product(ac_client, admin_headers):
    product = await create_product(ac_client, admin_headers, price="1999.99", stock=3)
    assert product["name"] == "USB-C Cable"
    assert product["price"] == 1999.99
    assert product["stock"] == 3
    assert product["category"] == "Cables"

    resp = await ac_client.get(f"{url_prefix}/products/{product['id']}")
    assert resp.status_code == 200
    assert resp.json()["data"]["id"] == product["id"]


@pytest.mark.asyncio
async def test_regular_user_cannot_manage_products(ac_client, user_headers, cable):
    payload = {"name": "X", "description": "Y", "price": "1.00", "stock": 1, "category": "Cases", "images": ["a.png"]}
    resp = await ac_client.post(admin_url, json=payload, headers=user_headers)
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "FORBIDDEN"

    resp = await ac_client.delete(f"{admin_url}/{cable['id']}", headers=user_headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_create_product_validation(ac_client, admin_headers):
    base = {"name": "Case", "description": "Slim", "price": "5.00", "stock": 1, "category": "Cases",
            "images": ["https://cdn.shop.io/case.png"]}

    for override in ({"images": []}, {"price": "-1"}, {"category": "Groceries"}, {"name": "x" * 101}):
        resp = await ac_client.post(admin_url, json={**base, **override}, headers=admin_headers)
        assert resp.status_code == 400, override


@pytest.mark.asyncio
async def test_public_listing_is_paginated_newest_first(ac_client, admin_headers):
    created = []
    for i in range(3):
        created.append(await create_product(ac_client, admin_headers, name=f"Case {i}", category="Cases"))

    resp = await ac_client.get(f"{url_prefix}/products", params={"page": 1, "limit": 2})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["total"] == 3
    assert data["count"] == 2
    assert data["total_pages"] == 2
    assert [p["name"] for p in data["products"]] == ["Case 2", "Case 1"]

    resp = await ac_client.get(f"{url_prefix}/products", params={"page": 2, "limit": 2})
    assert [p["name"] for p in resp.json()["data"]["products"]] == ["Case 0"]


@pytest.mark.asyncio
async def test_patch_product(ac_client, admin_headers, cable):
    resp = await ac_client.patch(f"{admin_url}/{cable['id']}", json={"stock": 7, "category": "Accessories"},
                                 headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["stock"] == 7
    assert data["category"] == "Accessories"
    assert data["name"] == cable["name"]

    resp = await ac_client.patch(f"{admin_url}/{cable['id']}", json={"colour": "red"}, headers=admin_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_deleted_product_disappears_from_catalog(ac_client, admin_headers, cable):
    resp = await ac_client.delete(f"{admin_url}/{cable['id']}", headers=admin_headers)
    assert resp.status_code == 200

    resp = await ac_client.get(f"{url_prefix}/products/{cable['id']}")
    assert resp.status_code == 404

    resp = await ac_client.get(f"{url_prefix}/products")
    assert resp.json()["data"]["total"] == 0

    resp = await ac_client.delete(f"{admin_url}/{cable['id']}", headers=admin_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_catalog_reads_need_no_token(ac_client, cable):
    resp = await ac_client.get(f"{url_prefix}/products")
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_admin_routes_need_a_token(ac_client):
    resp = await ac_client.get(f"{url_prefix}/admin/products/whatever")
    assert resp.status_code == 401
