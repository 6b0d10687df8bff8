"""
Integration tests for marketplace products and orders.
"""
import pytest

from fitness_gh.core.errors import ConflictError
from fitness_gh.db.models.order import Order
from fitness_gh.db.models.product import Product
from fitness_gh.schemas.marketplace import OrderCreate
from fitness_gh.services import marketplace_service

from conftest import TestSessionLocal, create_user, auth_headers

API = "/api/v1/marketplace"


def _vendor(db_session):
    return create_user(db_session, "vendor@example.com", "whey_gh")


def _product(client, headers, **overrides):
    body = {"name": "Whey Protein 2kg", "category": "supplements", "price": 120.0, "stock": 5, "sku": "WHEY-2KG"}
    body.update(overrides)
    return client.post(f"{API}/products", json=body, headers=headers)


def _publish(client, headers, product_id):
    return client.put(f"{API}/products/{product_id}", json={"status": "ACTIVE"}, headers=headers)


def test_new_products_start_as_draft(client, db_session):
    vendor = auth_headers(*_vendor(db_session))

    created = _product(client, vendor)
    assert created.status_code == 201
    assert created.json()["data"]["status"] == "DRAFT"
    assert client.get(f"{API}/products").json()["data"] == []

    _publish(client, vendor, created.json()["data"]["id"])
    listed = client.get(f"{API}/products?category=supplements").json()["data"]
    assert [p["sku"] for p in listed] == ["WHEY-2KG"]


def test_duplicate_sku_conflicts(client, db_session):
    vendor = auth_headers(*_vendor(db_session))
    assert _product(client, vendor).status_code == 201
    assert _product(client, vendor, name="Another tub").status_code == 409


def test_only_vendor_can_edit(client, db_session, member):
    vendor = auth_headers(*_vendor(db_session))
    product_id = _product(client, vendor).json()["data"]["id"]

    response = client.put(f"{API}/products/{product_id}", json={"price": 1}, headers=auth_headers(*member))
    assert response.status_code == 403
    assert client.delete(f"{API}/products/{product_id}", headers=auth_headers(*member)).status_code == 403


def test_order_takes_stock(client, db_session, member):
    vendor = auth_headers(*_vendor(db_session))
    product_id = _product(client, vendor).json()["data"]["id"]
    _publish(client, vendor, product_id)

    response = client.post(
        f"{API}/orders",
        json={"items": [{"product_id": product_id, "quantity": 2}], "shipping_address": {"city": "Kumasi"}},
        headers=auth_headers(*member),
    )

    assert response.status_code == 201
    order = response.json()["data"]
    assert order["order_number"].startswith("ORD-")
    assert order["total"] == 240.0
    assert order["items"][0]["subtotal"] == 240.0

    db_session.expire_all()
    assert db_session.query(Product).filter(Product.id == product_id).one().stock == 3


def test_insufficient_stock_leaves_everything_untouched(client, db_session, member):
    vendor = auth_headers(*_vendor(db_session))
    whey = _product(client, vendor).json()["data"]["id"]
    shaker = _product(client, vendor, name="Shaker", sku="SHAKER", price=15.0, stock=1).json()["data"]["id"]

    response = client.post(
        f"{API}/orders",
        json={"items": [{"product_id": whey, "quantity": 1}, {"product_id": shaker, "quantity": 2}]},
        headers=auth_headers(*member),
    )

    assert response.status_code == 409
    assert response.json()["details"]["available"] == 1
    db_session.expire_all()
    assert db_session.query(Order).count() == 0
    assert db_session.query(Product).filter(Product.id == whey).one().stock == 5


def test_order_for_missing_product(client, db_session, member):
    response = client.post(
        f"{API}/orders", json={"items": [{"product_id": 31337, "quantity": 1}]}, headers=auth_headers(*member)
    )
    assert response.status_code == 404


def test_customer_cancel_restores_stock(client, db_session, member):
    vendor_account, vendor_profile = _vendor(db_session)
    vendor = auth_headers(vendor_account, vendor_profile)
    product_id = _product(client, vendor, stock=2).json()["data"]["id"]
    customer = auth_headers(*member)

    order = client.post(
        f"{API}/orders", json={"items": [{"product_id": product_id, "quantity": 2}]}, headers=customer
    ).json()["data"]
    db_session.expire_all()
    assert db_session.query(Product).filter(Product.id == product_id).one().status == "OUT_OF_STOCK"

    shipped = client.patch(f"{API}/orders/{order['id']}/status", json={"status": "SHIPPED"}, headers=customer)
    assert shipped.status_code == 403

    cancelled = client.patch(f"{API}/orders/{order['id']}/status", json={"status": "CANCELLED"}, headers=customer)
    assert cancelled.status_code == 200

    db_session.expire_all()
    assert db_session.query(Product).filter(Product.id == product_id).one().stock == 2

    vendor_orders = client.get(f"{API}/orders/vendor", headers=vendor).json()["data"]
    assert [o["id"] for o in vendor_orders] == [order["id"]]
    assert [o["id"] for o in client.get(f"{API}/orders/my", headers=customer).json()["data"]] == [order["id"]]


def _stocked_product(db_session, stock):
    _, vendor = _vendor(db_session)
    product = Product(
        vendor_id=vendor.id, name="Creatine 500g", price=80.0, stock=stock, sku="CREA-500", status="ACTIVE"
    )
    db_session.add(product)
    db_session.commit()
    return product.id


def _order_one(db, customer_id, product_id, quantity=1):
    data = OrderCreate(items=[{"product_id": product_id, "quantity": quantity}])
    return marketplace_service.create_order(db, customer_id, data)


def test_orders_from_stale_sessions_do_not_lose_stock(db_session, member):
    _, customer = member
    product_id = _stocked_product(db_session, stock=5)

    stale = TestSessionLocal()
    try:
        assert stale.query(Product).filter(Product.id == product_id).one().stock == 5

        _order_one(db_session, customer.id, product_id)
        _order_one(stale, customer.id, product_id)
    finally:
        stale.close()

    db_session.expire_all()
    assert db_session.query(Product).filter(Product.id == product_id).one().stock == 3
    assert db_session.query(Order).count() == 2


def test_stale_stock_read_cannot_oversell(db_session, member):
    _, customer = member
    product_id = _stocked_product(db_session, stock=2)

    stale = TestSessionLocal()
    try:
        assert stale.query(Product).filter(Product.id == product_id).one().stock == 2

        _order_one(db_session, customer.id, product_id, quantity=2)
        with pytest.raises(ConflictError):
            _order_one(stale, customer.id, product_id)
    finally:
        stale.close()

    db_session.expire_all()
    product = db_session.query(Product).filter(Product.id == product_id).one()
    assert product.stock == 0
    assert product.status == "OUT_OF_STOCK"
    assert db_session.query(Order).count() == 1


def test_cancel_adds_back_to_current_stock(db_session, member):
    _, customer = member
    product_id = _stocked_product(db_session, stock=3)
    order = _order_one(db_session, customer.id, product_id, quantity=3)

    stale = TestSessionLocal()
    try:
        stale_order = stale.query(Order).filter(Order.id == order.id).one()
        assert stale_order.items[0].product.stock == 0

        db_session.query(Product).filter(Product.id == product_id).update({Product.stock: 4})
        db_session.commit()

        marketplace_service.update_order_status(stale, order.id, customer.id, "MEMBER", "CANCELLED")
    finally:
        stale.close()

    db_session.expire_all()
    product = db_session.query(Product).filter(Product.id == product_id).one()
    assert product.stock == 7
    assert product.status == "ACTIVE"
