from tests.conftest import API, bearer, onboard, sign_up


def _enable_orders(client, admin, business):
    response = client.post(
        f"{API}/admin/businesses/{business['user']['_id']}/order-creation",
        headers=bearer(admin["token"]),
    )
    assert response.status_code == 200
    assert response.get_json()["data"]["can_create_orders"] is True


def _place_cake_order(client, business):
    return client.post(f"{API}/orders", headers=bearer(business["token"]), json={
        "phone": "+1555000111",
        "customer_name": "Alice",
        "products": [{"name": "Cake", "price": 20, "quantity": 2}],
        "delivery_charge": 5,
        "total_amount": 1,
    })


def test_requests_without_token_are_rejected(client):
    assert client.get(f"{API}/customers").status_code == 401
    assert client.get(f"{API}/customers", headers=bearer("not-a-token")).status_code == 401


def test_profile_before_onboarding_is_restricted(client):
    token = sign_up(client)["access_token"]

    response = client.get(f"{API}/business/profile", headers=bearer(token))

    data = response.get_json()["data"]
    assert data["onboarding_required"] is True
    assert data["gates"]["can_add_customer"] is False
    assert client.get(f"{API}/customers", headers=bearer(token)).status_code == 400


def test_onboarding_twice_conflicts(client, business):
    response = client.post(
        f"{API}/business/register",
        json={"business_name": "Cake House", "phone": "01711000000"},
        headers=bearer(business["token"]),
    )
    assert response.status_code == 409


def test_order_creation_needs_admin_approval(client, business):
    response = _place_cake_order(client, business)

    assert response.status_code == 403
    assert response.get_json()["error"] == "FEATURE_NOT_AVAILABLE"


def test_order_flow(client, admin, business):
    _enable_orders(client, admin, business)
    headers = bearer(business["token"])

    response = _place_cake_order(client, business)
    assert response.status_code == 201
    order = response.get_json()["data"]["order"]
    assert order["total_amount"] == 45
    assert order["status"] == "pending"
    assert response.get_json()["data"]["customer"]["phone"] == "+1555000111"

    customers = client.get(f"{API}/customers", headers=headers).get_json()["data"]
    assert len(customers) == 1
    assert customers[0]["order_count"] == 1

    # terminal statuses only go through the feedback endpoint
    response = client.patch(f"{API}/orders/{order['_id']}/status", json={"status": "completed"}, headers=headers)
    assert response.status_code == 422

    response = client.patch(f"{API}/orders/{order['_id']}/status", json={"status": "processing"}, headers=headers)
    assert response.status_code == 200

    response = client.post(f"{API}/orders/{order['_id']}/finalize", json={"status": "completed"}, headers=headers)
    assert response.status_code == 422

    response = client.post(
        f"{API}/orders/{order['_id']}/finalize",
        json={"status": "completed", "rating": 5, "comment": "Great cake"},
        headers=headers,
    )
    assert response.status_code == 200
    result = response.get_json()["data"]
    assert result["order"]["status"] == "completed"
    assert result["order"]["invoice_number"].startswith("INV-")
    assert result["experience"]["rating"] == 5

    response = client.post(
        f"{API}/orders/{order['_id']}/finalize",
        json={"status": "cancelled", "rating": 1},
        headers=headers,
    )
    assert response.status_code == 409

    response = client.get(f"{API}/orders/{order['_id']}/invoice", headers=headers)
    assert response.status_code == 200
    assert response.mimetype == "application/pdf"
    assert response.data.startswith(b"%PDF")


def test_blank_invoice_number_is_refused(client, admin, business):
    _enable_orders(client, admin, business)
    order = _place_cake_order(client, business).get_json()["data"]["order"]

    response = client.patch(f"{API}/orders/{order['_id']}", json={"invoice_number": ""}, headers=bearer(business["token"]))

    assert response.status_code == 422


def test_order_list_filters(client, admin, business):
    _enable_orders(client, admin, business)
    headers = bearer(business["token"])
    _place_cake_order(client, business)

    pending = client.get(f"{API}/orders?status=pending,processing&search=alice", headers=headers)
    completed = client.get(f"{API}/orders?status=completed", headers=headers)

    assert len(pending.get_json()["data"]) == 1
    assert completed.get_json()["data"] == []


def test_duplicate_product_code(client, business):
    headers = bearer(business["token"])

    first = client.post(f"{API}/products", json={"name": "Cake", "price": 20, "code": "A1"}, headers=headers)
    second = client.post(f"{API}/products", json={"name": "Other", "price": 5, "code": "A1"}, headers=headers)

    assert first.status_code == 201
    assert second.status_code == 409
    listing = client.get(f"{API}/products", headers=headers).get_json()["data"]
    assert [p["name"] for p in listing] == ["Cake"]


def test_customer_create_is_idempotent(client, business):
    headers = bearer(business["token"])

    first = client.post(f"{API}/customers", json={"phone": "01711000000", "name": "Alice"}, headers=headers)
    second = client.post(f"{API}/customers", json={"phone": "017-1100-0000", "name": "Again"}, headers=headers)

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.get_json()["data"]["_id"] == first.get_json()["data"]["_id"]


def test_customer_create_does_not_reuse_suffix_match(client, business):
    headers = bearer(business["token"])

    first = client.post(f"{API}/customers", json={"phone": "01711000000", "name": "Alice"}, headers=headers)
    second = client.post(f"{API}/customers", json={"phone": "+8801711000000", "name": "Bob"}, headers=headers)

    assert second.status_code == 201
    assert second.get_json()["data"]["_id"] != first.get_json()["data"]["_id"]


def test_export_needs_plan_feature(client, business):
    response = client.get(f"{API}/customers/export?format=csv", headers=bearer(business["token"]))
    assert response.status_code == 403


def test_export_after_plan_upgrade(client, business):
    headers = bearer(business["token"])
    plans = client.get(f"{API}/business/plans", headers=headers).get_json()["data"]
    gold = next(p for p in plans if p["name"] == "Gold")

    assert client.post(f"{API}/business/plans", json={"plan_id": gold["_id"]}, headers=headers).status_code == 200
    client.post(f"{API}/customers", json={"phone": "01711000000", "name": "Alice"}, headers=headers)

    response = client.get(f"{API}/customers/export?format=csv", headers=headers)
    assert response.status_code == 200
    assert response.data.decode("utf-8").splitlines()[0].startswith("Name,Phone,Email")


def test_business_cannot_use_admin_endpoints(client, business):
    assert client.get(f"{API}/admin/businesses", headers=bearer(business["token"])).status_code == 403


def test_disabled_business_loses_access(client, admin, business):
    response = client.post(
        f"{API}/admin/businesses/{business['user']['_id']}/status",
        headers=bearer(admin["token"]),
    )
    assert response.get_json()["data"]["status"] == "disabled"

    response = client.get(f"{API}/business/profile", headers=bearer(business["token"]))
    assert response.status_code in (401, 403)

    response = client.post(f"{API}/auth/login", json={"email": "owner@example.com", "password": "secret123"})
    assert response.status_code == 403


def test_admin_activity_and_stats(client, admin, business):
    _enable_orders(client, admin, business)
    _place_cake_order(client, business)
    headers = bearer(admin["token"])

    activity = client.get(f"{API}/admin/activity?limit=5", headers=headers).get_json()["data"]
    stats = client.get(f"{API}/admin/businesses/{business['user']['_id']}/stats", headers=headers).get_json()["data"]

    assert activity[0]["action"] == "toggle_order_creation"
    assert stats["total_orders"] == 1
    assert stats["by_status"]["pending"]["amount"] == 45


def test_logout_revokes_token(client):
    token = sign_up(client)["access_token"]
    onboard(client, token)

    assert client.post(f"{API}/auth/logout", headers=bearer(token)).status_code == 200
    assert client.get(f"{API}/business/profile", headers=bearer(token)).status_code == 401
