"""End-to-end HTTP flow: manufacturer ships a batch, pharmacist scans it in."""
from datetime import date, timedelta

from conftest import auth_header


def _create_medicine(client, manufacturer):
    response = client.post(
        "/medicines",
        json={"name": "Amoxil", "generic_name": "Amoxicillin", "dosage_form": "Capsule", "strength": "250mg"},
        headers=auth_header(manufacturer),
    )
    assert response.status_code == 201
    return response.json()


def _create_batch(client, manufacturer, medicine_id, quantity=50, expires_in=10):
    today = date.today()
    response = client.post(
        "/batches",
        json={
            "medicine_id": medicine_id,
            "batch_number": "AMX-2026-01",
            "quantity": quantity,
            "manufacturing_date": (today - timedelta(days=60)).isoformat(),
            "expiry_date": (today + timedelta(days=expires_in)).isoformat(),
        },
        headers=auth_header(manufacturer),
    )
    assert response.status_code == 201
    return response.json()


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_requests_without_token_are_rejected(client):
    response = client.get("/batches")
    assert response.status_code == 401
    assert response.json()["detail"] == "Authentication failed"


def test_garbage_token_is_rejected(client):
    response = client.get("/batches", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_me_returns_profile(client, pharmacist):
    response = client.get("/me", headers=auth_header(pharmacist))
    assert response.status_code == 200
    assert response.json()["role"] == "pharmacist"
    assert response.json()["contact_email"] == "desk@corner.example.com"


def test_full_custody_flow(client, manufacturer, pharmacist):
    medicine = _create_medicine(client, manufacturer)
    batch = _create_batch(client, manufacturer, medicine["id"])
    assert batch["status"] == "created"
    assert batch["status_label"] == "Created"
    assert batch["qr_code"].startswith("PHARM-")
    assert batch["medicine_name"] == "Amoxil"

    for status in ("in_transit", "delivered"):
        response = client.patch(
            f"/batches/{batch['id']}/status",
            json={"status": status, "current_location": "Route 66"},
            headers=auth_header(manufacturer),
        )
        assert response.status_code == 200
        assert response.json()["status"] == status
    assert response.json()["status_label"] == "Delivered"

    preview = client.get(f"/pharmacy/scan/{batch['qr_code']}", headers=auth_header(pharmacist))
    assert preview.status_code == 200
    assert preview.json()["status"] == "delivered"

    confirm = client.post(f"/pharmacy/scan/{batch['qr_code']}/confirm", headers=auth_header(pharmacist))
    assert confirm.status_code == 200
    body = confirm.json()
    assert body["outcome"] == "received"
    assert body["message"] == "Delivery confirmed successfully"
    assert body["batch"]["pharmacist_id"] == pharmacist.id
    assert body["batch"]["current_location"] == "Pharmacy Inventory"

    again = client.post(f"/pharmacy/scan/{batch['qr_code']}/confirm", headers=auth_header(pharmacist))
    assert again.status_code == 200
    assert again.json()["outcome"] == "already_received"
    assert again.json()["message"] == "Batch already received"

    received = client.get("/pharmacy/received", headers=auth_header(pharmacist)).json()
    assert [b["id"] for b in received] == [batch["id"]]

    inventory = client.get("/pharmacy/inventory", headers=auth_header(pharmacist)).json()
    assert len(inventory) == 1
    assert inventory[0]["total_quantity"] == 50
    assert inventory[0]["expiry_status"]["tier"] == "critical"
    assert inventory[0]["batches"][0]["batch_number"] == "AMX-2026-01"

    history = client.get(f"/batches/{batch['id']}/history", headers=auth_header(manufacturer)).json()
    assert [h["status"] for h in history] == ["created", "in_transit", "delivered", "received"]


def test_invalid_batch_input_names_the_field(client, manufacturer):
    medicine = _create_medicine(client, manufacturer)
    today = date.today()
    response = client.post(
        "/batches",
        json={
            "medicine_id": medicine["id"],
            "batch_number": "BAD-1",
            "quantity": 0,
            "manufacturing_date": today.isoformat(),
            "expiry_date": (today + timedelta(days=30)).isoformat(),
        },
        headers=auth_header(manufacturer),
    )
    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "quantity"


def test_backward_move_is_400(client, manufacturer):
    medicine = _create_medicine(client, manufacturer)
    batch = _create_batch(client, manufacturer, medicine["id"])
    client.patch(f"/batches/{batch['id']}/status", json={"status": "delivered"}, headers=auth_header(manufacturer))

    response = client.patch(
        f"/batches/{batch['id']}/status", json={"status": "in_transit"}, headers=auth_header(manufacturer)
    )
    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "status"


def test_roles_are_enforced(client, manufacturer, pharmacist):
    medicine = _create_medicine(client, manufacturer)
    batch = _create_batch(client, manufacturer, medicine["id"])

    assert client.get("/batches", headers=auth_header(pharmacist)).status_code == 403
    assert client.get("/pharmacy/inventory", headers=auth_header(manufacturer)).status_code == 403
    assert (
        client.post(f"/pharmacy/scan/{batch['qr_code']}/confirm", headers=auth_header(manufacturer)).status_code
        == 403
    )


def test_other_manufacturer_sees_404(client, manufacturer, other_manufacturer):
    medicine = _create_medicine(client, manufacturer)
    batch = _create_batch(client, manufacturer, medicine["id"])
    response = client.patch(
        f"/batches/{batch['id']}/status", json={"status": "in_transit"}, headers=auth_header(other_manufacturer)
    )
    assert response.status_code == 404


def test_unknown_qr_code_is_404(client, pharmacist):
    response = client.post("/pharmacy/scan/PHARM-0-MISSING/confirm", headers=auth_header(pharmacist))
    assert response.status_code == 404


def test_schema_rejections_use_the_service_error_shape(client, manufacturer):
    medicine = _create_medicine(client, manufacturer)
    today = date.today()

    missing_quantity = client.post(
        "/batches",
        json={
            "medicine_id": medicine["id"],
            "batch_number": "BAD-2",
            "manufacturing_date": today.isoformat(),
            "expiry_date": (today + timedelta(days=30)).isoformat(),
        },
        headers=auth_header(manufacturer),
    )
    assert missing_quantity.status_code == 400
    assert missing_quantity.json()["detail"]["field"] == "quantity"
    assert missing_quantity.json()["detail"]["message"]

    bad_date = client.post(
        "/batches",
        json={
            "medicine_id": medicine["id"],
            "batch_number": "BAD-3",
            "quantity": 5,
            "manufacturing_date": today.isoformat(),
            "expiry_date": "next spring",
        },
        headers=auth_header(manufacturer),
    )
    assert bad_date.status_code == 400
    assert bad_date.json()["detail"]["field"] == "expiry_date"

    bad_status = client.patch(
        "/batches/1/status", json={"status": "lost"}, headers=auth_header(manufacturer)
    )
    assert bad_status.status_code == 400
    assert bad_status.json()["detail"]["field"] == "status"
