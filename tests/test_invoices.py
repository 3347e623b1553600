import pytest

from app.models.invoice import InvoiceItem


def invoice_body(**overrides):
    body = {
        "client_name": "Acme Corp",
        "client_email": "billing@acme.test",
        "issue_date": "2026-01-10",
        "due_date": "2026-02-09",
        "notes": "Thanks for your business",
        "items": [
            {"description": "Design work", "quantity": 2, "unit_price": 15000},
            {"description": "Hosting", "quantity": 1, "unit_price": 2500},
        ],
    }
    body.update(overrides)
    return body


def create_invoice(client, headers, **overrides):
    response = client.post("/api/v1/invoices", json=invoice_body(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def set_status(client, headers, invoice_id, status):
    return client.patch(f"/api/v1/invoices/{invoice_id}/status", json={"status": status}, headers=headers)


class TestCreateInvoice:

    def test_create_and_fetch(self, client, auth_headers):
        created = create_invoice(client, auth_headers)
        assert created["invoice_number"] == "INV-001"

        invoice = client.get(f"/api/v1/invoices/{created['id']}", headers=auth_headers).json()["data"]
        assert invoice["status"] == "draft"
        assert invoice["client_name"] == "Acme Corp"
        assert invoice["total"] == 32500
        assert [i["description"] for i in invoice["items"]] == ["Design work", "Hosting"]

    def test_numbers_increase_per_user(self, client, auth_headers, other_headers):
        assert create_invoice(client, auth_headers)["invoice_number"] == "INV-001"
        assert create_invoice(client, auth_headers)["invoice_number"] == "INV-002"
        assert create_invoice(client, other_headers)["invoice_number"] == "INV-001"

    def test_number_skips_taken_after_delete(self, client, auth_headers):
        first = create_invoice(client, auth_headers)
        create_invoice(client, auth_headers)
        client.delete(f"/api/v1/invoices/{first['id']}", headers=auth_headers)

        # one invoice left, but INV-002 is still taken
        assert create_invoice(client, auth_headers)["invoice_number"] == "INV-003"

    def test_quantity_and_price_are_rounded(self, client, auth_headers):
        created = create_invoice(client, auth_headers, items=[
            {"description": "Consulting", "quantity": 1.5, "unit_price": 999.5},
        ])
        invoice = client.get(f"/api/v1/invoices/{created['id']}", headers=auth_headers).json()["data"]
        assert invoice["items"][0]["quantity"] == 2
        assert invoice["items"][0]["unit_price"] == 1000
        assert invoice["total"] == 2000

    @pytest.mark.parametrize("items, message", [
        ([], "At least one line item is required"),
        ([{"description": "  ", "quantity": 1, "unit_price": 100}], "All line items must have a description"),
        ([{"description": "Work", "quantity": 0, "unit_price": 100}], "Quantity must be greater than 0"),
        ([{"description": "Work", "quantity": 0.2, "unit_price": 100}], "Quantity must be greater than 0"),
        ([{"description": "Work", "quantity": 1, "unit_price": -1}], "Unit price cannot be negative"),
    ])
    def test_invalid_items(self, client, auth_headers, items, message):
        response = client.post("/api/v1/invoices", json=invoice_body(items=items), headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == message

    def test_out_of_range_item(self, client, auth_headers):
        response = client.post("/api/v1/invoices", json=invoice_body(items=[
            {"description": "Everything", "quantity": 1, "unit_price": 1e30},
        ]), headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "Quantity and unit price must be within range"

    def test_client_name_required(self, client, auth_headers):
        response = client.post("/api/v1/invoices", json=invoice_body(client_name=" "), headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "Client name is required"

    def test_free_item_is_allowed(self, client, auth_headers):
        created = create_invoice(client, auth_headers, items=[
            {"description": "Goodwill", "quantity": 1, "unit_price": 0},
        ])
        invoice = client.get(f"/api/v1/invoices/{created['id']}", headers=auth_headers).json()["data"]
        assert invoice["total"] == 0


class TestListInvoices:

    def test_list_with_totals_newest_first(self, client, auth_headers):
        create_invoice(client, auth_headers, issue_date="2026-01-01")
        create_invoice(client, auth_headers, issue_date="2026-03-01", items=[
            {"description": "Audit", "quantity": 3, "unit_price": 1000},
        ])

        invoices = client.get("/api/v1/invoices", headers=auth_headers).json()["data"]
        assert [i["invoice_number"] for i in invoices] == ["INV-002", "INV-001"]
        assert [i["total"] for i in invoices] == [3000, 32500]

    def test_invoices_are_private(self, client, auth_headers, other_headers):
        created = create_invoice(client, auth_headers)
        assert client.get("/api/v1/invoices", headers=other_headers).json()["data"] == []
        assert client.get(f"/api/v1/invoices/{created['id']}", headers=other_headers).status_code == 404


class TestInvoiceLifecycle:

    def test_draft_sent_paid(self, client, auth_headers):
        invoice_id = create_invoice(client, auth_headers)["id"]

        response = set_status(client, auth_headers, invoice_id, "sent")
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "sent"

        response = set_status(client, auth_headers, invoice_id, "paid")
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "paid"

    @pytest.mark.parametrize("path, target", [
        ([], "paid"),
        ([], "cancelled"),
        (["sent"], "draft"),
        (["sent", "paid"], "sent"),
    ])
    def test_invalid_transitions(self, client, auth_headers, path, target):
        invoice_id = create_invoice(client, auth_headers)["id"]
        for step in path:
            set_status(client, auth_headers, invoice_id, step)

        response = set_status(client, auth_headers, invoice_id, target)
        assert response.status_code == 409
        assert response.json()["error"].startswith("Cannot change status from")

    def test_void_sent_invoice(self, client, auth_headers):
        invoice_id = create_invoice(client, auth_headers)["id"]
        set_status(client, auth_headers, invoice_id, "sent")

        response = client.post(f"/api/v1/invoices/{invoice_id}/void", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "cancelled"

        # cancelled is terminal
        assert set_status(client, auth_headers, invoice_id, "paid").status_code == 409
        assert client.post(f"/api/v1/invoices/{invoice_id}/void", headers=auth_headers).status_code == 409

    def test_void_paid_invoice(self, client, auth_headers):
        invoice_id = create_invoice(client, auth_headers)["id"]
        set_status(client, auth_headers, invoice_id, "sent")
        set_status(client, auth_headers, invoice_id, "paid")

        response = client.post(f"/api/v1/invoices/{invoice_id}/void", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "cancelled"

        invoice = client.get(f"/api/v1/invoices/{invoice_id}", headers=auth_headers).json()["data"]
        assert invoice["status"] == "cancelled"

    def test_void_draft_is_rejected(self, client, auth_headers):
        invoice_id = create_invoice(client, auth_headers)["id"]
        response = client.post(f"/api/v1/invoices/{invoice_id}/void", headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["error"] == "Only sent or paid invoices can be voided"


class TestEditAndDelete:

    def test_edit_draft_replaces_items(self, client, auth_headers):
        invoice_id = create_invoice(client, auth_headers)["id"]

        response = client.put(f"/api/v1/invoices/{invoice_id}", json={
            "client_name": "Acme Holdings",
            "items": [{"description": "Retainer", "quantity": 1, "unit_price": 50000}],
        }, headers=auth_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["client_name"] == "Acme Holdings"
        assert data["notes"] == "Thanks for your business"
        assert [i["description"] for i in data["items"]] == ["Retainer"]
        assert data["total"] == 50000

    def test_edit_without_items_keeps_them(self, client, auth_headers):
        invoice_id = create_invoice(client, auth_headers)["id"]
        data = client.put(
            f"/api/v1/invoices/{invoice_id}", json={"notes": None}, headers=auth_headers
        ).json()["data"]
        assert data["notes"] is None
        assert len(data["items"]) == 2

    def test_failed_item_replace_keeps_old_items(self, client, auth_headers):
        invoice_id = create_invoice(client, auth_headers)["id"]
        response = client.put(f"/api/v1/invoices/{invoice_id}", json={
            "client_name": "Someone Else",
            "items": [{"description": "Broken", "quantity": -1, "unit_price": 100}],
        }, headers=auth_headers)
        assert response.status_code == 400

        invoice = client.get(f"/api/v1/invoices/{invoice_id}", headers=auth_headers).json()["data"]
        assert invoice["client_name"] == "Acme Corp"
        assert invoice["total"] == 32500

    def test_sent_invoice_is_read_only(self, client, auth_headers):
        invoice_id = create_invoice(client, auth_headers)["id"]
        set_status(client, auth_headers, invoice_id, "sent")

        response = client.put(f"/api/v1/invoices/{invoice_id}", json={"notes": "late"}, headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["error"] == "Only draft invoices can be edited"

        response = client.delete(f"/api/v1/invoices/{invoice_id}", headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["error"] == "Only draft invoices can be deleted"

    def test_delete_draft(self, client, auth_headers):
        invoice_id = create_invoice(client, auth_headers)["id"]
        assert client.delete(f"/api/v1/invoices/{invoice_id}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/v1/invoices/{invoice_id}", headers=auth_headers).status_code == 404

    def test_delete_cascades_items(self, client, auth_headers, db):
        invoice_id = create_invoice(client, auth_headers)["id"]
        client.delete(f"/api/v1/invoices/{invoice_id}", headers=auth_headers)
        assert db.query(InvoiceItem).filter(InvoiceItem.invoice_id == invoice_id).count() == 0
