from datetime import datetime, timedelta

from conftest import category_id, create_transaction


class TestCreateTransaction:

    def test_amount_is_rounded_half_up(self, client, auth_headers):
        txn_id = create_transaction(client, auth_headers, 1250.5, "Food", description="Groceries")
        data = client.get(f"/api/v1/transactions/{txn_id}", headers=auth_headers).json()["data"]
        assert data["amount"] == 1251
        assert data["description"] == "Groceries"
        assert data["category"]["name"] == "Food"
        assert data["type"] == "expense"

    def test_non_positive_amount(self, client, auth_headers):
        food = category_id(client, auth_headers, "Food")
        for amount in (0, -100, 0.2):
            response = client.post("/api/v1/transactions", json={
                "type": "expense",
                "amount": amount,
                "category_id": food,
                "date": "2026-01-15T12:00:00",
            }, headers=auth_headers)
            assert response.status_code == 400, amount
            assert response.json()["error"] == "Amount must be a positive number"

    def test_amount_out_of_range(self, client, auth_headers):
        food = category_id(client, auth_headers, "Food")
        for amount in (1e30, 2_147_483_648):
            response = client.post("/api/v1/transactions", json={
                "type": "expense",
                "amount": amount,
                "category_id": food,
                "date": "2026-01-15T12:00:00",
            }, headers=auth_headers)
            assert response.status_code == 400, amount
            assert response.json()["error"] == "Amount is out of range"

    def test_foreign_category_is_invalid(self, client, auth_headers, other_headers):
        bobs_food = category_id(client, other_headers, "Food")
        response = client.post("/api/v1/transactions", json={
            "type": "expense",
            "amount": 500,
            "category_id": bobs_food,
            "date": "2026-01-15T12:00:00",
        }, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid category"

    def test_category_type_must_match(self, client, auth_headers):
        salary = category_id(client, auth_headers, "Salary", "income")
        response = client.post("/api/v1/transactions", json={
            "type": "expense",
            "amount": 500,
            "category_id": salary,
            "date": "2026-01-15T12:00:00",
        }, headers=auth_headers)
        assert response.status_code == 400

    def test_missing_date(self, client, auth_headers):
        response = client.post("/api/v1/transactions", json={
            "type": "expense",
            "amount": 500,
            "category_id": category_id(client, auth_headers, "Food"),
        }, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["success"] is False


class TestListTransactions:

    def test_pagination_newest_first(self, client, auth_headers):
        create_transaction(client, auth_headers, 100, "Food", date="2026-01-01T10:00:00")
        create_transaction(client, auth_headers, 200, "Food", date="2026-01-03T10:00:00")
        create_transaction(client, auth_headers, 300, "Food", date="2026-01-02T10:00:00")

        first = client.get("/api/v1/transactions", params={"limit": 2}, headers=auth_headers).json()["data"]
        assert first["total"] == 3
        assert first["total_pages"] == 2
        assert first["page"] == 1
        assert [t["amount"] for t in first["transactions"]] == [200, 300]

        second = client.get(
            "/api/v1/transactions", params={"limit": 2, "page": 2}, headers=auth_headers
        ).json()["data"]
        assert [t["amount"] for t in second["transactions"]] == [100]

    def test_empty_list(self, client, auth_headers):
        data = client.get("/api/v1/transactions", headers=auth_headers).json()["data"]
        assert data == {"transactions": [], "total": 0, "page": 1, "total_pages": 0}

    def test_end_date_covers_whole_day(self, client, auth_headers):
        create_transaction(client, auth_headers, 100, "Food", date="2026-01-10T23:30:00")
        create_transaction(client, auth_headers, 200, "Food", date="2026-01-11T00:30:00")

        data = client.get("/api/v1/transactions", params={
            "start_date": "2026-01-10",
            "end_date": "2026-01-10",
        }, headers=auth_headers).json()["data"]
        assert [t["amount"] for t in data["transactions"]] == [100]

    def test_category_filter(self, client, auth_headers):
        create_transaction(client, auth_headers, 100, "Food")
        create_transaction(client, auth_headers, 200, "Rent")
        create_transaction(client, auth_headers, 300, "Utilities")

        data = client.get("/api/v1/transactions", params={
            "category_ids": [
                category_id(client, auth_headers, "Food"),
                category_id(client, auth_headers, "Rent"),
            ],
        }, headers=auth_headers).json()["data"]
        assert sorted(t["amount"] for t in data["transactions"]) == [100, 200]

    def test_totals_cover_every_matching_row(self, client, auth_headers):
        create_transaction(client, auth_headers, 500000, "Salary", transaction_type="income")
        for amount in (1000, 2000, 3000):
            create_transaction(client, auth_headers, amount, "Food")

        totals = client.get("/api/v1/transactions/totals", headers=auth_headers).json()["data"]
        assert totals == {"income": 500000, "expense": 6000, "net": 494000}

    def test_totals_match_filtered_list(self, client, auth_headers):
        create_transaction(client, auth_headers, 400000, "Salary", transaction_type="income", date="2026-01-05T09:00:00")
        create_transaction(client, auth_headers, 50000, "Freelance", transaction_type="income", date="2026-01-31T23:00:00")
        create_transaction(client, auth_headers, 1200, "Food", date="2026-01-10T12:00:00")
        create_transaction(client, auth_headers, 90000, "Rent", date="2026-01-01T08:00:00")
        create_transaction(client, auth_headers, 700, "Food", date="2026-02-01T00:30:00")
        create_transaction(client, auth_headers, 3000, "Utilities", date="2026-01-20T12:00:00")

        filters = {
            "start_date": "2026-01-01",
            "end_date": "2026-01-31",
            "category_ids": [
                category_id(client, auth_headers, "Salary", "income"),
                category_id(client, auth_headers, "Freelance", "income"),
                category_id(client, auth_headers, "Food"),
                category_id(client, auth_headers, "Rent"),
            ],
        }
        listed = client.get(
            "/api/v1/transactions", params={**filters, "limit": 100}, headers=auth_headers
        ).json()["data"]["transactions"]
        totals = client.get("/api/v1/transactions/totals", params=filters, headers=auth_headers).json()["data"]

        income = sum(t["amount"] for t in listed if t["type"] == "income")
        expense = sum(t["amount"] for t in listed if t["type"] == "expense")
        assert len(listed) == 4
        assert totals == {"income": income, "expense": expense, "net": income - expense}
        assert totals == {"income": 450000, "expense": 91200, "net": 358800}

    def test_users_only_see_their_own(self, client, auth_headers, other_headers):
        txn_id = create_transaction(client, auth_headers, 100, "Food")

        data = client.get("/api/v1/transactions", headers=other_headers).json()["data"]
        assert data["total"] == 0
        assert client.get(f"/api/v1/transactions/{txn_id}", headers=other_headers).status_code == 404


class TestUpdateTransaction:

    def test_patch_touches_only_given_fields(self, client, auth_headers):
        txn_id = create_transaction(client, auth_headers, 1000, "Food", description="Lunch")

        response = client.put(f"/api/v1/transactions/{txn_id}", json={"amount": 1500}, headers=auth_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["amount"] == 1500
        assert data["description"] == "Lunch"
        assert data["category"]["name"] == "Food"

    def test_description_can_be_cleared(self, client, auth_headers):
        txn_id = create_transaction(client, auth_headers, 1000, "Food", description="Lunch")
        data = client.put(
            f"/api/v1/transactions/{txn_id}", json={"description": None}, headers=auth_headers
        ).json()["data"]
        assert data["description"] is None

    def test_switching_type_needs_matching_category(self, client, auth_headers):
        txn_id = create_transaction(client, auth_headers, 1000, "Food")

        response = client.put(f"/api/v1/transactions/{txn_id}", json={"type": "income"}, headers=auth_headers)
        assert response.status_code == 400

        response = client.put(f"/api/v1/transactions/{txn_id}", json={
            "type": "income",
            "category_id": category_id(client, auth_headers, "Freelance", "income"),
        }, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["type"] == "income"

    def test_invalid_amount_leaves_row_unchanged(self, client, auth_headers):
        txn_id = create_transaction(client, auth_headers, 1000, "Food")
        response = client.put(f"/api/v1/transactions/{txn_id}", json={"amount": -5}, headers=auth_headers)
        assert response.status_code == 400

        data = client.get(f"/api/v1/transactions/{txn_id}", headers=auth_headers).json()["data"]
        assert data["amount"] == 1000

    def test_update_other_users_transaction(self, client, auth_headers, other_headers):
        txn_id = create_transaction(client, auth_headers, 1000, "Food")
        response = client.put(f"/api/v1/transactions/{txn_id}", json={"amount": 1}, headers=other_headers)
        assert response.status_code == 404


class TestDeleteTransaction:

    def test_delete(self, client, auth_headers):
        txn_id = create_transaction(client, auth_headers, 1000, "Food")
        assert client.delete(f"/api/v1/transactions/{txn_id}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/v1/transactions/{txn_id}", headers=auth_headers).status_code == 404

    def test_delete_missing(self, client, auth_headers):
        response = client.delete("/api/v1/transactions/TXN-MISSING1", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "Transaction not found"


class TestDashboard:

    def test_current_month_totals_and_recent(self, client, auth_headers):
        mid_month = datetime.now().replace(day=15, hour=12, minute=0, second=0, microsecond=0)
        create_transaction(client, auth_headers, 300000, "Salary", transaction_type="income",
                           date=mid_month.isoformat())
        for i in range(5):
            create_transaction(client, auth_headers, 1000, "Food",
                               date=(mid_month - timedelta(minutes=i + 1)).isoformat())
        create_transaction(client, auth_headers, 99999, "Rent",
                           date=(mid_month - timedelta(days=60)).isoformat())

        data = client.get("/api/v1/transactions/dashboard", headers=auth_headers).json()["data"]
        assert data["current_month_income"] == 300000
        assert data["current_month_expenses"] == 5000
        assert data["net_balance"] == 295000
        assert len(data["recent_transactions"]) == 5
        assert data["recent_transactions"][0]["amount"] == 300000
        assert 99999 not in [t["amount"] for t in data["recent_transactions"]]
