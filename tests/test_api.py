"""Tests for the HTTP API."""

import pytest

from conftest import MASTER_PASSWORD


def _add_transaction(client, headers, **overrides):
    body = {"kind": "expense", "amount": 50, "category": "food", "date": "2024-02-10", "description": "Lunch"}
    body.update(overrides)
    response = client.post("/api/transactions", json=body, headers=headers)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


class TestGate:
    """Requests without a valid device token are rejected."""

    def test_health_is_open(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.get_json() == {"status": "ok"}

    @pytest.mark.parametrize(
        "headers",
        [{}, {"Authorization": "Bearer dt_nope_123"}, {"Authorization": "Basic abc"}],
    )
    def test_protected_routes_require_token(self, client, headers):
        assert client.get("/api/transactions", headers=headers).status_code == 401
        assert client.get("/api/loans", headers=headers).status_code == 401
        assert client.get("/api/auth/devices", headers=headers).status_code == 401

    def test_revoked_token_is_rejected(self, client, auth_headers):
        assert client.get("/api/balance", headers=auth_headers).status_code == 200

        response = client.delete("/api/auth/devices/test-device", headers=auth_headers)
        assert response.status_code == 200

        assert client.get("/api/balance", headers=auth_headers).status_code == 401


class TestAuth:
    def test_wrong_password(self, client):
        response = client.post("/api/auth/master-password", json={"password": "x", "deviceId": "d1"})

        assert response.status_code == 401
        assert response.get_json() == {"success": False, "error": "Authentication failed"}

    def test_missing_device_id(self, client):
        response = client.post("/api/auth/master-password", json={"password": MASTER_PASSWORD})
        assert response.status_code == 400

    def test_device_id_from_header(self, client):
        response = client.post(
            "/api/auth/master-password",
            json={"password": MASTER_PASSWORD},
            headers={"X-Device-ID": "header-device", "User-Agent": "Mozilla/5.0 (iPad) Safari/604.1"},
        )
        assert response.status_code == 200
        token = response.get_json()["token"]

        devices = client.get("/api/auth/devices", headers={"Authorization": f"Bearer {token}"}).get_json()
        assert devices[0]["id"] == "header-device"
        assert devices[0]["name"] == "Safari on iPad"

    def test_validate_device(self, client, device_token):
        ok = client.post("/api/auth/validate-device", headers={"Authorization": f"Bearer {device_token}"})
        assert ok.status_code == 200
        assert ok.get_json() == {"valid": True}

        by_body = client.post("/api/auth/validate-device", json={"token": device_token})
        assert by_body.status_code == 200

        bad = client.post("/api/auth/validate-device", json={"token": "dt_bad"})
        assert bad.status_code == 401
        assert bad.get_json() == {"valid": False}

    def test_list_devices_hides_tokens(self, client, auth_headers, device_token):
        devices = client.get("/api/auth/devices", headers=auth_headers).get_json()

        assert [d["id"] for d in devices] == ["test-device"]
        assert devices[0]["name"] == "Test Laptop"
        assert device_token not in str(devices)

    def test_revoke_unknown_device(self, client, auth_headers):
        response = client.delete("/api/auth/devices/ghost", headers=auth_headers)
        assert response.status_code == 404

    def test_cleanup(self, client, auth_headers):
        response = client.post("/api/auth/devices/cleanup", json={"retentionDays": 30}, headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json() == {"deactivated": 0}

        bad = client.post("/api/auth/devices/cleanup", json={"retentionDays": "soon"}, headers=auth_headers)
        assert bad.status_code == 400


class TestTransactions:
    def test_crud(self, client, auth_headers):
        created = _add_transaction(client, auth_headers)
        assert created["amount"] == 50.0
        assert created["kind"] == "expense"
        assert created["date"] == "2024-02-10"
        assert "createdAt" in created

        listed = client.get("/api/transactions", headers=auth_headers).get_json()
        assert [t["id"] for t in listed] == [created["id"]]

        updated = client.put(
            f"/api/transactions/{created['id']}", json={"amount": "75.25"}, headers=auth_headers
        )
        assert updated.status_code == 200
        assert updated.get_json()["amount"] == 75.25
        assert updated.get_json()["category"] == "food"

        deleted = client.delete(f"/api/transactions/{created['id']}", headers=auth_headers)
        assert deleted.get_json() == {"success": True}
        assert client.get("/api/transactions", headers=auth_headers).get_json() == []

    def test_validation_errors(self, client, auth_headers):
        response = client.post(
            "/api/transactions",
            json={"kind": "expense", "amount": 10, "category": "salary", "date": "2024-01-01"},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert "salary" in response.get_json()["error"]

        response = client.post("/api/transactions", data="not json", headers=auth_headers)
        assert response.status_code == 400

    def test_unknown_transaction(self, client, auth_headers):
        assert client.put("/api/transactions/nope", json={"amount": 1}, headers=auth_headers).status_code == 404
        assert client.delete("/api/transactions/nope", headers=auth_headers).status_code == 404

    def test_filters(self, client, auth_headers):
        _add_transaction(client, auth_headers, kind="income", category="salary", amount=900, date="2024-01-01")
        _add_transaction(client, auth_headers, date="2024-02-01")

        incomes = client.get("/api/transactions/type/income", headers=auth_headers).get_json()
        assert [t["category"] for t in incomes] == ["salary"]

        february = client.get("/api/transactions?startDate=2024-02-01", headers=auth_headers).get_json()
        assert [t["date"] for t in february] == ["2024-02-01"]

        assert client.get("/api/transactions/type/gift", headers=auth_headers).status_code == 400

    def test_balance(self, client, auth_headers):
        _add_transaction(client, auth_headers, kind="income", category="salary", amount=1000, date="2024-01-05")
        _add_transaction(client, auth_headers, kind="income", category="salary", amount=1500, date="2024-02-05")
        _add_transaction(client, auth_headers, amount=100, date="2024-02-10")

        overview = client.get("/api/balance?today=2024-02-20", headers=auth_headers).get_json()

        assert overview["currentBalance"] == 2400.0
        assert overview["monthlyIncome"] == 1500.0
        assert overview["monthlyExpenses"] == 100.0
        assert overview["incomeTrend"]["label"] == "+50.0%"
        assert overview["expenseTrend"] == {"percentage": None, "isNew": True, "label": "New"}

    def test_statement_csv(self, client, auth_headers):
        _add_transaction(client, auth_headers, kind="income", category="salary", amount=100, date="2024-03-01",
                         description="Pay")
        _add_transaction(client, auth_headers, amount=40, date="2024-03-02", description='Say "cheese"')

        response = client.get("/api/transactions/csv", headers=auth_headers)
        assert response.status_code == 200
        assert response.mimetype == "text/csv"
        assert response.get_data(as_text=True) == (
            "Date,Description,Withdrawals,Deposits,Balance\n"
            '3/1/2024,"Pay",,100.00,100.00\n'
            '3/2/2024,"Say ""cheese""",40.00,,60.00\n'
        )

        download = client.get("/api/transactions/download/csv", headers=auth_headers)
        assert "attachment" in download.headers["Content-Disposition"]
        assert download.get_data(as_text=True) == response.get_data(as_text=True)

    def test_category_analytics(self, client, auth_headers):
        _add_transaction(client, auth_headers, amount=30)
        _add_transaction(client, auth_headers, amount=20, category="bills")

        rows = client.get("/api/analytics/categories", headers=auth_headers).get_json()
        assert rows == [{"category": "food", "amount": 30.0}, {"category": "bills", "amount": 20.0}]


class TestLoans:
    def _create(self, client, headers, **overrides):
        body = {"direction": "given", "principal": 5000, "counterpartyName": "Alice"}
        body.update(overrides)
        response = client.post("/api/loans", json=body, headers=headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()

    def test_payment_flow(self, client, auth_headers):
        loan = self._create(client, auth_headers)
        assert loan["remainingAmount"] == 5000.0
        assert loan["status"] == "active"

        first = client.post(
            f"/api/loans/{loan['id']}/payments", json={"amount": 2000, "paymentDate": "2024-01-01"},
            headers=auth_headers,
        )
        assert first.status_code == 201
        second = client.post(
            f"/api/loans/{loan['id']}/payments", json={"amount": 3000}, headers=auth_headers
        ).get_json()

        completed = client.get("/api/loans/status/completed", headers=auth_headers).get_json()
        assert [item["id"] for item in completed] == [loan["id"]]
        assert completed[0]["completedAt"] is not None

        response = client.delete(f"/api/loans/payments/{second['id']}", headers=auth_headers)
        assert response.status_code == 200
        reopened = response.get_json()["loan"]
        assert reopened["remainingAmount"] == 3000.0
        assert reopened["status"] == "active"
        assert reopened["completedAt"] is None

        payments = client.get(f"/api/loans/{loan['id']}/payments", headers=auth_headers).get_json()
        assert [p["amount"] for p in payments] == [2000.0]

    def test_update_rejects_balance_fields(self, client, auth_headers):
        loan = self._create(client, auth_headers)

        response = client.put(f"/api/loans/{loan['id']}", json={"remainingAmount": 0}, headers=auth_headers)
        assert response.status_code == 400

        response = client.put(
            f"/api/loans/{loan['id']}",
            json={"counterpartyName": "Alice B", "dueDate": "2025-01-31"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.get_json()["counterpartyName"] == "Alice B"
        assert response.get_json()["dueDate"] == "2025-01-31"
        assert response.get_json()["remainingAmount"] == 5000.0

    def test_default_and_summary(self, client, auth_headers):
        given = self._create(client, auth_headers)
        self._create(client, auth_headers, direction="taken", principal=800, counterpartyName="Bob")

        response = client.post(f"/api/loans/{given['id']}/default", headers=auth_headers)
        assert response.get_json()["status"] == "defaulted"

        summary = client.get("/api/loans/summary", headers=auth_headers).get_json()
        assert summary["totalLoansGiven"] == 5000.0
        assert summary["totalLoansTaken"] == 800.0
        assert summary["totalOutstanding"] == 0.0
        assert summary["totalOwed"] == 800.0

        taken = client.get("/api/loans/type/taken", headers=auth_headers).get_json()
        assert [item["counterpartyName"] for item in taken] == ["Bob"]

    def test_delete_loan(self, client, auth_headers):
        loan = self._create(client, auth_headers)
        client.post(f"/api/loans/{loan['id']}/payments", json={"amount": 10}, headers=auth_headers)

        assert client.delete(f"/api/loans/{loan['id']}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/loans/{loan['id']}/payments", headers=auth_headers).status_code == 404
        assert client.delete(f"/api/loans/{loan['id']}", headers=auth_headers).status_code == 404

    def test_invalid_loan(self, client, auth_headers):
        response = client.post("/api/loans", json={"direction": "given", "principal": -5}, headers=auth_headers)
        assert response.status_code == 400
        response = client.post("/api/loans/nope/payments", json={"amount": 5}, headers=auth_headers)
        assert response.status_code == 404


class TestMalformedInput:
    """Wrong-typed or out-of-range JSON fields are client errors, never 500s."""

    @pytest.fixture
    def loan_id(self, client, auth_headers):
        response = client.post(
            "/api/loans", json={"direction": "given", "principal": 100, "counterpartyName": "Alice"},
            headers=auth_headers,
        )
        return response.get_json()["id"]

    @pytest.mark.parametrize(
        "overrides",
        [
            {"category": 5},
            {"description": 7},
            {"kind": ["expense"]},
            {"amount": "1e30"},
            {"amount": 1e40},
            {"amount": "NaN"},
            {"amount": True},
            {"date": 5},
        ],
    )
    def test_transaction_fields(self, client, auth_headers, overrides):
        body = {"kind": "expense", "amount": 10, "category": "food", "date": "2024-01-01"}
        body.update(overrides)

        response = client.post("/api/transactions", json=body, headers=auth_headers)

        assert response.status_code == 400
        assert "error" in response.get_json()
        assert client.get("/api/transactions", headers=auth_headers).get_json() == []

    def test_transaction_update_fields(self, client, auth_headers):
        created = _add_transaction(client, auth_headers)

        for body in ({"description": 3}, {"amount": "9" * 40}, {"category": None, "kind": "income"}):
            response = client.put(f"/api/transactions/{created['id']}", json=body, headers=auth_headers)
            assert response.status_code == 400, body

    @pytest.mark.parametrize(
        "overrides",
        [
            {"counterpartyName": 5},
            {"counterpartyContact": 5},
            {"description": {"text": "x"}},
            {"principal": "1e40"},
            {"interestRate": "1e9"},
            {"remainingAmount": "1e40"},
        ],
    )
    def test_loan_fields(self, client, auth_headers, overrides):
        body = {"direction": "given", "principal": 100, "counterpartyName": "Alice"}
        body.update(overrides)

        response = client.post("/api/loans", json=body, headers=auth_headers)

        assert response.status_code == 400

    @pytest.mark.parametrize(
        "body",
        [{"description": 9}, {"counterpartyContact": 1}, {"interestRate": "lots"}, {"dueDate": 5}],
    )
    def test_loan_update_fields(self, client, auth_headers, loan_id, body):
        response = client.put(f"/api/loans/{loan_id}", json=body, headers=auth_headers)
        assert response.status_code == 400

    @pytest.mark.parametrize("body", [{"amount": "1e40"}, {"amount": 5, "description": 3}])
    def test_payment_fields(self, client, auth_headers, loan_id, body):
        response = client.post(f"/api/loans/{loan_id}/payments", json=body, headers=auth_headers)

        assert response.status_code == 400
        assert client.get(f"/api/loans/{loan_id}/payments", headers=auth_headers).get_json() == []

    @pytest.mark.parametrize("body", [{"defaulted": "false"}, {"defaulted": 0}, ["defaulted"]])
    def test_default_flag_must_be_boolean(self, client, auth_headers, loan_id, body):
        response = client.post(f"/api/loans/{loan_id}/default", json=body, headers=auth_headers)
        assert response.status_code == 400

    def test_default_flag_false_clears(self, client, auth_headers, loan_id):
        client.post(f"/api/loans/{loan_id}/default", json={"defaulted": True}, headers=auth_headers)

        response = client.post(f"/api/loans/{loan_id}/default", json={"defaulted": False}, headers=auth_headers)

        assert response.get_json()["status"] == "active"

    @pytest.mark.parametrize(
        "body, status",
        [
            ({"password": 1234, "deviceId": "D1"}, 401),
            ({"password": ["x"], "deviceId": "D1"}, 401),
            ({"password": MASTER_PASSWORD, "deviceId": 42}, 400),
            ({"password": MASTER_PASSWORD, "deviceId": "D1", "deviceName": 5}, 400),
        ],
    )
    def test_master_password_fields(self, client, body, status):
        response = client.post("/api/auth/master-password", json=body)
        assert response.status_code == status

    def test_non_string_token(self, client):
        response = client.post("/api/auth/validate-device", json={"token": 12345})
        assert response.status_code == 401

    @pytest.mark.parametrize(
        "body", [{"retentionDays": 10**9}, {"retentionDays": True}, {"retentionDays": -1}, [30]]
    )
    def test_cleanup_fields(self, client, auth_headers, body):
        response = client.post("/api/auth/devices/cleanup", json=body, headers=auth_headers)
        assert response.status_code == 400

    def test_timestamps_carry_utc_offset(self, client, auth_headers):
        created = _add_transaction(client, auth_headers)

        assert created["createdAt"].endswith("+00:00")
        devices = client.get("/api/auth/devices", headers=auth_headers).get_json()
        assert devices[0]["lastSeen"].endswith("+00:00")
