"""
Integration tests for the Transfer Ledger API
Tests end-to-end workflows using FastAPI TestClient
"""

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient

import transfer_ledger.api.system
from transfer_ledger.api import app
from transfer_ledger.api.system import LedgerSystem


@pytest.fixture
def client():
    """Create a test client backed by an in-memory ledger"""
    original_system = transfer_ledger.api.system.ledger_system
    transfer_ledger.api.system.ledger_system = LedgerSystem(use_sqlite=False)

    yield TestClient(app)

    transfer_ledger.api.system.ledger_system = original_system


@pytest.fixture
def parties(client):
    """One client and two bank accounts"""
    r = client.post("/clients", json={"name": "Alice Martin", "email": "alice@example.com"})
    assert r.status_code == 201
    client_id = r.json()["client_id"]

    account_ids = []
    for name, rib in [("Our Account", "FR76 0001"), ("Supplier", "FR76 0002")]:
        r = client.post("/companies", json={"name": name, "rib": rib})
        assert r.status_code == 201
        account_ids.append(r.json()["company_id"])

    return {"client_id": client_id, "ours": account_ids[0], "theirs": account_ids[1]}


def create_transfer(client, parties, transfer_type, amount, status="completed", **extra):
    if transfer_type == "incoming":
        debit, credit = parties["theirs"], parties["ours"]
    else:
        debit, credit = parties["ours"], parties["theirs"]
    payload = {
        "client_id": parties["client_id"],
        "debit_account_id": debit,
        "credit_account_id": credit,
        "amount": amount,
        "transfer_type": transfer_type,
        "status": status,
        **extra
    }
    return client.post("/transfers", json=payload)


class TestHealthEndpoints:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"


class TestTransferFlow:
    """End-to-end transfer tests"""

    def test_create_outgoing_with_explicit_rate(self, client, parties):
        r = create_transfer(client, parties, "outgoing", "1000", commission_percentage="5")
        assert r.status_code == 201

        transfer = r.json()["transfer"]
        assert Decimal(transfer["amount"]) == Decimal('1050')
        assert Decimal(transfer["net_amount"]) == Decimal('1000')
        assert Decimal(transfer["commission_amount"]) == Decimal('50')
        assert transfer["gross_amount"] == transfer["amount"]

    def test_default_rate_is_configured_rate(self, client, parties):
        r = create_transfer(client, parties, "outgoing", "200")
        assert r.status_code == 201
        assert Decimal(r.json()["transfer"]["commission_percentage"]) == Decimal('5')

    def test_incoming_has_no_commission(self, client, parties):
        r = create_transfer(client, parties, "incoming", "500")
        assert r.status_code == 201
        assert Decimal(r.json()["transfer"]["commission_amount"]) == Decimal('0')

    def test_invalid_amount(self, client, parties):
        r = create_transfer(client, parties, "outgoing", "-10")
        assert r.status_code == 400

    def test_ambiguous_amount_is_rejected(self, client, parties):
        r = create_transfer(client, parties, "outgoing", "1,500", commission_percentage="5")
        assert r.status_code == 400
        assert "1,500" in r.json()["detail"]
        assert client.get("/transfers").json()["count"] == 0

    def test_grouped_amount_is_accepted(self, client, parties):
        r = create_transfer(client, parties, "incoming", "1,500.25")
        assert r.status_code == 201
        assert Decimal(r.json()["transfer"]["amount"]) == Decimal('1500.25')

    def test_unknown_client(self, client, parties):
        r = create_transfer(client, {**parties, "client_id": "ghost"}, "incoming", "10")
        assert r.status_code == 400

    def test_missing_status(self, client, parties):
        r = client.post("/transfers", json={
            "client_id": parties["client_id"],
            "debit_account_id": parties["ours"],
            "credit_account_id": parties["theirs"],
            "amount": "10",
            "transfer_type": "incoming"
        })
        assert r.status_code == 422

    def test_get_transfer(self, client, parties):
        transfer_id = create_transfer(client, parties, "incoming", "500").json()["transfer_id"]

        r = client.get(f"/transfers/{transfer_id}")
        assert r.status_code == 200
        data = r.json()
        assert data["transfer"]["id"] == transfer_id
        assert data["client"]["name"] == "Alice Martin"

    def test_get_unknown_transfer(self, client):
        assert client.get("/transfers/ghost").status_code == 404

    def test_list_with_window(self, client, parties):
        create_transfer(client, parties, "incoming", "100", transfer_date="2024-03-31")
        create_transfer(client, parties, "incoming", "200", transfer_date="2024-04-01")

        r = client.get("/transfers", params={"start_date": "2024-03-01", "end_date": "2024-03-31"})
        assert r.status_code == 200
        data = r.json()
        assert data["count"] == 1
        assert data["period"] == "2024-03-01 → 2024-03-31"

        r = client.get("/transfers")
        assert r.json()["count"] == 2
        assert r.json()["period"] == "All data"

    def test_inverted_window(self, client):
        r = client.get("/transfers", params={"start_date": "2024-03-31", "end_date": "2024-03-01"})
        assert r.status_code == 400

    def test_status_flow(self, client, parties):
        transfer_id = create_transfer(client, parties, "incoming", "100", status="pending").json()["transfer_id"]

        r = client.post(f"/transfers/{transfer_id}/status", json={"status": "completed"})
        assert r.status_code == 200
        assert r.json()["status"] == "completed"

        r = client.post(f"/transfers/{transfer_id}/status", json={"status": "failed"})
        assert r.status_code == 409

    def test_update_note(self, client, parties):
        transfer_id = create_transfer(client, parties, "incoming", "100").json()["transfer_id"]

        r = client.patch(f"/transfers/{transfer_id}", json={"note": "rent"})
        assert r.status_code == 200
        assert r.json()["transfer"]["note"] == "rent"

    def test_remaining_balance(self, client, parties):
        parent_id = create_transfer(client, parties, "incoming", "500").json()["transfer_id"]
        create_transfer(client, parties, "outgoing", "200", commission_percentage="5",
                        parent_transfer_id=parent_id)
        create_transfer(client, parties, "outgoing", "25", status="pending",
                        commission_percentage="0", parent_transfer_id=parent_id)

        r = client.get(f"/transfers/{parent_id}/remaining-balance")
        assert r.status_code == 200
        assert Decimal(r.json()["remaining_balance"]) == Decimal('265')
        assert len(r.json()["children"]) == 2

    def test_delete_parent_with_children(self, client, parties):
        parent_id = create_transfer(client, parties, "incoming", "500").json()["transfer_id"]
        child_id = create_transfer(client, parties, "outgoing", "100",
                                   parent_transfer_id=parent_id).json()["transfer_id"]

        assert client.delete(f"/transfers/{parent_id}").status_code == 400
        assert client.delete(f"/transfers/{child_id}").status_code == 200
        assert client.delete(f"/transfers/{parent_id}").status_code == 200
        assert client.get(f"/transfers/{parent_id}").status_code == 404

    def test_preview(self, client):
        r = client.post("/transfers/preview", json={
            "amount": "1000", "transfer_type": "outgoing", "commission_percentage": "5"
        })
        assert r.status_code == 200
        assert Decimal(r.json()["gross"]) == Decimal('1050')

        r = client.post("/transfers/preview", json={"amount": "1000", "transfer_type": "incoming"})
        assert Decimal(r.json()["commission"]) == Decimal('0')

        r = client.post("/transfers/preview", json={"amount": "0", "transfer_type": "outgoing"})
        assert r.status_code == 400


class TestClientEndpoints:
    def test_client_statement(self, client, parties):
        create_transfer(client, parties, "incoming", "500")
        create_transfer(client, parties, "outgoing", "300", commission_percentage="5")

        r = client.get(f"/clients/{parties['client_id']}")
        assert r.status_code == 200
        data = r.json()
        assert Decimal(data["balance"]["net_balance"]) == Decimal('185')
        assert len(data["transfers"]) == 2
        assert len(data["incoming"]) == 1

    def test_list_clients_with_balances(self, client, parties):
        create_transfer(client, parties, "incoming", "500")

        r = client.get("/clients")
        assert r.status_code == 200
        entry = r.json()["clients"][0]
        assert Decimal(entry["balance"]["total_incoming"]) == Decimal('500')

    def test_invalid_email(self, client):
        r = client.post("/clients", json={"name": "Bob", "email": "nope"})
        assert r.status_code == 400

    def test_delete_client_with_transfers(self, client, parties):
        create_transfer(client, parties, "incoming", "500")
        assert client.delete(f"/clients/{parties['client_id']}").status_code == 400

    def test_unknown_client(self, client):
        assert client.get("/clients/ghost").status_code == 404


class TestCompanyEndpoints:
    def test_search(self, client, parties):
        r = client.get("/companies", params={"search": "supp"})
        assert r.status_code == 200
        assert [c["id"] for c in r.json()["companies"]] == [parties["theirs"]]

    def test_duplicate_rib(self, client, parties):
        r = client.post("/companies", json={"name": "Copy", "rib": "fr76 0001"})
        assert r.status_code == 400

    def test_update_company(self, client, parties):
        r = client.patch(f"/companies/{parties['ours']}", json={"name": "Main Account"})
        assert r.status_code == 200
        assert r.json()["company"]["name"] == "Main Account"


class TestCommissionRateEndpoints:
    def test_crud(self, client):
        r = client.post("/commission-rates", json={"rate": "2.5"})
        assert r.status_code == 201
        rate_id = r.json()["rate_id"]

        assert client.post("/commission-rates", json={"rate": "150"}).status_code == 400

        r = client.patch(f"/commission-rates/{rate_id}", json={"is_active": False})
        assert r.status_code == 200
        assert client.get("/commission-rates").json()["rates"] == []
        assert len(client.get("/commission-rates", params={"include_inactive": True}).json()["rates"]) == 1

        assert client.delete(f"/commission-rates/{rate_id}").status_code == 200
        assert client.delete(f"/commission-rates/{rate_id}").status_code == 404


class TestReportEndpoints:
    def test_dashboard(self, client, parties):
        create_transfer(client, parties, "incoming", "500", transfer_date="2024-03-10")
        create_transfer(client, parties, "outgoing", "300", commission_percentage="5",
                        transfer_date="2024-03-12")
        create_transfer(client, parties, "outgoing", "50", status="failed",
                        transfer_date="2024-03-13")

        r = client.get("/reports/dashboard", params={"start_date": "2024-03-01", "end_date": "2024-03-31"})
        assert r.status_code == 200
        data = r.json()
        assert data["currency"] == "EUR"
        assert Decimal(data["summary"]["net_balance"]) == Decimal('185')
        assert data["net_balance_display"] == "EUR 185.00"
        assert data["status_distribution"] == {"pending": 0, "completed": 2, "failed": 1}
        assert data["monthly_activity"][0]["month"] == "2024-03"

    def test_commissions(self, client, parties):
        create_transfer(client, parties, "outgoing", "300", commission_percentage="5")

        r = client.get("/reports/commissions")
        assert r.status_code == 200
        accounts = r.json()["accounts"]
        assert accounts[0]["company_id"] == parties["ours"]
        assert Decimal(accounts[0]["total_commissions"]) == Decimal('15')
