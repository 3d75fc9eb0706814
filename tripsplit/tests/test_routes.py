"""
HTTP tests for the trip, expense and settlement routes.
"""
import pytest


def create_trip(client, headers, name="Hokkaido"):
    response = client.post("/trips/", json={"name": name}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


@pytest.mark.integration
class TestAuth:

    def test_missing_token(self, client):
        response = client.get("/trips/")
        assert response.status_code == 422

    def test_invalid_token(self, client):
        response = client.get("/trips/", headers={"access-token": "not-a-jwt"})
        assert response.status_code == 401

    def test_bearer_prefix_accepted(self, client, auth_headers):
        token = auth_headers("alice")["access-token"]
        response = client.get("/trips/", headers={"access-token": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json() == []


@pytest.mark.integration
class TestTripRoutes:

    def test_create_and_join(self, client, auth_headers):
        alice = auth_headers("alice", "Alice")
        bob = auth_headers("bob", "Bob")

        trip = create_trip(client, alice)
        assert len(trip["hash_code"]) == 6

        response = client.post(f"/trips/join/{trip['hash_code']}", headers=bob)
        assert response.status_code == 200

        response = client.get(f"/trips/{trip['hash_code']}", headers=bob)
        assert response.status_code == 200
        members = response.json()["members"]
        assert [(m["display_name"], m["role"]) for m in members] == [("Alice", "admin"), ("Bob", "member")]

    def test_invalid_date_range(self, client, auth_headers):
        response = client.post(
            "/trips/",
            json={"name": "Backwards", "start_date": "2024-06-10", "end_date": "2024-06-01"},
            headers=auth_headers("alice"),
        )
        assert response.status_code == 422

    def test_non_member_forbidden(self, client, auth_headers):
        trip = create_trip(client, auth_headers("alice"))
        response = client.get(f"/trips/{trip['id']}", headers=auth_headers("mallory"))
        assert response.status_code == 403

    def test_unknown_trip(self, client, auth_headers):
        response = client.get("/trips/zzzzzz", headers=auth_headers("alice"))
        assert response.status_code == 404

    def test_virtual_member_and_removal(self, client, auth_headers):
        alice = auth_headers("alice", "Alice")
        trip = create_trip(client, alice)

        response = client.post(
            f"/trips/{trip['id']}/members/virtual", json={"display_name": "Grandpa"}, headers=alice
        )
        assert response.status_code == 200
        virtual = response.json()
        assert virtual["is_virtual"] is True

        response = client.delete(f"/trips/{trip['id']}/members/{virtual['user_id']}", headers=alice)
        assert response.status_code == 200
        assert response.json()["warning"] is None

        response = client.get(f"/trips/{trip['id']}/members", headers=alice)
        assert [m["user_id"] for m in response.json()] == ["alice"]

    def test_duplicate_display_name_rejected(self, client, auth_headers):
        alice = auth_headers("alice", "Bob")
        trip = create_trip(client, alice)

        response = client.post(
            f"/trips/{trip['id']}/members/virtual", json={"display_name": "Bob"}, headers=alice
        )
        assert response.status_code == 400

        response = client.post(f"/trips/join/{trip['hash_code']}", headers=auth_headers("bob", "BOB"))
        assert response.status_code == 400

        response = client.get(f"/trips/{trip['id']}/members", headers=alice)
        assert [m["display_name"] for m in response.json()] == ["Bob"]

    def test_update_with_null_name(self, client, auth_headers):
        alice = auth_headers("alice")
        trip = create_trip(client, alice)

        response = client.put(f"/trips/{trip['id']}", json={"name": None}, headers=alice)
        assert response.status_code == 422

        response = client.put(f"/trips/{trip['id']}", json={"description": "ski week"}, headers=alice)
        assert response.status_code == 200
        assert response.json()["name"] == "Hokkaido"

    def test_delete_trip(self, client, auth_headers):
        alice = auth_headers("alice")
        trip = create_trip(client, alice)

        response = client.delete(f"/trips/{trip['id']}", headers=alice)
        assert response.status_code == 200
        assert client.get("/trips/", headers=alice).json() == []


@pytest.mark.integration
class TestExpenseAndSettlementRoutes:

    @pytest.fixture
    def trip(self, client, auth_headers):
        alice = auth_headers("alice", "Alice")
        trip = create_trip(client, alice)
        for user_id, name in (("bob", "Bob"), ("carol", "Carol")):
            response = client.post(f"/trips/join/{trip['hash_code']}", headers=auth_headers(user_id, name))
            assert response.status_code == 200
        return trip

    def add_expense(self, client, headers, trip_id, payer_id, amount, split_with):
        response = client.post(
            f"/expenses/trips/{trip_id}",
            json={
                "payer_id": payer_id,
                "original_amount": amount,
                "currency": "TWD",
                "description": "shared",
                "date": "2024-05-01",
                "split_with": split_with,
            },
            headers=headers,
        )
        assert response.status_code == 200, response.text
        return response.json()

    def test_settlement_report(self, client, auth_headers, trip):
        alice = auth_headers("alice", "Alice")
        self.add_expense(client, alice, trip["id"], "alice", 100, ["alice", "bob", "carol"])

        response = client.get(f"/settlements/trips/{trip['hash_code']}", headers=auth_headers("bob"))

        assert response.status_code == 200
        report = response.json()
        assert set(report) == {"balances", "transactions", "total_expenses"}
        assert float(report["total_expenses"]) == 100.0
        assert [b["display_name"] for b in report["balances"]] == ["Alice", "Bob", "Carol"]
        assert [float(b["balance"]) for b in report["balances"]] == [66.66, -33.33, -33.33]
        assert [(t["from"], t["to"], float(t["amount"])) for t in report["transactions"]] == [
            ("Bob", "Alice", 33.33),
            ("Carol", "Alice", 33.33),
        ]

    def test_expense_listing_includes_splits(self, client, auth_headers, trip):
        alice = auth_headers("alice", "Alice")
        created = self.add_expense(client, alice, trip["id"], "bob", 30, ["alice", "bob"])
        assert created["payer_name"] == "Bob"
        assert float(created["amount"]) == 30.0

        response = client.get(f"/expenses/trips/{trip['id']}", headers=alice)
        assert response.status_code == 200
        expenses = response.json()
        assert len(expenses) == 1
        splits = {s["user_id"]: float(s["share_amount"]) for s in expenses[0]["splits"]}
        assert splits == {"alice": 15.0, "bob": 15.0}

    def test_update_and_delete_expense(self, client, auth_headers, trip):
        alice = auth_headers("alice", "Alice")
        expense = self.add_expense(client, alice, trip["id"], "alice", 30, ["bob", "carol"])

        response = client.put(f"/expenses/{expense['id']}", json={"original_amount": 50}, headers=alice)
        assert response.status_code == 200
        assert float(response.json()["amount"]) == 50.0

        response = client.delete(f"/expenses/{expense['id']}", headers=auth_headers("mallory"))
        assert response.status_code == 403

        response = client.delete(f"/expenses/{expense['id']}", headers=alice)
        assert response.status_code == 200
        assert client.get(f"/expenses/trips/{trip['id']}", headers=alice).json() == []

    def test_expense_validation(self, client, auth_headers, trip):
        alice = auth_headers("alice", "Alice")
        response = client.post(
            f"/expenses/trips/{trip['id']}",
            json={
                "payer_id": "alice",
                "original_amount": -5,
                "currency": "TWD",
                "description": "refund",
                "date": "2024-05-01",
                "split_with": ["alice"],
            },
            headers=alice,
        )
        assert response.status_code == 422

        response = client.post(
            f"/expenses/trips/{trip['id']}",
            json={
                "payer_id": "alice",
                "original_amount": 5,
                "currency": "GBP",
                "description": "tea",
                "date": "2024-05-01",
                "split_with": ["alice"],
            },
            headers=alice,
        )
        assert response.status_code == 422

    def test_amount_rounding_to_zero(self, client, auth_headers, trip):
        alice = auth_headers("alice", "Alice")
        response = client.post(
            f"/expenses/trips/{trip['id']}",
            json={
                "payer_id": "alice",
                "original_amount": "0.01",
                "currency": "JPY",
                "exchange_rate": "0.1",
                "description": "gum",
                "date": "2024-05-01",
                "split_with": ["alice", "bob"],
            },
            headers=alice,
        )
        assert response.status_code == 400
        assert client.get(f"/expenses/trips/{trip['id']}", headers=alice).json() == []

    def test_strict_mode_conflict(self, client, auth_headers, trip, monkeypatch):
        from tripsplit.core.config import settings

        alice = auth_headers("alice", "Alice")
        self.add_expense(client, alice, trip["id"], "alice", 90, ["alice", "bob", "carol"])
        response = client.delete(f"/trips/{trip['id']}/members/carol", headers=alice)
        assert response.json()["warning"] is not None

        response = client.get(f"/settlements/trips/{trip['id']}", headers=alice)
        assert response.status_code == 200
        assert [(t["from"], t["to"]) for t in response.json()["transactions"]] == [("Bob", "Alice")]

        monkeypatch.setattr(settings, "STRICT_ZERO_SUM", True)
        response = client.get(f"/settlements/trips/{trip['id']}", headers=alice)
        assert response.status_code == 409
        assert "not zero-sum" in response.json()["detail"]


@pytest.mark.integration
def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] in ("healthy", "degraded")
