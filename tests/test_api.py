from decimal import Decimal

from conftest import TEST_PASSWORD


class TestAuthEndpoints:

    def test_login_returns_token_pair(self, client, seed):
        response = client.post("/auth/login", data={"username": "frontdesk", "password": TEST_PASSWORD})
        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["access_token"]
        assert body["refresh_token"]

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.status_code == 200
        assert me.json()["username"] == "frontdesk"
        assert "password_hash" not in me.json()

    def test_bad_password_is_401(self, client, seed):
        response = client.post("/auth/login", data={"username": "frontdesk", "password": "nope"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid username or password."

    def test_refresh_token_cannot_be_used_as_access(self, client, seed):
        tokens = client.post("/auth/login", data={"username": "frontdesk", "password": TEST_PASSWORD}).json()
        response = client.get("/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
        assert response.status_code == 401

        refreshed = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert refreshed.status_code == 200
        assert refreshed.json()["access_token"]

    def test_missing_token_is_401(self, client, seed):
        assert client.get("/rooms").status_code == 401


class TestAuthorization:

    def test_staff_cannot_create_rooms(self, client, seed, auth_headers):
        response = client.post(
            "/rooms", json={"room_name": "Room 301", "room_code": "301"}, headers=auth_headers(seed.staff_id)
        )
        assert response.status_code == 403

    def test_staff_pinned_to_own_branch(self, client, seed, auth_headers):
        response = client.get(f"/rooms?branch_id={seed.other_branch_id}", headers=auth_headers(seed.staff_id))
        assert response.status_code == 403

        response = client.get("/rooms", headers=auth_headers(seed.staff_id))
        assert response.status_code == 200
        assert {room["room_code"] for room in response.json()} == {"101", "102"}

    def test_sysad_must_name_a_tenant(self, client, seed, auth_headers):
        response = client.get(f"/rooms?branch_id={seed.branch_id}", headers=auth_headers(seed.sysad_id))
        assert response.status_code == 400

    def test_housekeeping_cannot_check_in_guests(self, client, seed, auth_headers):
        response = client.post(
            "/reservations/walk-in",
            json={"room_id": seed.room_id, "client_name": "Guest", "selected_rate_id": seed.rate_id},
            headers=auth_headers(seed.housekeeper_id),
        )
        assert response.status_code == 403


class TestRoomEndpoints:

    def test_duplicate_room_code_is_409(self, client, seed, auth_headers):
        response = client.post(
            f"/rooms?branch_id={seed.branch_id}",
            json={"room_name": "Copy", "room_code": "101"},
            headers=auth_headers(seed.admin_id),
        )
        assert response.status_code == 409

    def test_dirty_without_notes_is_422(self, client, seed, auth_headers):
        response = client.put(
            f"/rooms/{seed.room_id}/cleaning-status",
            json={"cleaning_status": "dirty"},
            headers=auth_headers(seed.housekeeper_id),
        )
        assert response.status_code == 422

    def test_cleaning_status_update(self, client, seed, auth_headers):
        headers = auth_headers(seed.housekeeper_id)
        response = client.put(
            f"/rooms/{seed.room_id}/cleaning-status",
            json={"cleaning_status": "out_of_order", "notes": "Broken AC"},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["room"]["cleaning_status"] == "out_of_order"

        logs = client.get(f"/rooms/{seed.room_id}/cleaning-logs", headers=headers).json()
        assert [log["notes"] for log in logs] == ["Broken AC"]


class TestStayOverHttp:

    def test_walk_in_then_checkout(self, client, seed, auth_headers):
        headers = auth_headers(seed.staff_id)
        created = client.post(
            "/reservations/walk-in",
            json={"room_id": seed.room_id, "client_name": "Walk-in Guest", "selected_rate_id": seed.rate_id},
            headers=headers,
        )
        assert created.status_code == 201
        body = created.json()
        transaction_id = body["transaction"]["id"]
        assert body["transaction"]["status"] == "checked_in"
        assert body["room"]["is_available"] == "occupied"

        active = client.get(f"/rooms/{seed.room_id}/active-transaction", headers=headers).json()
        assert active["id"] == transaction_id

        checkout = client.post(
            f"/reservations/{transaction_id}/checkout/{seed.room_id}",
            json={"tender_amount": "500.00", "client_payment_method": "cash"},
            headers=headers,
        )
        assert checkout.status_code == 200
        tx = checkout.json()["transaction"]
        assert tx["status"] == "checked_out"
        assert tx["is_paid"] == "paid"
        assert Decimal(tx["total_amount"]) == Decimal("300.00")
        assert checkout.json()["room"]["cleaning_status"] == "inspection"

        again = client.post(
            f"/reservations/{transaction_id}/checkout/{seed.room_id}",
            json={"tender_amount": "500.00"},
            headers=headers,
        )
        assert again.status_code == 409

    def test_unknown_transaction_is_404(self, client, seed, auth_headers):
        response = client.get("/reservations/9999", headers=auth_headers(seed.staff_id))
        assert response.status_code == 404


class TestSupportEndpoints:

    def test_admin_notifies_branch(self, client, seed, auth_headers):
        created = client.post(
            "/notifications",
            json={"message": "Inspection at noon", "target_branch_id": seed.branch_id},
            headers=auth_headers(seed.admin_id),
        )
        assert created.status_code == 201

        inbox = client.get("/notifications/branch", headers=auth_headers(seed.staff_id))
        assert inbox.status_code == 200
        assert [n["message"] for n in inbox.json()] == ["Inspection at noon"]

    def test_ticket_flow(self, client, seed, auth_headers):
        created = client.post(
            "/tickets",
            json={"subject": "Printer", "description": "Out of paper"},
            headers=auth_headers(seed.staff_id),
        )
        assert created.status_code == 201
        ticket = created.json()["ticket"]
        assert ticket["ticket_code"] == "TASK-AAA000000"

        comment = client.post(
            f"/tickets/{ticket['id']}/comments", json={"body": "On it"}, headers=auth_headers(seed.sysad_id)
        )
        assert comment.status_code == 200
        assert comment.json()["ticket"]["comments"][0]["body"] == "On it"
