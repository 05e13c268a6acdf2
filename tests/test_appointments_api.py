import pytest

class TestAppointmentsAPI:

    def book(self, client, headers, doctor_id, date="2024-06-01", time="10:00", reason="checkup"):
        return client.post(
            "/api/v1/appointments",
            json={"doctor_id": doctor_id, "date": date, "time": time, "reason": reason},
            headers=headers
        )

    def test_scenario_book_complete_and_view_record(self, client, users, login):
        """alice books with drbob, drbob completes it with a record, carol sees nothing."""
        alice_headers = login("alice")
        drbob_headers = login("drbob")
        carol_headers = login("carol")

        response = self.book(client, alice_headers, users["drbob"].id)
        assert response.status_code == 201
        appointment = response.json()
        assert appointment["status"] == "Scheduled"
        assert appointment["patient_id"] == users["alice"].id
        assert appointment["doctor_name"] == "Dr. Bob Smith"

        response = client.post(
            f"/api/v1/appointments/{appointment['id']}/complete",
            json={"record": {"title": "Annual Physical", "notes": "All normal"}},
            headers=drbob_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "Completed"

        response = client.get("/api/v1/records", headers=alice_headers)
        assert response.status_code == 200
        records = response.json()
        assert len(records) == 1
        assert records[0]["date"] == "2024-06-01"
        assert records[0]["appointment_id"] == appointment["id"]
        assert records[0]["patient_name"] == "Alice Johnson"
        assert records[0]["doctor_name"] == "Dr. Bob Smith"

        response = client.get(
            "/api/v1/records",
            params={"patient_id": users["alice"].id},
            headers=carol_headers
        )
        assert response.status_code == 403

        response = client.get(f"/api/v1/records/{records[0]['id']}", headers=carol_headers)
        assert response.status_code == 403

    def test_list_appointments_sorted(self, client, users, login):
        headers = login("alice")
        for date, time in [("2024-05-03", "09:00"), ("2024-05-01", "14:00"), ("2024-05-02", "08:00")]:
            assert self.book(client, headers, users["drbob"].id, date, time).status_code == 201

        response = client.get("/api/v1/appointments", headers=headers)
        assert response.status_code == 200
        assert [a["date"] for a in response.json()] == ["2024-05-01", "2024-05-02", "2024-05-03"]

        response = client.get("/api/v1/appointments", headers=login("drbob"))
        assert [a["patient_name"] for a in response.json()] == ["Alice Johnson"] * 3

    def test_book_validation(self, client, users, login):
        headers = login("alice")
        response = self.book(client, headers, users["drbob"].id, date="2024-13-01")
        assert response.status_code == 422

        response = client.post(
            "/api/v1/appointments",
            json={"doctor_id": users["drbob"].id, "date": "2024-06-01"},
            headers=headers
        )
        assert response.status_code == 422

    def test_cancel_flow(self, client, users, login):
        alice_headers = login("alice")
        appointment = self.book(client, alice_headers, users["drbob"].id).json()
        url = f"/api/v1/appointments/{appointment['id']}/cancel"

        response = client.post(url, headers=login("drbob"))
        assert response.status_code == 403

        response = client.post(url, headers=alice_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "Cancelled"

        # Re-cancelling is a no-op
        response = client.post(url, headers=alice_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "Cancelled"

    def test_complete_requires_doctor_and_scheduled(self, client, users, login):
        alice_headers = login("alice")
        drbob_headers = login("drbob")
        appointment = self.book(client, alice_headers, users["drbob"].id).json()
        url = f"/api/v1/appointments/{appointment['id']}/complete"

        assert client.post(url, headers=alice_headers).status_code == 403
        assert client.post(url, headers=drbob_headers).status_code == 200
        assert client.post(url, headers=drbob_headers).status_code == 409

    def test_blank_record_does_not_complete_appointment(self, client, users, login):
        alice_headers = login("alice")
        drbob_headers = login("drbob")
        appointment = self.book(client, alice_headers, users["drbob"].id).json()

        response = client.post(
            f"/api/v1/appointments/{appointment['id']}/complete",
            json={"record": {"title": "   ", "notes": "All normal"}},
            headers=drbob_headers
        )
        assert response.status_code == 422

        response = client.get(f"/api/v1/appointments/{appointment['id']}", headers=alice_headers)
        assert response.json()["status"] == "Scheduled"

    def test_record_for_scheduled_appointment_is_rejected(self, client, users, login):
        alice_headers = login("alice")
        appointment = self.book(client, alice_headers, users["drbob"].id).json()

        response = client.post(
            "/api/v1/records",
            json={"appointment_id": appointment["id"], "title": "Annual Physical", "notes": "All normal"},
            headers=login("drbob")
        )
        assert response.status_code == 409

        response = client.post(f"/api/v1/appointments/{appointment['id']}/cancel", headers=alice_headers)
        assert response.json()["status"] == "Cancelled"
        assert client.get("/api/v1/records", headers=alice_headers).json() == []

    def test_outsider_cannot_read_appointment(self, client, users, login):
        appointment = self.book(client, login("alice"), users["drbob"].id).json()

        response = client.get(f"/api/v1/appointments/{appointment['id']}", headers=login("carol"))
        assert response.status_code == 403

    def test_unknown_appointment(self, client, login):
        response = client.get("/api/v1/appointments/missing", headers=login("alice"))
        assert response.status_code == 404
        assert "missing" in response.json()["detail"]

    def test_create_record_endpoint(self, client, users, login):
        drbob_headers = login("drbob")
        appointment = self.book(client, login("alice"), users["drbob"].id).json()
        client.post(f"/api/v1/appointments/{appointment['id']}/complete", headers=drbob_headers)

        payload = {
            "appointment_id": appointment["id"],
            "title": "Annual Physical",
            "notes": "All normal",
            "prescription": "Vitamin D",
        }
        response = client.post("/api/v1/records", json=payload, headers=drbob_headers)
        assert response.status_code == 201
        assert response.json()["prescription"] == "Vitamin D"

        response = client.post("/api/v1/records", json=payload, headers=drbob_headers)
        assert response.status_code == 422

        response = client.get(f"/api/v1/appointments/{appointment['id']}/records", headers=drbob_headers)
        assert len(response.json()) == 1

    def test_delete_appointment(self, client, users, login):
        alice_headers = login("alice")
        appointment = self.book(client, alice_headers, users["drbob"].id).json()
        url = f"/api/v1/appointments/{appointment['id']}"

        assert client.delete(url, headers=login("drbob")).status_code == 403
        assert client.delete(url, headers=alice_headers).status_code == 204
        assert client.get(url, headers=alice_headers).status_code == 404

class TestUsersAndProfilesAPI:

    def test_doctor_roster(self, client, login):
        response = client.get("/api/v1/users/doctors", headers=login("alice"))
        assert response.status_code == 200
        assert [d["username"] for d in response.json()] == ["drbob", "drlee"]

    def test_patient_roster_is_for_doctors(self, client, login):
        assert client.get("/api/v1/users/patients", headers=login("alice")).status_code == 403

        response = client.get("/api/v1/users/patients", headers=login("drbob"))
        assert response.status_code == 200
        assert [p["username"] for p in response.json()] == ["alice", "carol"]

    def test_profile_round_trip(self, client, users, login):
        alice_headers = login("alice")

        response = client.put("/api/v1/profiles/me", json={"name": "Alice J."}, headers=alice_headers)
        assert response.status_code == 200
        assert response.json()["id"] == users["alice"].id

        profile_url = f"/api/v1/profiles/{users['alice'].id}"
        assert client.get(profile_url, headers=login("drbob")).json()["name"] == "Alice J."
        assert client.get(profile_url, headers=login("carol")).status_code == 403

        assert client.delete("/api/v1/profiles/me", headers=alice_headers).status_code == 200
        assert client.get(profile_url, headers=alice_headers).status_code == 404

class TestServiceEndpoints:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] == "sqlite"
        assert "X-Process-Time" in response.headers

    def test_info(self, client):
        response = client.get("/api/v1/info")
        assert response.json()["endpoints"]["appointments"] == "/api/v1/appointments"

if __name__ == "__main__":
    pytest.main([__file__])
