"""
Tests for the job application endpoints: validation, ownership, filtering
and the create/read/update/delete cycle.
"""
import pytest

from jobtracker.auth.models import User
from jobtracker.models import JobApplication


ACME = {"company": "Acme", "position": "Engineer", "status": "applied"}


def create(client, headers, **fields):
    body = dict(ACME)
    body.update(fields)
    response = client.post("/api/jobs", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


# =============================================================================
# Create & Validation
# =============================================================================


class TestCreateJob:

    def test_round_trip_fields_match(self, client, alice):
        created = create(client, alice)

        response = client.get(f"/api/jobs/{created['id']}", headers=alice)

        assert response.status_code == 200
        fetched = response.json()
        assert fetched["company"] == "Acme"
        assert fetched["position"] == "Engineer"
        assert fetched["status"] == "applied"
        assert fetched == created

    def test_defaults_status_and_applied_date(self, client, alice):
        response = client.post("/api/jobs", json={"company": "Acme", "position": "Engineer"}, headers=alice)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "applied"
        assert data["applied_date"] is not None
        assert data["location"] is None
        assert data["notes"] is None

    def test_accepts_camel_case_applied_date(self, client, alice):
        job = create(client, alice, appliedDate="2024-03-01")
        assert job["applied_date"] == "2024-03-01"

    def test_owner_is_the_caller(self, client, app, alice):
        job = create(client, alice, user_id=999)

        db = app.state.session_factory()
        try:
            owner = db.query(User).filter(User.email == "alice@example.com").first()
            stored = db.get(JobApplication, job["id"])
            assert stored.user_id == owner.id
        finally:
            db.close()

    @pytest.mark.parametrize("field", ["company", "position"])
    @pytest.mark.parametrize("value", ["", "   "])
    def test_empty_required_field_is_rejected(self, client, alice, field, value):
        body = dict(ACME)
        body[field] = value

        response = client.post("/api/jobs", json=body, headers=alice)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Validation error"
        assert any(field in message for message in data["messages"])

    def test_missing_fields_are_reported_together(self, client, alice):
        response = client.post("/api/jobs", json={"status": "applied"}, headers=alice)

        assert response.status_code == 400
        messages = response.json()["messages"]
        assert len(messages) == 2
        assert any(m.startswith("company") for m in messages)
        assert any(m.startswith("position") for m in messages)

    def test_unknown_status_is_rejected(self, client, alice):
        response = client.post("/api/jobs", json={**ACME, "status": "ghosted"}, headers=alice)

        assert response.status_code == 400
        assert any(m.startswith("status") for m in response.json()["messages"])

    def test_malformed_url_is_rejected(self, client, alice):
        response = client.post("/api/jobs", json={**ACME, "url": "not a url"}, headers=alice)

        assert response.status_code == 400

    def test_requires_authentication(self, client):
        response = client.post("/api/jobs", json=ACME)

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["error"] == "Authentication required"


# =============================================================================
# Listing
# =============================================================================


class TestListJobs:

    def test_status_filter_returns_only_matching_job(self, client, alice):
        create(client, alice, company="A", status="applied")
        interview = create(client, alice, company="B", status="interview")
        create(client, alice, company="C", status="rejected")

        response = client.get("/api/jobs?status=interview", headers=alice)

        assert response.status_code == 200
        assert [job["id"] for job in response.json()] == [interview["id"]]

    def test_sort_by_date_newest_first(self, client, alice):
        create(client, alice, company="Old", applied_date="2024-01-01")
        create(client, alice, company="New", applied_date="2024-06-01")
        create(client, alice, company="Mid", applied_date="2024-03-01")

        response = client.get("/api/jobs?sort_by=date", headers=alice)

        assert [job["company"] for job in response.json()] == ["New", "Mid", "Old"]

    def test_sort_ascending(self, client, alice):
        create(client, alice, company="Old", applied_date="2024-01-01")
        create(client, alice, company="New", applied_date="2024-06-01")

        response = client.get("/api/jobs?sort_by=applied_date&sort_order=asc", headers=alice)

        assert [job["company"] for job in response.json()] == ["Old", "New"]

    def test_search_matches_company_position_and_notes(self, client, alice):
        create(client, alice, company="Globex", position="Designer")
        create(client, alice, company="Initech", position="Engineer", notes="referral from Globex alum")
        create(client, alice, company="Hooli", position="PM")

        response = client.get("/api/jobs?search=globex", headers=alice)

        assert sorted(job["company"] for job in response.json()) == ["Globex", "Initech"]

    def test_invalid_filter_values_are_rejected(self, client, alice):
        assert client.get("/api/jobs?status=maybe", headers=alice).status_code == 400
        assert client.get("/api/jobs?sort_by=salary", headers=alice).status_code == 400

    def test_stats_counts_every_status(self, client, alice):
        create(client, alice, status="applied")
        create(client, alice, status="applied")
        create(client, alice, status="rejected")

        response = client.get("/api/jobs/stats", headers=alice)

        assert response.json() == {
            "total": 3,
            "by_status": {"applied": 2, "interview": 0, "rejected": 1},
        }


# =============================================================================
# Ownership
# =============================================================================


class TestOwnership:

    def test_other_users_jobs_are_invisible(self, client, alice, bob):
        job = create(client, alice)

        assert client.get("/api/jobs", headers=bob).json() == []
        assert client.get(f"/api/jobs/{job['id']}", headers=bob).status_code == 404
        assert client.get("/api/jobs/stats", headers=bob).json()["total"] == 0

    def test_update_by_other_user_is_forbidden(self, client, alice, bob):
        job = create(client, alice)

        put = client.put(f"/api/jobs/{job['id']}", json={**ACME, "company": "Hacked"}, headers=bob)
        patch = client.patch(f"/api/jobs/{job['id']}", json={"status": "rejected"}, headers=bob)

        assert put.status_code == 403
        assert patch.status_code == 403
        assert put.json()["error"] == "Forbidden"
        assert client.get(f"/api/jobs/{job['id']}", headers=alice).json() == job

    def test_delete_by_other_user_is_forbidden(self, client, alice, bob):
        job = create(client, alice)

        response = client.delete(f"/api/jobs/{job['id']}", headers=bob)

        assert response.status_code == 403
        assert client.get(f"/api/jobs/{job['id']}", headers=alice).status_code == 200


# =============================================================================
# Update & Delete
# =============================================================================


class TestUpdateJob:

    def test_put_replaces_fields(self, client, alice):
        job = create(client, alice, location="Berlin", notes="first call", applied_date="2024-02-02")

        response = client.put(
            f"/api/jobs/{job['id']}",
            json={"company": "Acme Corp", "position": "Senior Engineer", "status": "interview"},
            headers=alice,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["company"] == "Acme Corp"
        assert data["position"] == "Senior Engineer"
        assert data["status"] == "interview"
        assert data["location"] is None
        assert data["notes"] is None
        assert data["applied_date"] == "2024-02-02"

    def test_put_applies_same_validation(self, client, alice):
        job = create(client, alice)

        response = client.put(f"/api/jobs/{job['id']}", json={"company": "", "position": "Engineer"}, headers=alice)

        assert response.status_code == 400
        assert client.get(f"/api/jobs/{job['id']}", headers=alice).json()["company"] == "Acme"

    def test_patch_changes_only_given_fields(self, client, alice):
        job = create(client, alice, location="Remote")

        response = client.patch(f"/api/jobs/{job['id']}", json={"status": "interview"}, headers=alice)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "interview"
        assert data["location"] == "Remote"
        assert data["company"] == "Acme"

    @pytest.mark.parametrize("body", [{"company": ""}, {"position": None}, {"status": None}])
    def test_patch_rejects_clearing_required_fields(self, client, alice, body):
        job = create(client, alice)

        response = client.patch(f"/api/jobs/{job['id']}", json=body, headers=alice)

        assert response.status_code == 400

    def test_update_nonexistent_job_is_404(self, client, alice):
        response = client.put("/api/jobs/9999", json=ACME, headers=alice)

        assert response.status_code == 404


class TestDeleteJob:

    def test_delete_returns_confirmation(self, client, alice):
        job = create(client, alice)

        response = client.delete(f"/api/jobs/{job['id']}", headers=alice)

        assert response.status_code == 200
        assert response.json()["message"] == "Job application deleted successfully"
        assert client.get(f"/api/jobs/{job['id']}", headers=alice).status_code == 404

    def test_delete_nonexistent_job_is_404(self, client, alice):
        response = client.delete("/api/jobs/424242", headers=alice)

        assert response.status_code == 404
        assert response.json()["error"] == "Not found"

    @pytest.mark.parametrize("job_id", ["99999999999999999999", "-5", "0"])
    def test_out_of_range_id_is_404(self, client, alice, job_id):
        path = f"/api/jobs/{job_id}"

        assert client.delete(path, headers=alice).status_code == 404
        assert client.get(path, headers=alice).status_code == 404
        assert client.put(path, json=ACME, headers=alice).status_code == 404
        assert client.patch(path, json={"status": "interview"}, headers=alice).status_code == 404
