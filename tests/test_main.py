"""Tests for app-level endpoints and middleware."""


class TestAppSurface:
    """Tests for health checks, headers and validation errors."""

    def test_root(self, client):
        assert client.get("/").json()["status"] == "ok"

    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["payments_configured"] is True

    def test_security_headers(self, client, doctor):
        response = client.get(f"/doctors/{doctor.id}")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Cache-Control"] == "no-store"

    def test_health_skips_security_headers(self, client):
        assert "X-Frame-Options" not in client.get("/health").headers

    def test_validation_errors_are_json(self, client, doctor, doctor_profile, headers_for):
        """Body validation failures come back as a 422 list of errors."""
        response = client.put(
            "/doctors/me/schedule",
            json={"rules": [{"day_of_week": 1, "start_time": "10:00", "end_time": "09:00"}]},
            headers=headers_for(doctor_profile),
        )
        assert response.status_code == 422
        assert isinstance(response.json()["detail"], list)
