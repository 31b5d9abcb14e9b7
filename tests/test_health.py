"""
Test suite for health endpoints and the error envelope.
"""


class TestHealth:
    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_detailed_health(self, client):
        response = client.get("/api/v1/health/detailed")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["checks"]["database"]["status"] == "healthy"
        assert body["checks"]["storage"]["status"] == "configured"


class TestErrorEnvelope:
    def test_unknown_route(self, client):
        response = client.get("/api/v1/nothing-here")

        assert response.status_code == 404
        assert response.json() == {"statusCode": 404, "message": "Not Found", "success": False}

    def test_validation_error_is_400(self, client):
        response = client.get("/api/v1/jobs/not-a-number")

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["statusCode"] == 400


class TestRequestId:
    def test_generated_when_missing(self, client):
        response = client.get("/health")

        assert len(response.headers["X-Request-ID"]) == 12

    def test_incoming_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "trace-abc-123"})

        assert response.headers["X-Request-ID"] == "trace-abc-123"

    def test_error_responses_carry_id(self, client):
        response = client.get("/api/v1/orders/1")

        assert response.status_code == 401
        assert "X-Request-ID" in response.headers
