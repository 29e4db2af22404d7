"""Tests for health check and info endpoints."""

import pytest
from datetime import datetime


@pytest.mark.unit
class TestHealthCheck:
    """Test health check endpoint."""
    
    def test_health_check_returns_200(self, client):
        """Test health check returns 200."""
        response = client.get("/api/health")
        assert response.status_code == 200
    
    def test_health_check_contains_required_fields(self, client):
        """Test health check response contains required fields."""
        response = client.get("/api/health")
        data = response.get_json()
        
        assert "status" in data
        assert "timestamp" in data
        assert "environment" in data
        assert "database" in data
        assert data["status"] == "healthy"
        assert data["database"] == "connected"
    
    def test_health_check_timestamp_format(self, client):
        """Test health check timestamp is ISO format."""
        response = client.get("/api/health")
        data = response.get_json()
        
        # Should not raise exception
        datetime.fromisoformat(data["timestamp"])


@pytest.mark.unit
class TestAppInfo:
    """Test app info endpoint."""
    
    def test_app_info_returns_200(self, client):
        """Test app info returns 200."""
        response = client.get("/api/info")
        assert response.status_code == 200
    
    def test_app_info_contains_required_fields(self, client):
        """Test app info response contains required fields."""
        response = client.get("/api/info")
        data = response.get_json()
        
        assert "name" in data
        assert "version" in data
        assert "environment" in data
        assert "debug" in data
        assert "timestamp" in data


@pytest.mark.unit
class TestRootEndpoint:
    """Test root API endpoint."""
    
    def test_root_returns_200(self, client):
        """Test root endpoint returns 200."""
        response = client.get("/api/")
        assert response.status_code == 200
    
    def test_root_contains_endpoints(self, client):
        """Test root endpoint contains endpoints."""
        response = client.get("/api/")
        data = response.get_json()
        
        assert "message" in data
        assert "endpoints" in data
        assert "health" in data["endpoints"]
        assert "info" in data["endpoints"]
        assert "primary_invitations" in data["endpoints"]
        assert "tracker" in data["endpoints"]


@pytest.mark.integration
class TestCors:
    """Test CORS headers."""
    
    def test_cors_headers_present(self, client):
        """Test CORS headers are present."""
        response = client.get("/api/health", headers={"Origin": "http://localhost:5173"})
        assert response.status_code == 200
        assert "Access-Control-Allow-Origin" in response.headers


@pytest.mark.unit
class TestErrorHandlers:
    """Test JSON error handlers."""

    def test_unknown_route_returns_json_404(self, client):
        response = client.get("/api/does-not-exist")
        assert response.status_code == 404
        assert response.get_json()["status"] == 404

    def test_wrong_method_returns_json_405(self, client):
        response = client.delete("/api/health")
        assert response.status_code == 405
        assert response.get_json()["error"] == "Method Not Allowed"


@pytest.mark.integration
class TestClientSession:
    """Test the client and db fixtures share one application context."""

    def test_request_sees_test_data_and_back(self, client, db, sample_employee, auth_headers):
        response = client.get("/api/tracker/employees", headers=auth_headers)
        assert response.get_json()["count"] == 1

        client.patch(
            f"/api/tracker/employees/{sample_employee.id}",
            json={"designation": "Lead Analyst"},
            headers=auth_headers,
        )
        db.session.refresh(sample_employee)
        assert sample_employee.designation == "Lead Analyst"
