"""
Integration tests for OpenAPI documentation.

Verifies OpenAPI schema is correctly generated for all endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from src.api.main import app


@pytest.fixture
def client() -> TestClient:
    """Create test client for the application."""
    return TestClient(app)


@pytest.fixture
def schema(client: TestClient) -> dict:
    response = client.get("/openapi.json")
    assert response.status_code == 200
    return response.json()


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    def test_openapi_title_and_description(self, schema: dict) -> None:
        """OpenAPI schema has correct title and description."""
        assert schema["info"]["title"] == "bookkeeper-auth"
        assert "session token" in schema["info"]["description"]
        assert schema["info"]["version"] == "0.1.0"

    @pytest.mark.parametrize(
        ("path", "method"),
        [
            ("/v1/auth/register", "post"),
            ("/v1/auth/authenticate", "post"),
            ("/v1/auth/activate-account", "get"),
            ("/v1/auth/resend-activation", "post"),
            ("/v1/auth/me", "get"),
            ("/health", "get"),
        ],
    )
    def test_endpoint_documented(self, schema: dict, path: str, method: str) -> None:
        """Every endpoint appears in the schema."""
        assert method in schema["paths"][path]

    def test_register_documents_202(self, schema: dict) -> None:
        """Registration is asynchronous from the caller's view."""
        register = schema["paths"]["/v1/auth/register"]["post"]

        assert register["summary"] == "Register a new user"
        assert "202" in register["responses"]
        assert "409" in register["responses"]

    def test_activate_takes_token_query_parameter(self, schema: dict) -> None:
        """The activation code is passed as ?token=."""
        activate = schema["paths"]["/v1/auth/activate-account"]["get"]
        params = {p["name"]: p for p in activate["parameters"]}

        assert params["token"]["in"] == "query"
        assert params["token"]["required"] is True
        assert "410" in activate["responses"]

    def test_registration_request_schema(self, schema: dict) -> None:
        """RegistrationRequest schema lists the profile fields."""
        props = schema["components"]["schemas"]["RegistrationRequest"]["properties"]

        assert {"firstname", "lastname", "email", "password", "date_of_birth"} <= set(props)

    def test_authentication_response_schema(self, schema: dict) -> None:
        """AuthenticationResponse carries the token."""
        props = schema["components"]["schemas"]["AuthenticationResponse"]["properties"]

        assert set(props) == {"token"}

    def test_bearer_security_scheme(self, schema: dict) -> None:
        """/me declares HTTP bearer security."""
        schemes = schema["components"]["securitySchemes"]

        assert any(s.get("scheme") == "bearer" for s in schemes.values())

    def test_endpoints_tagged_with_v1(self, schema: dict) -> None:
        """v1 endpoints are tagged."""
        assert "v1" in [t["name"] for t in schema.get("tags", [])]
        assert "v1" in schema["paths"]["/v1/auth/register"]["post"]["tags"]


class TestSwaggerUI:
    """Tests for Swagger UI availability."""

    def test_docs_endpoint_accessible(self, client: TestClient) -> None:
        """Swagger UI is accessible at /docs."""
        response = client.get("/docs")
        assert response.status_code == 200
        assert "swagger" in response.text.lower()

    def test_redoc_endpoint_accessible(self, client: TestClient) -> None:
        """ReDoc is accessible at /redoc."""
        response = client.get("/redoc")
        assert response.status_code == 200
        assert "redoc" in response.text.lower()
