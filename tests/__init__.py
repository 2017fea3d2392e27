# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the SiteOps API:
# - conftest.py: FakeSupabase client and shared row fixtures
# - test_*_service.py: Service-layer tests against the fake client
# - test_auth.py: Token verification and auth dependencies
# - test_routes.py: HTTP tests through FastAPI's TestClient
#
# Run tests with: poetry run pytest
# =============================================================================
