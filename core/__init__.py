# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the business logic behind the routers:
# - models/: Pydantic schemas for request/response validation
# - services/: Table reads/writes and access checks, one service per feature
#
# Services raise app.exceptions errors and never touch Request/Response
# objects, so they can be tested without an HTTP client.
# =============================================================================
