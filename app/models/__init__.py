# =============================================================================
# Models Package — Pydantic V2 Schemas
# =============================================================================
# Request/response schemas for the HTTP API. These are separate from the
# database table (app/db/models.py) so the stored hash can never leak into
# a response by accident.
# =============================================================================
