# =============================================================================
# API Package — FastAPI Route Handlers
# =============================================================================
# Each module defines a FastAPI APIRouter:
#   - keys.py: generate, validate, list and revoke API keys
#   - health.py: liveness check
#   - deps.py: dependencies resolving the credential service
# =============================================================================
