# =============================================================================
# API Key Service
# =============================================================================
# Issues, validates, lists and revokes opaque API keys. Only an HMAC-SHA256
# digest of each key is stored; the plaintext is shown once at generation.
#
# Package structure:
#   app/
#   ├── api/          → FastAPI route handlers (keys, health) and dependencies
#   ├── db/           → Async engine construction and the api_keys table
#   ├── models/       → Pydantic V2 request/response schemas
#   └── services/     → Key generation/hashing, key store, credential service
# =============================================================================
