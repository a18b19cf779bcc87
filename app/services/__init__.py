# =============================================================================
# Services Package — Business Logic
# =============================================================================
# Core logic, separated from the API handlers:
#   - keys.py: key generation, HMAC hashing, kid parsing (pure functions)
#   - keystore.py: KeyStore protocol and the SQLAlchemy implementation
#   - credentials.py: CredentialService, the key lifecycle operations
# =============================================================================
