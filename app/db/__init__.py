# =============================================================================
# Database Package
# =============================================================================
# Async SQLAlchemy engine construction and the ORM table definition.
#
# Key exports:
#   - build_engine / build_session_factory: used by the application lifespan
#   - Base: SQLAlchemy declarative base
#   - ApiKeyRecord: the hashed credential row (api_keys table)
# =============================================================================
