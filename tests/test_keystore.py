# =============================================================================
# Integration Tests — SqlKeyStore (SQLite via aiosqlite)
# =============================================================================
#
# Runs the real SQL statements against a temporary SQLite file, so no
# PostgreSQL instance is needed. Each test builds and disposes its own
# engine inside a single event loop.
# =============================================================================

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine

from app.db.engine import build_session_factory
from app.db.models import ApiKeyRecord, Base
from app.errors import StorageError
from app.services.credentials import CredentialService
from app.services.keys import hash_api_key
from app.services.keystore import SqlKeyStore

SECRET = "store-test-secret"


def _run_with_store(tmp_path, scenario, create_tables: bool = True):
    """Run `scenario(store, session_factory)` against a fresh SQLite file."""

    async def _main():
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'keys.db'}")
        if create_tables:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        factory = build_session_factory(engine)
        try:
            return await scenario(SqlKeyStore(factory), factory)
        finally:
            await engine.dispose()

    return asyncio.run(_main())


async def _all_records(factory) -> list[ApiKeyRecord]:
    async with factory() as session:
        result = await session.execute(select(ApiKeyRecord))
        return list(result.scalars().all())


class TestSqlKeyStore:
    """Statement-level behaviour of SqlKeyStore."""

    def test_insert_then_find_active(self, tmp_path):
        async def scenario(store, factory):
            await store.insert_key("0123456789ab", "h" * 64, "app", "a@x.io", None)
            return await store.find_active("h" * 64)

        match = _run_with_store(tmp_path, scenario)
        assert match is not None
        assert match.kid == "0123456789ab"
        assert match.name == "app"
        assert match.email == "a@x.io"

    def test_new_record_defaults(self, tmp_path):
        """Inserted rows start unrevoked with a store-assigned created_at."""

        async def scenario(store, factory):
            await store.insert_key("0123456789ab", "h" * 64, None, None, "n")
            return await _all_records(factory)

        [record] = _run_with_store(tmp_path, scenario)
        assert record.revoked is False
        assert record.created_at is not None
        assert record.notes == "n"

    def test_find_active_unknown_hash(self, tmp_path):
        async def scenario(store, factory):
            return await store.find_active("0" * 64)

        assert _run_with_store(tmp_path, scenario) is None

    def test_revoked_key_not_found(self, tmp_path):
        async def scenario(store, factory):
            await store.insert_key("0123456789ab", "h" * 64, None, None, None)
            await store.revoke("0123456789ab")
            return await store.find_active("h" * 64)

        assert _run_with_store(tmp_path, scenario) is None

    def test_revoke_is_idempotent(self, tmp_path):
        async def scenario(store, factory):
            await store.insert_key("0123456789ab", "h" * 64, None, None, None)
            await store.revoke("0123456789ab")
            await store.revoke("0123456789ab")
            await store.revoke("ffffffffffff")
            return await _all_records(factory)

        [record] = _run_with_store(tmp_path, scenario)
        assert record.revoked is True

    def test_revoke_only_touches_matching_kid(self, tmp_path):
        async def scenario(store, factory):
            await store.insert_key("aaaaaaaaaaaa", "a" * 64, None, None, None)
            await store.insert_key("bbbbbbbbbbbb", "b" * 64, None, None, None)
            await store.revoke("aaaaaaaaaaaa")
            return await store.find_active("b" * 64)

        match = _run_with_store(tmp_path, scenario)
        assert match is not None
        assert match.kid == "bbbbbbbbbbbb"

    def test_list_keys_excludes_hash(self, tmp_path):
        async def scenario(store, factory):
            await store.insert_key("aaaaaaaaaaaa", "a" * 64, "one", None, None)
            await store.insert_key("bbbbbbbbbbbb", "b" * 64, "two", None, "x")
            await store.revoke("aaaaaaaaaaaa")
            return await store.list_keys()

        keys = _run_with_store(tmp_path, scenario)
        assert {k.kid for k in keys} == {"aaaaaaaaaaaa", "bbbbbbbbbbbb"}
        assert not any(hasattr(k, "hash") for k in keys)
        by_kid = {k.kid: k for k in keys}
        assert by_kid["aaaaaaaaaaaa"].revoked is True
        assert by_kid["bbbbbbbbbbbb"].revoked is False
        assert by_kid["bbbbbbbbbbbb"].notes == "x"

    def test_list_keys_newest_first(self, tmp_path):
        async def scenario(store, factory):
            await store.insert_key("aaaaaaaaaaaa", "a" * 64, None, None, None)
            await store.insert_key("bbbbbbbbbbbb", "b" * 64, None, None, None)
            return await store.list_keys()

        keys = _run_with_store(tmp_path, scenario)
        assert [k.kid for k in keys] == ["bbbbbbbbbbbb", "aaaaaaaaaaaa"]

    def test_duplicate_kid_raises_storage_error(self, tmp_path):
        async def scenario(store, factory):
            await store.insert_key("aaaaaaaaaaaa", "a" * 64, None, None, None)
            await store.insert_key("aaaaaaaaaaaa", "b" * 64, None, None, None)

        with pytest.raises(StorageError):
            _run_with_store(tmp_path, scenario)

    @pytest.mark.parametrize(
        "operation",
        [
            lambda s: s.insert_key("aaaaaaaaaaaa", "a" * 64, None, None, None),
            lambda s: s.find_active("a" * 64),
            lambda s: s.revoke("aaaaaaaaaaaa"),
            lambda s: s.list_keys(),
        ],
        ids=["insert", "find", "revoke", "list"],
    )
    def test_missing_table_raises_storage_error(self, tmp_path, operation):
        async def scenario(store, factory):
            await operation(store)

        with pytest.raises(StorageError):
            _run_with_store(tmp_path, scenario, create_tables=False)


class TestCredentialServiceWithStore:
    """CredentialService on top of a real SqlKeyStore."""

    def test_generate_persists_kid_and_hash(self, tmp_path):
        """Returned kid equals stored kid; returned key hashes to stored hash."""

        async def scenario(store, factory):
            service = CredentialService(store, SECRET)
            generated = await service.generate(name="app", email="a@x.io")
            return generated, await _all_records(factory)

        generated, [record] = _run_with_store(tmp_path, scenario)
        assert record.kid == generated.kid
        assert record.hash == hash_api_key(generated.key, SECRET)
        assert generated.key not in (record.name, record.email, record.notes, record.hash)

    def test_full_lifecycle(self, tmp_path):
        async def scenario(store, factory):
            service = CredentialService(store, SECRET)
            generated = await service.generate(name="app")
            before = await service.validate(generated.key)
            await service.revoke(generated.kid)
            after = await service.validate(generated.key)
            return generated, before, after

        generated, before, after = _run_with_store(tmp_path, scenario)
        assert before.valid is True
        assert before.kid == generated.kid
        assert after.valid is False
        assert after.kid is None

    def test_other_secret_cannot_validate(self, tmp_path):
        async def scenario(store, factory):
            generated = await CredentialService(store, SECRET).generate()
            return await CredentialService(store, "other-secret").validate(generated.key)

        assert _run_with_store(tmp_path, scenario).valid is False
