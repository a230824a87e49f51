"""Tests for connector resolution and the per-run cache."""

from __future__ import annotations

import pytest

from databasin.enrichment.resolver import ConnectorCache, ConnectorResolver
from databasin.errors import ApiError, NotFoundError, ValidationError
from databasin.models.connector import Connector
from tests.conftest import FakeBackend


@pytest.fixture
def resolver(backend: FakeBackend) -> ConnectorResolver:
    return ConnectorResolver(backend, ConnectorCache())


class TestConnectorCache:
    def test_keys_are_stringified(self) -> None:
        cache = ConnectorCache()
        connector = Connector(connector_id=1)
        cache.put(1, connector)
        assert cache.get("1") is connector
        assert "1" in cache
        assert 1 in cache
        assert len(cache) == 1

    def test_context_manager_empties_on_exit(self) -> None:
        cache = ConnectorCache()
        with cache:
            cache.put(1, Connector())
            assert len(cache) == 1
        assert len(cache) == 0

    def test_context_manager_empties_on_error(self) -> None:
        cache = ConnectorCache()
        with pytest.raises(RuntimeError):
            with cache:
                cache.put(1, Connector())
                raise RuntimeError("boom")
        assert len(cache) == 0


class TestResolve:
    async def test_fetches_once(self, backend: FakeBackend, resolver: ConnectorResolver) -> None:
        first = await resolver.resolve(101)
        second = await resolver.resolve("101")
        assert first is second
        assert first.sub_type == "MySQL"
        assert backend.fetches["101"] == 1

    async def test_not_found(self, resolver: ConnectorResolver) -> None:
        with pytest.raises(NotFoundError, match="Connector not found: 999"):
            await resolver.resolve(999)

    async def test_other_api_errors_propagate(self) -> None:
        class Failing(FakeBackend):
            async def fetch_connector(self, connector_id: int | str) -> dict:
                raise ApiError("boom", 500, "/api/connector/1")

        resolver = ConnectorResolver(Failing(), ConnectorCache())
        with pytest.raises(ApiError) as exc_info:
            await resolver.resolve(1)
        assert exc_info.value.status_code == 500

    async def test_empty_body_is_not_found(self) -> None:
        class Empty(FakeBackend):
            async def fetch_connector(self, connector_id: int | str) -> None:
                return None

        resolver = ConnectorResolver(Empty(), ConnectorCache())
        with pytest.raises(NotFoundError, match="Connector not found: 7"):
            await resolver.resolve(7)
        with pytest.raises(NotFoundError) as exc_info:
            await resolver.validate(7, "source")
        assert exc_info.value.field == "sourceConnectorId"

    @pytest.mark.parametrize(
        ("body", "field"),
        [(["not", "a", "record"], "connector"), ({"status": ["active"]}, "connector.status")],
    )
    async def test_malformed_body(self, body: object, field: str) -> None:
        class Garbled(FakeBackend):
            async def fetch_connector(self, connector_id: int | str) -> object:
                return body

        cache = ConnectorCache()
        with pytest.raises(ValidationError) as exc_info:
            await ConnectorResolver(Garbled(), cache).resolve(7)
        assert not isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.field == field
        assert 7 not in cache


class TestValidate:
    async def test_active_connector(self, resolver: ConnectorResolver) -> None:
        connector = await resolver.validate(202, "target")
        assert connector.sub_type == "snowflake"

    async def test_missing_connector_names_role(self, resolver: ConnectorResolver) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await resolver.validate(999, "target")
        assert exc_info.value.field == "targetConnectorId"
        assert "target connector not found: 999" in exc_info.value.message

    async def test_inactive_connector(self, resolver: ConnectorResolver) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await resolver.validate(505, "source")
        err = exc_info.value
        assert not isinstance(err, NotFoundError)
        assert err.field == "sourceConnectorId"
        assert "source" in err.message
        assert "not active" in err.message

    async def test_active_flag_alone_is_enough(self) -> None:
        raw = {"connectorSubType": "mysql", "status": "error", "isActive": "1"}
        backend = FakeBackend({"9": raw})
        resolver = ConnectorResolver(backend, ConnectorCache())
        assert (await resolver.validate(9, "source")).active
