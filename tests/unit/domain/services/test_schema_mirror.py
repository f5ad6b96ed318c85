"""Unit tests for SchemaMirror."""

import asyncio

import httpx
import pytest
import pytest_asyncio

from schemaproxy.core.exceptions import (
    AlreadyExistsError,
    BackendError,
    BackendUnreachableError,
    NotFoundError,
    PropertyNotFoundError,
    ValidationError,
)
from schemaproxy.domain.entities import MirrorOperation, PropertyDefinition
from schemaproxy.domain.services import CollectionIdGenerator, SchemaMirror


def _props(*names: str) -> dict[str, PropertyDefinition]:
    return {name: PropertyDefinition(name=name, type="string") for name in names}


@pytest_asyncio.fixture
async def companies(mirror: SchemaMirror) -> str:
    result = await mirror.create_collection(
        "companies", "Collection", _props("name", "foundation_year", "city")
    )
    return result.collection_id


class TestCreateCollection:
    """Tests for collection creation."""

    @pytest.mark.asyncio
    async def test_local_only(self, mirror: SchemaMirror, store, backend_stub):
        result = await mirror.create_collection("companies", "Collection", _props("name"))

        assert result.operation is MirrorOperation.CREATE_COLLECTION
        assert result.collection_id.startswith("companies_")
        assert result.succeeded
        assert (result.local_applied, result.remote_applied) == (True, False)
        assert backend_stub.requests == []
        assert (await store.read(result.collection_id)).properties["name"].order == 0

    @pytest.mark.asyncio
    async def test_same_name_twice_gives_independent_descriptors(self, mirror: SchemaMirror, store):
        first = await mirror.create_collection("companies", "Collection", _props("a"))
        second = await mirror.create_collection("companies", "Collection", _props("b", "c"))

        assert first.collection_id != second.collection_id
        assert list((await store.read(first.collection_id)).properties) == ["a"]
        assert list((await store.read(second.collection_id)).properties) == ["b", "c"]

    @pytest.mark.asyncio
    async def test_folder_collision(self, store, backend_client, resources_dir):
        mirror = SchemaMirror(
            store, backend_client, id_generator=CollectionIdGenerator(clock=lambda: 1.0)
        )
        (resources_dir / "companies_1000").mkdir()

        with pytest.raises(AlreadyExistsError):
            await mirror.create_collection("companies", "Collection", _props("a"))

    @pytest.mark.asyncio
    async def test_invalid_name(self, mirror: SchemaMirror, resources_dir):
        with pytest.raises(ValidationError):
            await mirror.create_collection("../escape", "Collection", {})
        assert list(resources_dir.iterdir()) == []


class TestAddProperties:
    """Tests for property addition."""

    @pytest.mark.asyncio
    async def test_next_order(self, mirror: SchemaMirror, companies, backend_stub):
        result = await mirror.add_properties(companies, _props("country"))

        assert result.operation is MirrorOperation.ADD_PROPERTY
        assert result.succeeded
        assert (result.local_applied, result.remote_applied) == (True, False)
        [added] = result.properties
        assert added.order == 3
        assert backend_stub.requests == []

    @pytest.mark.asyncio
    async def test_several_properties_get_consecutive_orders(self, mirror: SchemaMirror, companies):
        result = await mirror.add_properties(companies, _props("country", "zip"))

        assert [p.order for p in result.properties] == [3, 4]

    @pytest.mark.asyncio
    async def test_unknown_collection(self, mirror: SchemaMirror):
        with pytest.raises(NotFoundError):
            await mirror.add_properties("ghost_1", _props("a"))

    @pytest.mark.asyncio
    async def test_empty_body(self, mirror: SchemaMirror, companies):
        with pytest.raises(ValidationError):
            await mirror.add_properties(companies, {})

    @pytest.mark.asyncio
    async def test_concurrent_adds_keep_orders_unique(self, mirror: SchemaMirror, companies, store):
        await asyncio.gather(
            *(mirror.add_properties(companies, _props(f"extra{i}")) for i in range(10))
        )

        descriptor = await store.read(companies)
        assert len(descriptor.properties) == 13
        assert descriptor.has_consistent_order()
        assert sorted(p.order for p in descriptor.properties.values()) == list(range(13))


class TestRenameCollection:
    """Tests for collection renames: local first, then remote."""

    @pytest.mark.asyncio
    async def test_success(self, mirror: SchemaMirror, companies, store, backend_stub):
        backend_stub.respond("PUT", f"/__resources/{companies}", 200, {"id": "firms"})

        result = await mirror.rename_collection(companies, "firms")

        assert result.succeeded
        assert (result.local_applied, result.remote_applied) == (True, True)
        assert result.remote_body == {"id": "firms"}
        [request] = backend_stub.calls("PUT", f"/__resources/{companies}")
        payload = backend_stub.body(request)
        assert payload["id"] == "firms"
        assert payload["properties"]["name"]["order"] == 0
        assert (await store.read(companies)).id == "firms"

    @pytest.mark.asyncio
    async def test_remote_failure_keeps_local_change(self, mirror: SchemaMirror, companies, store, backend_stub):
        backend_stub.fail("PUT", f"/__resources/{companies}")

        result = await mirror.rename_collection(companies, "firms")

        assert (result.local_applied, result.remote_applied) == (True, False)
        assert result.drifted
        assert isinstance(result.error, BackendUnreachableError)
        assert (await store.read(companies)).id == "firms"

    @pytest.mark.asyncio
    async def test_remote_error_status_is_kept(self, mirror: SchemaMirror, companies, backend_stub):
        backend_stub.respond("PUT", f"/__resources/{companies}", 409, {"message": "exists"})

        result = await mirror.rename_collection(companies, "firms")

        assert isinstance(result.error, BackendError)
        assert result.remote_status == 409
        assert result.remote_body == {"message": "exists"}
        assert result.drifted

    @pytest.mark.asyncio
    async def test_unknown_collection_skips_remote(self, mirror: SchemaMirror, backend_stub):
        result = await mirror.rename_collection("ghost_1", "firms")

        assert isinstance(result.error, NotFoundError)
        assert (result.local_applied, result.remote_applied) == (False, False)
        assert backend_stub.requests == []

    @pytest.mark.asyncio
    async def test_rename_many_reports_each(self, mirror: SchemaMirror, companies):
        results = await mirror.rename_collections({companies: "firms", "ghost_1": "nobody"})

        assert results[companies].succeeded
        assert isinstance(results["ghost_1"].error, NotFoundError)


class TestRenameProperties:
    """Tests for property renames: remote first, then local."""

    @pytest.mark.asyncio
    async def test_success_preserves_order(self, mirror: SchemaMirror, companies, store, backend_stub):
        result = await mirror.rename_properties(companies, {"city": "town"})

        assert result.succeeded
        [request] = backend_stub.calls("POST", f"/{companies}/rename")
        assert backend_stub.body(request) == {"properties": {"city": "town"}}
        descriptor = await store.read(companies)
        assert "city" not in descriptor.properties
        assert descriptor.properties["town"].order == 2
        assert descriptor.properties["town"].type == "string"

    @pytest.mark.asyncio
    async def test_remote_failure_leaves_descriptor(self, mirror: SchemaMirror, companies, store, backend_stub):
        backend_stub.respond("POST", f"/{companies}/rename", 500, {"message": "boom"})

        result = await mirror.rename_properties(companies, {"city": "town"})

        assert (result.local_applied, result.remote_applied) == (False, False)
        assert not result.drifted
        assert result.remote_status == 500
        assert "city" in (await store.read(companies)).properties

    @pytest.mark.asyncio
    async def test_missing_property_never_reaches_backend(self, mirror: SchemaMirror, companies, backend_stub):
        result = await mirror.rename_properties(companies, {"country": "nation"})

        assert isinstance(result.error, PropertyNotFoundError)
        assert backend_stub.requests == []

    @pytest.mark.asyncio
    async def test_local_failure_after_remote_is_drift(self, mirror: SchemaMirror, companies, store, backend_stub, resources_dir):
        def corrupt_descriptor(request):
            (resources_dir / companies / "config.json").write_text("{broken")

            return httpx.Response(200, json={})

        backend_stub.routes[("POST", f"/{companies}/rename")] = corrupt_descriptor

        result = await mirror.rename_properties(companies, {"city": "town"})

        assert (result.local_applied, result.remote_applied) == (False, True)
        assert result.drifted
        assert result.error is not None

    @pytest.mark.asyncio
    async def test_unknown_collection(self, mirror: SchemaMirror, backend_stub):
        result = await mirror.rename_properties("ghost_1", {"a": "b"})

        assert isinstance(result.error, NotFoundError)
        assert backend_stub.requests == []
