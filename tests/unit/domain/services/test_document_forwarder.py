"""Unit tests for DocumentForwarder."""

import pytest

from schemaproxy.core.exceptions import BackendUnreachableError
from schemaproxy.domain.services import DocumentForwarder


@pytest.fixture
def forwarder(backend_client) -> DocumentForwarder:
    return DocumentForwarder(backend_client)


@pytest.mark.asyncio
async def test_create_relays_backend_response(forwarder, backend_stub):
    backend_stub.respond("POST", "/companies", 201, {"id": "a1b2", "name": "ACME"})

    response = await forwarder.create("companies", {"name": "ACME"})

    assert response.status_code == 201
    assert response.body == {"id": "a1b2", "name": "ACME"}
    assert backend_stub.body(backend_stub.requests[0]) == {"name": "ACME"}


@pytest.mark.asyncio
async def test_error_status_relayed_not_raised(forwarder, backend_stub):
    backend_stub.respond("PUT", "/companies/a1b2", 404, {"message": "not found"})

    response = await forwarder.update("companies", "a1b2", {"city": "Lyon"})

    assert response.status_code == 404
    assert response.body == {"message": "not found"}


@pytest.mark.asyncio
async def test_unreachable_backend_raises(forwarder, backend_stub):
    backend_stub.fail("POST", "/companies")

    with pytest.raises(BackendUnreachableError):
        await forwarder.create("companies", {"name": "ACME"})


@pytest.mark.asyncio
async def test_no_local_state_touched(forwarder, backend_stub, resources_dir):
    await forwarder.create("companies", {"name": "ACME"})

    assert list(resources_dir.iterdir()) == []
