"""FastAPI dependencies exposing the services built by the app factory."""

from typing import Annotated

from fastapi import Depends, Request

from schemaproxy.domain.services import DocumentForwarder, SchemaMirror


def get_schema_mirror(request: Request) -> SchemaMirror:
    return request.app.state.schema_mirror


def get_document_forwarder(request: Request) -> DocumentForwarder:
    return request.app.state.document_forwarder


SchemaMirrorDep = Annotated[SchemaMirror, Depends(get_schema_mirror)]
DocumentForwarderDep = Annotated[DocumentForwarder, Depends(get_document_forwarder)]
