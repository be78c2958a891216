"""Shared API dependencies."""

from typing import Annotated

from fastapi import Depends, Request
from starlette.requests import HTTPConnection

from forever_wall.services.gateway import AdmissionGateway
from forever_wall.services.rate_limit import client_key_from_request


def get_gateway(connection: HTTPConnection) -> AdmissionGateway:
    """Return the process-wide admission gateway created at startup."""
    return connection.app.state.gateway


def get_client_key(request: Request) -> str:
    """Return the rate-limit key for the calling client."""
    client_host = request.client.host if request.client else None
    return client_key_from_request(request.headers, client_host)


# Type aliases for dependency injection
GatewayDep = Annotated[AdmissionGateway, Depends(get_gateway)]
ClientKeyDep = Annotated[str, Depends(get_client_key)]
