from fastapi import Request

from passi.core.credentials import CredentialStore
from passi.db.gateway import SchemaGateway

_gateway = SchemaGateway()


# every call opens its own session inside the gateway; the gateway itself is shared.
def get_gateway() -> SchemaGateway:
    return _gateway


def get_credential_store(request: Request) -> CredentialStore:
    return request.app.state.credentials
