from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from passi.core.credentials import Credential, CredentialStore
from passi.core.deps import get_credential_store

security = HTTPBasic()


def get_current_user(
    credentials: HTTPBasicCredentials = Depends(security),
    store: CredentialStore = Depends(get_credential_store),
) -> Credential:
    principal = store.authenticate(credentials.username, credentials.password)
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Basic"},
        )
    return principal
