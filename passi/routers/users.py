from fastapi import APIRouter, Depends, HTTPException, status

from passi.core.credentials import Credential, CredentialStore
from passi.core.current_user import get_current_user
from passi.core.deps import get_credential_store, get_gateway
from passi.core.permissions import raise_for_result
from passi.core.security import hash_password
from passi.db.gateway import SchemaGateway
from passi.schemas.progress import ProgressRead
from passi.schemas.user import UserCreate, UserProfile
from passi.services.directory import add_user, find_credential, find_user
from passi.services.progress import get_progress

router = APIRouter()


@router.post(
    "",
    response_model=UserProfile,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Username or email already registered"}},
)
def register(
    payload: UserCreate,
    gateway: SchemaGateway = Depends(get_gateway),
    store: CredentialStore = Depends(get_credential_store),
):
    result = add_user(gateway, payload, hash_password(payload.password))
    raise_for_result(result)

    credential = find_credential(gateway, result.id)
    if credential is not None:
        store.sync(credential)

    return find_user(gateway, payload.username, by_email=False)


@router.get("/me", response_model=UserProfile)
def me(
    gateway: SchemaGateway = Depends(get_gateway),
    current_user: Credential = Depends(get_current_user),
):
    profile = find_user(gateway, current_user.username, by_email=False)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return profile


@router.get("/me/progress", response_model=ProgressRead)
def my_progress(
    gateway: SchemaGateway = Depends(get_gateway),
    current_user: Credential = Depends(get_current_user),
):
    progress = get_progress(gateway, current_user.username)
    if progress is None:
        raise HTTPException(status_code=404, detail="Progress not available")
    return progress
