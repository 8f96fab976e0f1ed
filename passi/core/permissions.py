from fastapi import HTTPException, status

from passi.core.credentials import Credential
from passi.db.gateway import SchemaGateway
from passi.services.directory import is_correct_user, is_member
from passi.services.results import ErrorKind, WriteResult

_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorKind.TRANSACTION_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def raise_for_result(result: WriteResult) -> None:
    if result:
        return
    code = _STATUS_BY_KIND.get(result.error, status.HTTP_500_INTERNAL_SERVER_ERROR)
    raise HTTPException(status_code=code, detail=result.detail)


def require_correct_user(gateway: SchemaGateway, user_id: int, me: Credential) -> None:
    if not is_correct_user(gateway, user_id, me.username):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to act for this user",
        )


def require_member(gateway: SchemaGateway, group_id: int, me: Credential) -> None:
    if not is_member(gateway, me.user_id, group_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not a member of this group",
        )
