from fastapi import APIRouter, Depends, HTTPException, status

from passi.core.credentials import Credential
from passi.core.current_user import get_current_user
from passi.core.deps import get_gateway
from passi.core.permissions import raise_for_result, require_member
from passi.db.gateway import SchemaGateway
from passi.schemas.group import GroupJoin
from passi.schemas.worksheet import CategoryRead
from passi.services.directory import is_group_exist, join_user_into_group
from passi.services.progress import feedback_complete_map
from passi.services.worksheets import get_worksheets

router = APIRouter()


@router.post("/join", status_code=status.HTTP_201_CREATED)
def join_group(
    payload: GroupJoin,
    gateway: SchemaGateway = Depends(get_gateway),
    me: Credential = Depends(get_current_user),
):
    if not is_group_exist(gateway, payload.join_key):
        raise HTTPException(status_code=404, detail="Group not found")

    result = join_user_into_group(gateway, payload.join_key, me.user_id)
    raise_for_result(result)
    return {"group_id": result.id}


@router.get("/{group_id}/worksheets", response_model=list[CategoryRead])
def list_worksheets(
    group_id: int,
    gateway: SchemaGateway = Depends(get_gateway),
    me: Credential = Depends(get_current_user),
):
    require_member(gateway, group_id, me)

    categories = get_worksheets(gateway, group_id, me.username)
    if not categories:
        raise HTTPException(status_code=404, detail="No worksheets for this group")
    return categories


@router.get("/{group_id}/feedback", response_model=dict[int, bool])
def feedback_status(
    group_id: int,
    gateway: SchemaGateway = Depends(get_gateway),
    me: Credential = Depends(get_current_user),
):
    require_member(gateway, group_id, me)
    return feedback_complete_map(gateway, group_id, me.user_id)
