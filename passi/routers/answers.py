from fastapi import APIRouter, Depends, HTTPException, Response, status

from passi.core.credentials import Credential
from passi.core.current_user import get_current_user
from passi.core.deps import get_gateway
from passi.core.permissions import raise_for_result, require_correct_user, require_member
from passi.db.gateway import SchemaGateway
from passi.schemas.answer import AnswersheetCreate, AnswersheetRead
from passi.services.answers import delete_answer, get_answer, is_answer_exist, save_answer

router = APIRouter()


@router.post(
    "",
    response_model=AnswersheetRead,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Worksheet already answered"}},
)
def submit_answer(
    payload: AnswersheetCreate,
    gateway: SchemaGateway = Depends(get_gateway),
    me: Credential = Depends(get_current_user),
):
    require_correct_user(gateway, payload.user_id, me)
    require_member(gateway, payload.group_id, me)

    # no resubmission: an answer has to be deleted before it can be sent again
    if is_answer_exist(gateway, payload.worksheet_id, payload.user_id):
        raise HTTPException(status_code=409, detail="Worksheet already answered")

    raise_for_result(save_answer(gateway, payload))

    return get_answer(gateway, payload.worksheet_id, payload.group_id, payload.user_id)


@router.get("/{worksheet_id}", response_model=AnswersheetRead)
def read_answer(
    worksheet_id: int,
    group_id: int,
    user_id: int,
    gateway: SchemaGateway = Depends(get_gateway),
    me: Credential = Depends(get_current_user),
):
    require_correct_user(gateway, user_id, me)
    require_member(gateway, group_id, me)

    answer = get_answer(gateway, worksheet_id, group_id, user_id)
    if answer is None:
        raise HTTPException(status_code=404, detail="Answer not found")
    return answer


@router.delete("/{worksheet_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_answer(
    worksheet_id: int,
    user_id: int,
    gateway: SchemaGateway = Depends(get_gateway),
    me: Credential = Depends(get_current_user),
):
    require_correct_user(gateway, user_id, me)

    if not is_answer_exist(gateway, worksheet_id, user_id):
        raise HTTPException(status_code=404, detail="Answer not found")

    raise_for_result(delete_answer(gateway, worksheet_id, user_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
