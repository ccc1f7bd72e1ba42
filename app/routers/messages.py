from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Response

from app.dependencies import get_account_service, get_message_service
from app.errors import NotFoundError, UnauthorizedError, ValidationError
from app.schemas import INT32_MAX, INT32_MIN, Message, MessageCreate, MessageUpdate
from app.services.account_service import AccountService
from app.services.message_service import MessageService

router = APIRouter(prefix="/messages", tags=["messages"])

# Rejections reported to the client as 400; storage failures are left to
# the application-level handler.
_CLIENT_ERRORS = (ValidationError, NotFoundError, UnauthorizedError)

# Ids outside the column range are rejected with 422 before reaching the store.
MessageId = Annotated[int, Path(ge=INT32_MIN, le=INT32_MAX)]

@router.post("", response_model=Message)
async def create_message(
    data: MessageCreate,
    accounts: AccountService = Depends(get_account_service),
    messages: MessageService = Depends(get_message_service),
):
    owner = await accounts.get_account_by_id(data.posted_by)
    try:
        return await messages.create_message(Message(**data.model_dump()), owner)
    except _CLIENT_ERRORS as exc:
        raise HTTPException(status_code=400, detail=str(exc))

@router.get("", response_model=list[Message])
async def list_messages(messages: MessageService = Depends(get_message_service)):
    return await messages.get_all_messages()

# An absent message answers 200 with an empty body on GET and DELETE;
# existing clients rely on it.
@router.get("/{message_id}")
async def get_message(message_id: MessageId, messages: MessageService = Depends(get_message_service)):
    lookup = await messages.find_message(message_id)
    if not lookup.found:
        return Response(status_code=200)
    return lookup.value

@router.delete("/{message_id}")
async def delete_message(message_id: MessageId, messages: MessageService = Depends(get_message_service)):
    lookup = await messages.find_message(message_id)
    if not lookup.found:
        return Response(status_code=200)
    try:
        await messages.delete_message(lookup.value)
    except NotFoundError:
        return Response(status_code=200)
    return lookup.value

@router.patch("/{message_id}", response_model=Message)
async def update_message(
    message_id: MessageId,
    data: MessageUpdate,
    messages: MessageService = Depends(get_message_service),
):
    try:
        return await messages.update_message(message_id, data)
    except _CLIENT_ERRORS as exc:
        raise HTTPException(status_code=400, detail=str(exc))
