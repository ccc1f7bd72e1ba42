from fastapi import APIRouter, Depends, HTTPException, Path

from app.dependencies import get_account_service, get_message_service
from app.errors import ConflictError, ValidationError
from app.schemas import INT32_MAX, INT32_MIN, Account, AccountCredentials, Message
from app.services.account_service import AccountService
from app.services.message_service import MessageService

router = APIRouter(tags=["accounts"])

@router.post("/register", response_model=Account)
async def register(
    data: AccountCredentials,
    accounts: AccountService = Depends(get_account_service),
):
    try:
        return await accounts.create_account(data)
    except (ValidationError, ConflictError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))

@router.post("/login", response_model=Account)
async def login(
    data: AccountCredentials,
    accounts: AccountService = Depends(get_account_service),
):
    account = await accounts.validate_login(data)
    if account is None:
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return account

@router.get("/accounts/{account_id}/messages", response_model=list[Message])
async def list_account_messages(
    account_id: int = Path(ge=INT32_MIN, le=INT32_MAX),
    messages: MessageService = Depends(get_message_service),
):
    return await messages.get_messages_by_account_id(account_id)
