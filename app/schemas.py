from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

# Range of the INTEGER / BIGINT columns the ids and timestamps live in.
INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1

RowId = Annotated[int, Field(ge=INT32_MIN, le=INT32_MAX)]
Epoch = Annotated[int, Field(ge=INT64_MIN, le=INT64_MAX)]


# --- Account ---

class AccountCredentials(BaseModel):
    username: str
    password: str


class Account(AccountCredentials):
    """An account record as returned by the persistence provider."""
    account_id: int
    model_config = ConfigDict(from_attributes=True, frozen=True)


# --- Message ---

class MessageCreate(BaseModel):
    posted_by: RowId
    message_text: str
    time_posted_epoch: Epoch


class MessageUpdate(BaseModel):
    message_text: str


class Message(MessageCreate):
    """
    A message record.  ``message_id`` is 0 until the store assigns one.
    """
    message_id: int = 0
    model_config = ConfigDict(from_attributes=True, frozen=True)


# --- Metrics ---

class MetricsResponse(BaseModel):
    total_accounts: int
    total_messages: int
    avg_messages_per_account: float
    cache_info: dict = {}
