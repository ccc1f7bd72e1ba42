"""
Account service - registration, login and lookups for the Account record.

Username uniqueness is checked with a fresh query right before the
insert, but that check is not atomic: the unique constraint on
``account.username`` is what actually decides, and its rejection is
reported as the same ``ConflictError``.
"""
import logging

from app.config import settings
from app.errors import ConflictError, ValidationError
from app.repositories import AccountRepository, ConstraintViolationError
from app.schemas import Account, AccountCredentials
from app.security import passwords_match
from app.services import storage_errors

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, accounts: AccountRepository) -> None:
        self.accounts = accounts

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_account_by_id(self, account_id: int) -> Account | None:
        with storage_errors("fetching account"):
            return await self.accounts.get_by_id(account_id)

    async def get_all_accounts(self) -> list[Account]:
        with storage_errors("fetching all accounts"):
            accounts = await self.accounts.get_all()
        logger.debug("Fetched %d account(s)", len(accounts))
        return accounts

    async def find_account_by_username(self, username: str) -> Account | None:
        with storage_errors("finding account by username"):
            return await self.accounts.find_by_username(username)

    async def account_exists(self, account_id: int) -> bool:
        return await self.get_account_by_id(account_id) is not None

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    async def validate_login(self, credentials: AccountCredentials) -> Account | None:
        """
        Return the account matching *credentials*, or None when the
        username is unknown or the password does not match.
        """
        account = await self.find_account_by_username(credentials.username)
        if account is None or not passwords_match(account.password, credentials.password):
            logger.info("Login rejected for username=%r", credentials.username)
            return None
        logger.info("Login accepted for account_id=%d", account.account_id)
        return account

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_account(self, credentials: AccountCredentials) -> Account:
        """
        Register a new account and return it with its assigned identity.

        Checks run in a fixed order: blank username, blank password,
        short password, duplicate username.
        """
        self._validate_credentials(credentials)

        with storage_errors("creating account"):
            if await self.accounts.username_exists(credentials.username):
                logger.info("Registration rejected, username %r taken", credentials.username)
                raise ConflictError("Username must be unique")
            try:
                account = await self.accounts.insert(credentials)
            except ConstraintViolationError as exc:
                logger.info("Registration lost a race for username %r", credentials.username)
                raise ConflictError("Username must be unique") from exc

        logger.info("Created account_id=%d username=%r", account.account_id, account.username)
        return account

    async def update_account(self, account: Account) -> bool:
        with storage_errors("updating account"):
            return await self.accounts.update(account)

    async def delete_account(self, account: Account) -> bool:
        if not account.account_id:
            raise ValidationError("Account id must be set")
        with storage_errors("deleting account"):
            return await self.accounts.delete(account)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_credentials(credentials: AccountCredentials) -> None:
        username = credentials.username.strip()
        password = credentials.password.strip()
        if not username:
            raise ValidationError("Username cannot be blank")
        if not password:
            raise ValidationError("Password cannot be blank")
        if len(password) < settings.PASSWORD_MIN_LENGTH:
            raise ValidationError(
                f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long"
            )
