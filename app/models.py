from sqlalchemy import BigInteger, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


# ---------------------------------------------------------------------------
# Account
# ---------------------------------------------------------------------------
class AccountRow(Base):
    __tablename__ = "account"

    account_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # The unique constraint is the authoritative duplicate-username check.
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)


# ---------------------------------------------------------------------------
# Message
# ---------------------------------------------------------------------------
class MessageRow(Base):
    __tablename__ = "message"

    message_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    posted_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("account.account_id"), nullable=False, index=True
    )
    # Length is bounded on the trimmed text by the service; surrounding
    # whitespace is stored as sent.
    message_text: Mapped[str] = mapped_column(Text, nullable=False)
    time_posted_epoch: Mapped[int] = mapped_column(BigInteger, nullable=False)
