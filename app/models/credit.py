"""Credit account and transaction models."""

from __future__ import annotations

from typing import Any

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from app.models.base import Base, CuidString, TimestampMixin, UUIDMixin


class CreditAccount(Base, TimestampMixin):
    """Spendable credit balance for one account."""

    __tablename__ = "credit_accounts"
    __table_args__ = (CheckConstraint("balance >= 0", name="ck_credit_accounts_balance_non_negative"),)

    account_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    balance: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    trial_granted: Mapped[bool] = mapped_column(default=False, nullable=False)


class CreditTransaction(Base, UUIDMixin, TimestampMixin):
    """Append-only ledger entry. Positive amounts credit, negative amounts debit."""

    __tablename__ = "credit_transactions"

    account_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("credit_accounts.account_id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    transaction_type: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    source: Mapped[str | None] = mapped_column(String(255), nullable=True)
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)
    extra_data: Mapped[dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        default=dict,
        nullable=False,
    )
    asset_id: Mapped[str | None] = mapped_column(CuidString(), nullable=True)
