from __future__ import annotations
from datetime import datetime, UTC
from typing import Optional
from uuid import UUID, uuid4
from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

PENDING = "pending"

class User(SQLModel, table=True):
    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    username: str = Field(unique=True, index=True)
    password: str = ""
    email: str = ""
    eth_address: Optional[str] = Field(default=None, unique=True, index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), sa_type=DateTime(timezone=True)
    )
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

class PaymentRequest(SQLModel, table=True):
    __tablename__ = "paymentRequests"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    upi_id: str
    amount: float
    payee_name: str = ""
    note: str = ""
    contract_request_id: Optional[str] = Field(default=None, index=True)
    wallet_address: str = ""
    dai_amount: float = 0
    eth_fee: float = 0
    requester_id: str = "anonymous"
    status: str = Field(default=PENDING, index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), sa_type=DateTime(timezone=True), index=True
    )

class UpiIndexEntry(SQLModel, table=True):
    __tablename__ = "upiIndex"

    contract_request_id: str = Field(primary_key=True)
    upi_id: str
    payee_name: str = ""
    note: str = ""
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), sa_type=DateTime(timezone=True)
    )
