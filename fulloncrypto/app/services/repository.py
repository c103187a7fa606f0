from __future__ import annotations

from datetime import UTC, datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..models import PENDING, PaymentRequestModel, UpiIndexEntryModel, UserModel

# Dialects with a native, atomic INSERT ... ON CONFLICT DO UPDATE.
_UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}
# Dialects with INSERT ... ON DUPLICATE KEY UPDATE.
_DUPLICATE_KEY_DIALECTS = ("mysql", "mariadb")


class UserRepository:
    """Data access for the ``users`` table."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_username(self, username: str) -> Optional[UserModel]:
        stmt = select(UserModel).where(UserModel.username == username)
        return self.session.exec(stmt).first()

    def get_by_address(
        self, eth_address: str, *, exclude_username: Optional[str] = None
    ) -> Optional[UserModel]:
        stmt = select(UserModel).where(UserModel.eth_address == eth_address)
        if exclude_username is not None:
            stmt = stmt.where(UserModel.username != exclude_username)
        return self.session.exec(stmt).first()

    def add_user(
        self,
        *,
        username: str,
        password: str = "",
        eth_address: Optional[str] = None,
    ) -> UserModel:
        user = UserModel(username=username, password=password, eth_address=eth_address)
        self.session.add(user)
        self.session.flush()
        self.session.refresh(user)
        return user

    def set_address(self, username: str, eth_address: str) -> Optional[UserModel]:
        """Attach ``eth_address`` to the user and return the updated row."""
        user = self.get_by_username(username)
        if user is None:
            return None
        user.eth_address = eth_address
        user.updated_at = datetime.now(UTC)
        self.session.add(user)
        self.session.flush()
        self.session.refresh(user)
        return user


class PaymentRequestRepository:
    """Data access for ``paymentRequests`` and its ``upiIndex`` projection."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # Payment requests ---------------------------------------------------
    def add_payment_request(self, **fields) -> PaymentRequestModel:
        payment_request = PaymentRequestModel(**fields)
        self.session.add(payment_request)
        self.session.flush()
        self.session.refresh(payment_request)
        return payment_request

    def list_pending(self) -> list[PaymentRequestModel]:
        stmt = (
            select(PaymentRequestModel)
            .where(PaymentRequestModel.status == PENDING)
            .order_by(PaymentRequestModel.created_at.desc())
        )
        return list(self.session.exec(stmt))

    def get_by_contract_id(self, contract_request_id: str) -> Optional[PaymentRequestModel]:
        stmt = (
            select(PaymentRequestModel)
            .where(PaymentRequestModel.contract_request_id == contract_request_id)
            .order_by(PaymentRequestModel.created_at.desc())
        )
        return self.session.exec(stmt).first()

    # UPI index ----------------------------------------------------------
    def get_upi_index(self, contract_request_id: str) -> Optional[UpiIndexEntryModel]:
        return self.session.get(UpiIndexEntryModel, contract_request_id)

    def upsert_upi_index(
        self,
        *,
        contract_request_id: str,
        upi_id: str,
        payee_name: str,
        note: str,
    ) -> UpiIndexEntryModel:
        """Insert the entry for ``contract_request_id`` or overwrite every field of it."""
        values = {
            "contract_request_id": contract_request_id,
            "upi_id": upi_id,
            "payee_name": payee_name,
            "note": note,
            "created_at": datetime.now(UTC),
        }
        table = UpiIndexEntryModel.__table__
        changes = {
            column: value for column, value in values.items() if column != "contract_request_id"
        }
        dialect = self.session.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is not None:
            stmt = insert(table).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["contract_request_id"],
                set_={column: stmt.excluded[column] for column in changes},
            )
            self.session.execute(stmt)
        elif dialect in _DUPLICATE_KEY_DIALECTS:
            stmt = mysql.insert(table).values(**values)
            stmt = stmt.on_duplicate_key_update(
                {column: stmt.inserted[column] for column in changes}
            )
            self.session.execute(stmt)
        else:
            self._update_or_insert(table, contract_request_id, values, changes)

        return self.session.get(
            UpiIndexEntryModel, contract_request_id, populate_existing=True
        )

    def _update_or_insert(
        self, table, contract_request_id: str, values: dict, changes: dict
    ) -> None:
        """Portable upsert for dialects without a native one.

        A concurrent insert of the same key makes ours fail inside the savepoint;
        the row it created is then overwritten, so the last writer still wins.
        """
        by_key = update(table).where(table.c.contract_request_id == contract_request_id)
        if self.session.execute(by_key.values(**changes)).rowcount:
            return
        try:
            with self.session.begin_nested():
                self.session.execute(table.insert().values(**values))
        except IntegrityError:
            self.session.execute(by_key.values(**changes))
