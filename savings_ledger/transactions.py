"""
Transaction Log Module

Append-only record of deposits and withdrawals. Each transaction stores the
customer's balance immediately after it was applied; that snapshot is never
recomputed.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Dict, List, Optional
from enum import Enum

from .currency import Money, Currency
from .storage import StorageInterface


class TransactionType(Enum):
    """Balance movements supported by the ledger"""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


@dataclass(frozen=True)
class Transaction:
    """
    Immutable deposit or withdrawal record
    """
    id: int
    customer_id: int
    date_added: datetime
    amount: Money
    running_balance: Money
    is_deposit: bool

    def __post_init__(self):
        if not self.amount.is_positive():
            raise ValueError("Transaction amount must be positive")

        if self.amount.currency != self.running_balance.currency:
            raise ValueError("Transaction amount currency must match running balance currency")

        if self.running_balance.is_negative():
            raise ValueError("Running balance cannot be negative")

    @property
    def transaction_type(self) -> TransactionType:
        return TransactionType.DEPOSIT if self.is_deposit else TransactionType.WITHDRAWAL

    @property
    def signed_amount(self) -> Money:
        """Amount as it affects the balance: positive for deposits, negative for withdrawals"""
        return self.amount if self.is_deposit else -self.amount


class TransactionLog:
    """
    Stores transactions keyed by sequential integer id
    """

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "transactions"
        self.sequence_name = "transaction_id"

    def record(
        self,
        customer_id: int,
        amount: Money,
        running_balance: Money,
        is_deposit: bool
    ) -> Transaction:
        """
        Append a new transaction

        Raises:
            ValueError: If the amount is not positive or the running balance
                is negative; the id sequence is rolled back
        """
        with self.storage.atomic():
            transaction = Transaction(
                id=self.storage.next_id(self.sequence_name),
                customer_id=customer_id,
                date_added=datetime.now(timezone.utc),
                amount=amount,
                running_balance=running_balance,
                is_deposit=is_deposit
            )
            self.storage.save(self.table_name, transaction.id, self._transaction_to_dict(transaction))
        return transaction

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID"""
        data = self.storage.load(self.table_name, transaction_id)
        if data:
            return self._transaction_from_dict(data)
        return None

    def get_for_customer(self, customer_id: int) -> List[Transaction]:
        """
        Get a customer's transactions, most recent first

        Ordered by transaction id, which is strictly increasing; timestamps
        can tie.
        """
        records = self.storage.find(self.table_name, {"customer_id": customer_id})
        transactions = [self._transaction_from_dict(data) for data in records]
        transactions.sort(key=lambda t: t.id, reverse=True)
        return transactions

    def count(self) -> int:
        return self.storage.count(self.table_name)

    def _transaction_to_dict(self, transaction: Transaction) -> Dict:
        return {
            'id': transaction.id,
            'customer_id': transaction.customer_id,
            'date_added': transaction.date_added.isoformat(),
            'amount': str(transaction.amount.amount),
            'running_balance': str(transaction.running_balance.amount),
            'currency': transaction.amount.currency.code,
            'is_deposit': transaction.is_deposit
        }

    def _transaction_from_dict(self, data: Dict) -> Transaction:
        currency = Currency[data['currency']]
        return Transaction(
            id=data['id'],
            customer_id=data['customer_id'],
            date_added=datetime.fromisoformat(data['date_added']),
            amount=Money(Decimal(data['amount']), currency),
            running_balance=Money(Decimal(data['running_balance']), currency),
            is_deposit=data['is_deposit']
        )
