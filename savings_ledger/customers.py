"""
Customer Management Module

Manages savings customers and their current balances. A customer's balance is
the only mutable value in the ledger; it is changed only through the ledger's
deposit and withdraw operations.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Dict, List, Optional

from .currency import Money, Currency
from .storage import StorageInterface


@dataclass(frozen=True)
class Customer:
    """
    Snapshot of a savings customer at the time it was loaded
    """
    id: int
    name: str
    current_balance: Money
    created_at: datetime

    @property
    def currency(self) -> Currency:
        return self.current_balance.currency


class CustomerManager:
    """
    Stores customers keyed by sequential integer id
    """

    def __init__(self, storage: StorageInterface, currency: Currency = Currency.GHS):
        self.storage = storage
        self.currency = currency
        self.table_name = "customers"
        self.sequence_name = "customer_id"

    def create_customer(self, name: str) -> Customer:
        """
        Register a new customer with a zero balance

        Args:
            name: Display name, stored as given

        Returns:
            Created Customer
        """
        customer = Customer(
            id=self.storage.next_id(self.sequence_name),
            name=name,
            current_balance=Money.zero(self.currency),
            created_at=datetime.now(timezone.utc)
        )
        self._save_customer(customer)
        return customer

    def get_customer(self, customer_id: int) -> Optional[Customer]:
        """Get customer by ID"""
        customer_dict = self.storage.load(self.table_name, customer_id)
        if customer_dict:
            return self._customer_from_dict(customer_dict)
        return None

    def get_customers(self) -> List[Customer]:
        """Get all customers in registration order"""
        return [self._customer_from_dict(data) for data in self.storage.load_all(self.table_name)]

    def set_balance(self, customer: Customer, new_balance: Money) -> Customer:
        """Store a new balance for the customer and return the updated snapshot"""
        if new_balance.currency != self.currency:
            raise ValueError("Balance currency must match ledger currency")
        if new_balance.is_negative():
            raise ValueError("Customer balance cannot be negative")

        updated = Customer(
            id=customer.id,
            name=customer.name,
            current_balance=new_balance,
            created_at=customer.created_at
        )
        self._save_customer(updated)
        return updated

    def _save_customer(self, customer: Customer) -> None:
        self.storage.save(self.table_name, customer.id, self._customer_to_dict(customer))

    def _customer_to_dict(self, customer: Customer) -> Dict:
        return {
            'id': customer.id,
            'name': customer.name,
            'current_balance': str(customer.current_balance.amount),
            'currency': customer.current_balance.currency.code,
            'created_at': customer.created_at.isoformat()
        }

    def _customer_from_dict(self, data: Dict) -> Customer:
        return Customer(
            id=data['id'],
            name=data['name'],
            current_balance=Money(Decimal(data['current_balance']), Currency[data['currency']]),
            created_at=datetime.fromisoformat(data['created_at'])
        )
