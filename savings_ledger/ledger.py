"""
Savings Ledger Service

Sole authority over customer and transaction state. Every balance change goes
through deposit() or withdraw(), which update the balance and append the
transaction inside one atomic storage section.
"""

from typing import List, Optional

from .currency import AmountLike, Currency, Money, parse_amount
from .customers import Customer, CustomerManager
from .errors import (
    InsufficientBalanceError, InvalidAmountError, LedgerError, UnknownCustomerError
)
from .logging_config import get_logger, log_action
from .storage import InMemoryStorage, StorageInterface
from .transactions import Transaction, TransactionLog


class SavingsLedger:
    """
    In-memory savings ledger: customers, deposits, withdrawals and history

    Construct one per application and pass it to whatever needs it. State is
    dropped by close().
    """

    def __init__(
        self,
        storage: Optional[StorageInterface] = None,
        currency: Currency = Currency.GHS
    ):
        self.storage = storage if storage is not None else InMemoryStorage()
        self.currency = currency
        self.customer_manager = CustomerManager(self.storage, currency)
        self.transaction_log = TransactionLog(self.storage)
        self.logger = get_logger("savings.ledger")

    def add_customer(self, name: str) -> Customer:
        """
        Register a customer with a zero balance

        The name is stored as given; callers are expected to have rejected
        empty names already.
        """
        with self.storage.atomic():
            customer = self.customer_manager.create_customer(name)

        log_action(
            self.logger, "info", f"Customer added: {customer.id}",
            action="add_customer", customer_id=customer.id,
            details={"name": name}
        )
        return customer

    def get_customers(self) -> List[Customer]:
        """All customers in registration order"""
        return self.customer_manager.get_customers()

    def get_customer(self, customer_id: int) -> Customer:
        """
        Get a customer by id

        Raises:
            UnknownCustomerError: If no customer has this id
        """
        customer = self.customer_manager.get_customer(customer_id)
        if customer is None:
            raise UnknownCustomerError(customer_id)
        return customer

    def deposit(self, customer_id: int, amount: AmountLike) -> Transaction:
        """
        Credit a customer's balance

        Args:
            customer_id: Customer to credit
            amount: Strictly positive amount in the ledger currency

        Returns:
            The recorded deposit transaction

        Raises:
            UnknownCustomerError: If the customer does not exist
            InvalidAmountError: If the amount is not a positive number
        """
        try:
            with self.storage.atomic():
                customer = self.get_customer(customer_id)
                money = self._validate_amount(amount)
                try:
                    new_balance = customer.current_balance + money
                except ValueError:
                    raise InvalidAmountError(
                        f"Deposit of {money.to_string()} would exceed the largest representable balance"
                    )

                self.customer_manager.set_balance(customer, new_balance)
                transaction = self.transaction_log.record(
                    customer_id=customer.id,
                    amount=money,
                    running_balance=new_balance,
                    is_deposit=True
                )
        except LedgerError as e:
            self._log_rejection("deposit", customer_id, amount, e)
            raise

        self._log_posted("deposit", transaction)
        return transaction

    def withdraw(self, customer_id: int, amount: AmountLike) -> Transaction:
        """
        Debit a customer's balance

        The whole withdrawal is rejected when it exceeds the current balance;
        there is no overdraft and no partial withdrawal.

        Raises:
            UnknownCustomerError: If the customer does not exist
            InvalidAmountError: If the amount is not a positive number
            InsufficientBalanceError: If the amount exceeds the balance
        """
        try:
            with self.storage.atomic():
                customer = self.get_customer(customer_id)
                money = self._validate_amount(amount)
                if money > customer.current_balance:
                    raise InsufficientBalanceError(customer.id, customer.current_balance, money)
                new_balance = customer.current_balance - money

                self.customer_manager.set_balance(customer, new_balance)
                transaction = self.transaction_log.record(
                    customer_id=customer.id,
                    amount=money,
                    running_balance=new_balance,
                    is_deposit=False
                )
        except LedgerError as e:
            self._log_rejection("withdraw", customer_id, amount, e)
            raise

        self._log_posted("withdraw", transaction)
        return transaction

    def get_transactions(self, customer_id: int) -> List[Transaction]:
        """A customer's transactions, most recent first (by transaction id)"""
        return self.transaction_log.get_for_customer(customer_id)

    def close(self) -> None:
        """Drop all ledger state"""
        self.storage.close()

    def _validate_amount(self, amount: AmountLike) -> Money:
        money = parse_amount(amount, self.currency)
        if not money.is_positive():
            raise InvalidAmountError(f"Amount must be positive, got {money.to_string()}")
        return money

    def _log_posted(self, action: str, transaction: Transaction) -> None:
        log_action(
            self.logger, "info", f"{transaction.transaction_type.value.capitalize()} posted: {transaction.id}",
            action=action, customer_id=transaction.customer_id,
            transaction_id=transaction.id,
            details={
                "amount": transaction.amount.to_string(),
                "running_balance": transaction.running_balance.to_string()
            }
        )

    def _log_rejection(self, action: str, customer_id: int, amount, error: LedgerError) -> None:
        log_action(
            self.logger, "warning", f"{action.capitalize()} rejected: {error.message}",
            action=action, customer_id=customer_id,
            reason=error.reason.value,
            details={"amount": str(amount)}
        )
