"""
Ledger Errors

Every rejected ledger operation raises one of these. The ``reason`` attribute
lets callers branch on the cause without isinstance checks.
"""

from enum import Enum


class RejectionReason(Enum):
    """Why a ledger operation was rejected"""
    UNKNOWN_CUSTOMER = "unknown_customer"
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_BALANCE = "insufficient_balance"


class LedgerError(ValueError):
    """Base class for rejected ledger operations"""
    reason: RejectionReason

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnknownCustomerError(LedgerError):
    """No customer is registered under the given id"""
    reason = RejectionReason.UNKNOWN_CUSTOMER

    def __init__(self, customer_id):
        super().__init__(f"Customer {customer_id} not found")
        self.customer_id = customer_id


class InvalidAmountError(LedgerError):
    """Amount is unparseable, non-positive or in the wrong currency"""
    reason = RejectionReason.INVALID_AMOUNT


class InsufficientBalanceError(LedgerError):
    """Withdrawal exceeds the customer's current balance"""
    reason = RejectionReason.INSUFFICIENT_BALANCE

    def __init__(self, customer_id: int, available, requested):
        super().__init__(
            f"Insufficient funds: available {available.to_string()}, "
            f"requested {requested.to_string()}"
        )
        self.customer_id = customer_id
        self.available = available
        self.requested = requested
