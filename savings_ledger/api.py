"""
FastAPI REST API Module

Headless front end for the savings ledger: list and add customers, show a
customer's balance, deposit, withdraw and view transaction history.
"""

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from pydantic import BaseModel, Field, field_validator
import uvicorn

from .config import SavingsConfig, get_config
from .customers import Customer
from .errors import LedgerError, UnknownCustomerError
from .ledger import SavingsLedger
from .logging_config import setup_logging
from .transactions import Transaction


# Pydantic models for API requests/responses
class AddCustomerRequest(BaseModel):
    name: str = Field(..., description="Customer display name")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Customer name must not be empty")
        return value


class AmountRequest(BaseModel):
    amount: str = Field(..., description="Decimal amount as string, e.g. '50.00'")


class CustomerResponse(BaseModel):
    id: int
    name: str
    current_balance: str
    currency: str
    balance_display: str
    created_at: str

    @classmethod
    def from_customer(cls, customer: Customer) -> 'CustomerResponse':
        return cls(
            id=customer.id,
            name=customer.name,
            current_balance=str(customer.current_balance.amount),
            currency=customer.currency.code,
            balance_display=customer.current_balance.to_display(),
            created_at=customer.created_at.isoformat()
        )


class TransactionResponse(BaseModel):
    id: int
    customer_id: int
    date_added: str
    transaction_type: str
    is_deposit: bool
    amount: str
    running_balance: str
    currency: str
    amount_display: str
    balance_display: str

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> 'TransactionResponse':
        return cls(
            id=transaction.id,
            customer_id=transaction.customer_id,
            date_added=transaction.date_added.isoformat(),
            transaction_type=transaction.transaction_type.value,
            is_deposit=transaction.is_deposit,
            amount=str(transaction.amount.amount),
            running_balance=str(transaction.running_balance.amount),
            currency=transaction.amount.currency.code,
            amount_display=transaction.signed_amount.to_display(signed=True),
            balance_display=transaction.running_balance.to_display()
        )


class CustomerListResponse(BaseModel):
    customers: List[CustomerResponse]
    message: Optional[str] = None


class TransactionListResponse(BaseModel):
    customer_id: int
    transactions: List[TransactionResponse]
    message: Optional[str] = None


# Dependency to get the ledger owned by the app
def get_ledger(request: Request) -> SavingsLedger:
    return request.app.state.ledger


def _ledger_http_error(error: LedgerError) -> HTTPException:
    status_code = 404 if isinstance(error, UnknownCustomerError) else 400
    return HTTPException(
        status_code=status_code,
        detail={"reason": error.reason.value, "message": error.message}
    )


def create_app(
    ledger: Optional[SavingsLedger] = None,
    config: Optional[SavingsConfig] = None
) -> FastAPI:
    """
    Build the API around a ledger instance

    Args:
        ledger: Ledger to serve; a fresh one in the configured currency if None
        config: Settings; the global configuration if None
    """
    config = config or get_config()
    if ledger is None:
        ledger = SavingsLedger(currency=config.get_currency())

    app = FastAPI(
        title=config.api_title,
        description="In-memory savings ledger: customers, deposits, withdrawals and history",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.ledger = ledger
    app.state.config = config

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/customers", response_model=CustomerListResponse)
    def list_customers(ledger: SavingsLedger = Depends(get_ledger)):
        """List all customers with their balances"""
        customers = ledger.get_customers()
        return CustomerListResponse(
            customers=[CustomerResponse.from_customer(c) for c in customers],
            message=None if customers else "No customers added yet"
        )

    @app.post("/customers", status_code=status.HTTP_201_CREATED, response_model=CustomerResponse)
    def add_customer(request: AddCustomerRequest, ledger: SavingsLedger = Depends(get_ledger)):
        """Register a new customer"""
        customer = ledger.add_customer(request.name)
        return CustomerResponse.from_customer(customer)

    @app.get("/customers/{customer_id}", response_model=CustomerResponse)
    def get_customer(customer_id: int, ledger: SavingsLedger = Depends(get_ledger)):
        """Get a customer's current balance"""
        try:
            return CustomerResponse.from_customer(ledger.get_customer(customer_id))
        except LedgerError as e:
            raise _ledger_http_error(e)

    @app.post(
        "/customers/{customer_id}/deposits",
        status_code=status.HTTP_201_CREATED,
        response_model=TransactionResponse
    )
    def deposit(customer_id: int, request: AmountRequest, ledger: SavingsLedger = Depends(get_ledger)):
        """Deposit into a customer's savings"""
        try:
            transaction = ledger.deposit(customer_id, request.amount)
        except LedgerError as e:
            raise _ledger_http_error(e)
        return TransactionResponse.from_transaction(transaction)

    @app.post(
        "/customers/{customer_id}/withdrawals",
        status_code=status.HTTP_201_CREATED,
        response_model=TransactionResponse
    )
    def withdraw(customer_id: int, request: AmountRequest, ledger: SavingsLedger = Depends(get_ledger)):
        """Withdraw from a customer's savings"""
        try:
            transaction = ledger.withdraw(customer_id, request.amount)
        except LedgerError as e:
            raise _ledger_http_error(e)
        return TransactionResponse.from_transaction(transaction)

    @app.get("/customers/{customer_id}/transactions", response_model=TransactionListResponse)
    def list_transactions(customer_id: int, ledger: SavingsLedger = Depends(get_ledger)):
        """Transaction history, most recent first"""
        try:
            ledger.get_customer(customer_id)
        except LedgerError as e:
            raise _ledger_http_error(e)

        transactions = ledger.get_transactions(customer_id)
        return TransactionListResponse(
            customer_id=customer_id,
            transactions=[TransactionResponse.from_transaction(t) for t in transactions],
            message=None if transactions else "No transactions yet"
        )

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """Run the FastAPI server"""
    config = get_config()
    setup_logging(config.log_level, config.log_format)
    uvicorn.run(
        create_app(config=config),
        host=host or config.api_host,
        port=port or config.api_port,
        log_level="debug" if debug else "info"
    )
