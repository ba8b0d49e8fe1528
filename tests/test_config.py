"""
Tests for configuration and structured logging
"""

import json
import logging

import pytest

from savings_ledger.config import SavingsConfig, reload_config
from savings_ledger.currency import Currency
from savings_ledger.ledger import SavingsLedger
from savings_ledger.logging_config import (
    JSONFormatter, LedgerTextFormatter, log_action, setup_logging
)


class TestConfig:
    """Test environment-based configuration"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SAVINGS_CURRENCY", raising=False)
        config = SavingsConfig(_env_file=None)
        assert config.currency == "GHS"
        assert config.get_currency() == Currency.GHS
        assert config.api_port == 8090
        assert config.log_format == "json"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("SAVINGS_CURRENCY", "usd")
        monkeypatch.setenv("SAVINGS_API_PORT", "9000")
        config = reload_config()
        assert config.get_currency() == Currency.USD
        assert config.api_port == 9000

        monkeypatch.delenv("SAVINGS_CURRENCY")
        monkeypatch.delenv("SAVINGS_API_PORT")
        reload_config()

    def test_unsupported_currency(self):
        config = SavingsConfig(currency="XYZ", _env_file=None)
        with pytest.raises(ValueError):
            config.get_currency()


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


class TestLogging:
    """Test structured logging of ledger actions"""

    def setup_method(self):
        self.handler = ListHandler()
        self.logger = logging.getLogger("savings.ledger")
        self.logger.addHandler(self.handler)
        self.logger.setLevel(logging.DEBUG)

    def teardown_method(self):
        self.logger.removeHandler(self.handler)

    def make_record(self, **fields):
        record = logging.getLogger("savings.test").makeRecord(
            "savings.test", logging.INFO, __name__, 0, "hello", (), None
        )
        for name, value in fields.items():
            setattr(record, name, value)
        return record

    def test_json_formatter_promotes_ledger_fields(self):
        record = self.make_record(
            action="withdraw", customer_id=3, reason="insufficient_balance",
            details={"amount": "GHS 5.00"}
        )

        entry = json.loads(JSONFormatter().format(record))
        assert entry["message"] == "hello"
        assert entry["level"] == "INFO"
        assert entry["action"] == "withdraw"
        assert entry["customer_id"] == 3
        assert entry["reason"] == "insufficient_balance"
        assert entry["details"] == {"amount": "GHS 5.00"}
        assert "transaction_id" not in entry

    def test_json_formatter_keeps_currency_symbol(self):
        record = self.make_record(details={"display": "GH₵5.00"})
        assert "GH₵5.00" in JSONFormatter().format(record)

    def test_text_formatter_appends_ledger_fields(self):
        line = LedgerTextFormatter().format(self.make_record(action="deposit", transaction_id=7))
        assert line.endswith("[action=deposit transaction_id=7]")
        assert LedgerTextFormatter().format(self.make_record()).endswith("hello")

    def test_log_action_attaches_fields(self):
        log_action(self.logger, "info", "Something happened",
                   action="test", customer_id=1, transaction_id=2, details={"a": 1})
        record = self.handler.records[-1]
        assert record.action == "test"
        assert record.customer_id == 1
        assert record.transaction_id == 2
        assert record.reason is None
        assert record.details == {"a": 1}

    def test_log_action_respects_level(self):
        self.logger.setLevel(logging.WARNING)
        log_action(self.logger, "info", "Hidden", action="test")
        assert self.handler.records == []

    def test_ledger_logs_posted_and_rejected(self):
        ledger = SavingsLedger()
        customer = ledger.add_customer("Ama")
        deposit = ledger.deposit(customer.id, "10")
        with pytest.raises(ValueError):
            ledger.withdraw(customer.id, "20")

        actions = [(r.levelname, r.action) for r in self.handler.records]
        assert ("INFO", "add_customer") in actions
        assert ("INFO", "deposit") in actions
        assert ("WARNING", "withdraw") in actions

        posted = [r for r in self.handler.records if r.action == "deposit"][-1]
        assert posted.transaction_id == deposit.id
        assert posted.customer_id == customer.id

        rejected = [r for r in self.handler.records if r.levelname == "WARNING"][-1]
        assert rejected.reason == "insufficient_balance"
        assert rejected.customer_id == customer.id
        assert rejected.transaction_id is None

    def test_setup_logging_text_format(self):
        logger = setup_logging("DEBUG", "text", logger_name="savings.text_test")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, LedgerTextFormatter)
