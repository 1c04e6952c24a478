"""
Tests for household_kernel.logging_config.

Covers:
- JSON envelope and extra fields
- Ledger exception fields (code plus structured attributes)
- LogContext set / bind / clear semantics
- configure_logging idempotence and the household_kernel logger tree
- Engine traces landing on the kernel handler
"""

import json
import logging
from io import StringIO

import pytest

from household_kernel.domain.records import AllocationType, ExpenseType
from household_kernel.exceptions import (
    ExpenseNotFoundError,
    InsufficientFundsError,
)
from household_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def json_lines():
    """Configure logging onto a buffer; return a reader of the emitted JSON lines."""
    stream = StringIO()

    def _install(level: int = logging.INFO):
        handler = logging.StreamHandler(stream)
        configure_logging(handler=handler, level=level)

        def _read() -> list[dict]:
            return [json.loads(line) for line in stream.getvalue().splitlines() if line]

        return _read

    return _install


class TestEnvelope:

    def test_fixed_fields(self, json_lines):
        read = json_lines()
        get_logger("services.balance_store").info("balance_increased")

        (record,) = read()
        assert record["level"] == "INFO"
        assert record["message"] == "balance_increased"
        assert record["logger"] == "household_kernel.services.balance_store"
        assert record["ts"].endswith("+00:00")

    def test_extras_are_top_level_keys(self, json_lines):
        read = json_lines()
        get_logger("services.expense_ledger").info(
            "expense_posted", extra={"expense_id": 3, "amount": 300, "payer": "alice"}
        )

        (record,) = read()
        assert (record["expense_id"], record["amount"], record["payer"]) == (3, 300, "alice")

    def test_tx_reference_and_enums_are_rendered(self, json_lines):
        read = json_lines()
        get_logger("services.settlement_manager").info(
            "external_payment_recorded",
            extra={
                "tx_reference": bytes.fromhex("00ff10"),
                "expense_type": ExpenseType.RECURRING,
                "allocation_type": AllocationType.CUSTOM,
            },
        )

        (record,) = read()
        assert record["tx_reference"] == "00ff10"
        assert record["expense_type"] == "recurring"
        assert record["allocation_type"] == "custom"

    def test_level_filters_debug(self, json_lines):
        read = json_lines()
        logger = get_logger("services.household_registry")
        logger.debug("dropped")
        logger.warning("kept")

        assert [r["message"] for r in read()] == ["kept"]


class TestExceptionFields:

    def test_plain_exception(self, json_lines):
        read = json_lines()
        try:
            raise ValueError("boom")
        except ValueError:
            get_logger("test").error("failed", exc_info=True)

        (record,) = read()
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "exc_code" not in record
        assert "ValueError: boom" in record["traceback"]

    def test_insufficient_funds_attributes(self, json_lines):
        read = json_lines()
        try:
            raise InsufficientFundsError(3, "bob", "alice", available=40, requested=100)
        except InsufficientFundsError:
            get_logger("services.settlement_manager").warning("settle_rejected", exc_info=True)

        (record,) = read()
        assert record["exc_code"] == "INSUFFICIENT_FUNDS"
        assert record["exc_household_id"] == 3
        assert record["exc_debtor"] == "bob"
        assert record["exc_creditor"] == "alice"
        assert (record["exc_available"], record["exc_requested"]) == (40, 100)

    def test_expense_not_found_attributes(self, json_lines):
        read = json_lines()
        try:
            raise ExpenseNotFoundError(1, 42)
        except ExpenseNotFoundError:
            get_logger("services.expense_ledger").error("lookup_failed", exc_info=True)

        (record,) = read()
        assert record["exc_code"] == "EXPENSE_NOT_FOUND"
        assert record["exc_expense_id"] == 42


class TestLogContext:

    def test_unset_fields_are_absent(self, json_lines):
        read = json_lines()
        get_logger("test").info("bare")

        (record,) = read()
        assert not {"correlation_id", "household_id", "actor_id", "operation"} & record.keys()

    def test_set_fields_are_stamped(self, json_lines):
        read = json_lines()
        LogContext.set(household_id="7", actor_id="alice")
        get_logger("test").info("stamped")

        (record,) = read()
        assert record["household_id"] == "7"
        assert record["actor_id"] == "alice"

    def test_context_wins_over_extra(self, json_lines):
        read = json_lines()
        with LogContext.bind(household_id="7"):
            get_logger("test").info("stamped", extra={"household_id": 7})

        (record,) = read()
        assert record["household_id"] == "7"

    def test_set_ignores_none(self):
        LogContext.set(operation="add_expense")
        LogContext.set(operation=None, actor_id="bob")

        assert LogContext.get_all() == {"operation": "add_expense", "actor_id": "bob"}

    def test_clear(self):
        LogContext.set(correlation_id="c", household_id="h", actor_id="a", operation="o")
        LogContext.clear()

        assert LogContext.get_all() == {}

    def test_bind_restores_previous_values(self):
        LogContext.set(operation="add_member")
        with LogContext.bind(operation="remove_member", household_id="2"):
            assert LogContext.get_all() == {"operation": "remove_member", "household_id": "2"}

        assert LogContext.get_all() == {"operation": "add_member"}

    def test_bind_restores_on_exception(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(correlation_id="temp"):
                raise RuntimeError

        assert LogContext.get_all() == {}

    def test_bind_skips_none_values(self):
        with LogContext.bind(actor_id=None, operation="record_external_payment"):
            assert LogContext.get_all() == {"operation": "record_external_payment"}


class TestConfigureLogging:

    def test_second_call_is_ignored(self):
        first = logging.StreamHandler(StringIO())
        configure_logging(handler=first)
        configure_logging(handler=logging.StreamHandler(StringIO()))

        root = logging.getLogger("household_kernel")
        assert root.handlers == [first]
        assert isinstance(first.formatter, StructuredFormatter)
        assert root.propagate is False

    def test_reset_restores_defaults(self):
        configure_logging(handler=logging.StreamHandler(StringIO()), level=logging.DEBUG)
        reset_logging()

        root = logging.getLogger("household_kernel")
        assert root.handlers == []
        assert root.level == logging.WARNING
        assert root.propagate is True

    def test_nested_loggers_share_the_handler(self, json_lines):
        read = json_lines(logging.DEBUG)
        get_logger("db.engine").debug("transaction_started")

        (record,) = read()
        assert record["logger"] == "household_kernel.db.engine"

    def test_engine_trace_reaches_kernel_handler(self, json_lines):
        from household_engines.allocation import allocate

        read = json_lines(logging.DEBUG)
        allocate(300, "equal", ["alice", "bob"])

        traces = [r for r in read() if r["message"] == "LEDGER_ENGINE_TRACE"]
        assert len(traces) == 1
        assert traces[0]["engine_name"] == "allocation"
        assert len(traces[0]["input_fingerprint"]) == 16
