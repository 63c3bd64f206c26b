"""Tests for output sinks."""

import json
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

import pytest

from loan_ledger.exceptions import SinkError
from loan_ledger.models import Customer, KycStatus, Payment, PaymentMethod, PaymentStatus
from loan_ledger.sinks import ConsoleSink, JsonFileSink


@pytest.fixture
def payments() -> list[Payment]:
    return [
        Payment(
            payment_id=f"pay-{i}",
            loan_id="loan-001",
            business_id="biz-001",
            amount=Decimal("2500.50"),
            method=PaymentMethod.MOBILE_MONEY,
            status=PaymentStatus.APPROVED,
            created_at=datetime(2024, 5, i + 1),
            provider="M-Pesa",
        )
        for i in range(3)
    ]


class TestConsoleSink:
    """Tests for ConsoleSink."""

    def test_init_default(self) -> None:
        sink = ConsoleSink()

        assert sink.pretty is True
        assert sink.max_records is None

    def test_write_batch(self, capsys: pytest.CaptureFixture, payments: list[Payment]) -> None:
        sink = ConsoleSink(pretty=False)

        sink.write_batch("payments", payments)
        out = capsys.readouterr().out

        assert "payments (3 records)" in out
        assert '"amount": "2500.50"' in out
        assert '"method": "mobile_money"' in out

    def test_max_records(self, capsys: pytest.CaptureFixture, payments: list[Payment]) -> None:
        sink = ConsoleSink(pretty=True, max_records=1)

        sink.write_batch("payments", payments)
        out = capsys.readouterr().out

        assert "pay-0" in out
        assert "pay-1" not in out
        assert "... and 2 more records" in out

    def test_close_prints_counts(
        self, capsys: pytest.CaptureFixture, payments: list[Payment]
    ) -> None:
        sink = ConsoleSink(max_records=0)
        sink.write_batch("payments", payments)
        sink.write_batch("payments", payments[:1])
        capsys.readouterr()

        sink.close()

        assert "payments: 4 records" in capsys.readouterr().out


class TestJsonFileSink:
    """Tests for JsonFileSink."""

    def test_creates_output_dir(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "out"

        JsonFileSink(target)

        assert target.is_dir()

    def test_write_batch(self, tmp_path: Path, payments: list[Payment]) -> None:
        sink = JsonFileSink(tmp_path)

        sink.write_batch("payments", payments)

        data = json.loads((tmp_path / "payments.json").read_text(encoding="utf-8"))
        assert len(data) == 3
        assert data[0]["payment_id"] == "pay-0"
        assert data[0]["amount"] == "2500.50"
        assert data[0]["status"] == "approved"

    def test_pretty(self, tmp_path: Path) -> None:
        customer = Customer(
            "cust-001", "biz-001", "Zoë Achieng", "z@example.com", "1", KycStatus.APPROVED
        )
        sink = JsonFileSink(tmp_path, pretty=True)

        sink.write_batch("customers", [customer])

        text = (tmp_path / "customers.json").read_text(encoding="utf-8")
        assert "\n  " in text
        assert "Zoë Achieng" in text

    def test_close(
        self, tmp_path: Path, capsys: pytest.CaptureFixture, payments: list[Payment]
    ) -> None:
        sink = JsonFileSink(tmp_path)
        sink.write_batch("payments", payments)

        sink.close()

        out = capsys.readouterr().out
        assert str(tmp_path) in out
        assert "payments: 3 records" in out

    def test_mkdir_failure(self, tmp_path: Path) -> None:
        with patch.object(Path, "mkdir", side_effect=PermissionError("denied")):
            with pytest.raises(SinkError, match="Cannot create output directory"):
                JsonFileSink(tmp_path / "locked")

    def test_write_failure(self, tmp_path: Path, payments: list[Payment]) -> None:
        sink = JsonFileSink(tmp_path)

        with patch("builtins.open", side_effect=OSError("disk full")):
            with pytest.raises(SinkError, match="Failed to write"):
                sink.write_batch("payments", payments)
