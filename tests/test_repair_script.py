import importlib.util
import json
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "repair_datastore.py"


@pytest.fixture(scope="module")
def repair():
    spec = importlib.util.spec_from_file_location("repair_datastore", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestRenameKeys:
    def test_snake_case(self, repair):
        assert repair.snake_case("paymentSessions") == "payment_sessions"
        assert repair.snake_case("checkInDate") == "check_in_date"
        assert repair.snake_case("already_snake") == "already_snake"

    def test_nested_records(self, repair):
        record = {"bookings": [{"checkInDate": "2026-03-10", "pricing": {"totalPaid": 100}}]}
        assert repair.rename_keys(record) == 2
        assert record == {"bookings": [{"check_in_date": "2026-03-10", "pricing": {"total_paid": 100}}]}

    def test_existing_snake_key_wins(self, repair):
        record = {"walletBalance": 10, "wallet_balance": 25}
        assert repair.rename_keys(record) == 0
        assert record["wallet_balance"] == 25


class TestRun:
    def test_rewrites_legacy_file_with_backup(self, repair, tmp_path):
        path = tmp_path / "hut-data.json"
        path.write_text(
            json.dumps({"users": [{"id": "u1", "walletBalance": 300}], "paymentSessions": [{"id": "s1"}]}),
            encoding="utf-8",
        )
        repair.run(path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["users"][0]["wallet_balance"] == 300
        assert data["payment_sessions"][0]["status"] == "pending"
        assert "paymentSessions" not in data
        assert len(list(tmp_path.glob("hut-data.json.repair-backup-*"))) == 1

    def test_dry_run_leaves_file_alone(self, repair, tmp_path):
        path = tmp_path / "hut-data.json"
        original = json.dumps({"users": [{"id": "u1", "walletBalance": 300}]})
        path.write_text(original, encoding="utf-8")
        repair.run(path, dry_run=True)
        assert path.read_text(encoding="utf-8") == original

    def test_missing_file(self, repair, tmp_path):
        with pytest.raises(FileNotFoundError):
            repair.run(tmp_path / "absent.json")
