import csv
import json

import pytest
from click.testing import CliRunner

from loan_amort.main import cli


@pytest.fixture
def runner():
    return CliRunner()


class TestScheduleCommand:
    def test_prints_summary_and_schedule(self, runner):
        result = runner.invoke(
            cli, ["schedule", "-p", "12k", "-r", "12", "-t", "12", "--policy", "fixedPrincipal"]
        )
        assert result.exit_code == 0, result.output
        assert "Fixed principal" in result.output
        assert "$1,120.00" in result.output
        assert "12\t$1,010.00\t$1,000.00\t$10.00\t$0.00" in result.output

    def test_years_unit(self, runner):
        result = runner.invoke(cli, ["schedule", "-p", "300k", "-r", "5.5", "-t", "30", "--term-unit", "years"])
        assert result.exit_code == 0, result.output
        assert "Payments           : 360" in result.output
        assert "showing first 120 rows" in result.output

    def test_search(self, runner):
        result = runner.invoke(cli, ["schedule", "-p", "12000", "-r", "0", "-t", "12", "--search", "11"])
        assert result.exit_code == 0, result.output
        rows = [line for line in result.output.splitlines() if line.startswith("11\t")]
        assert rows == ["11\t$1,000.00\t$1,000.00\t$0.00\t$1,000.00"]

    def test_compact(self, runner):
        result = runner.invoke(cli, ["schedule", "-p", "12000", "-r", "0", "-t", "12", "--compact"])
        assert result.exit_code == 0, result.output
        assert "Total payment      : $12K" in result.output

    def test_json_export(self, runner, tmp_path):
        path = tmp_path / "schedule.json"
        result = runner.invoke(
            cli, ["schedule", "-p", "12000", "-r", "12", "-t", "12", "--policy", "fixedInterest", "--output", str(path)]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["loan"]["policy"] == "fixedInterest"
        assert data["summary"]["total_interest"] == pytest.approx(1440.0)
        assert len(data["schedule"]) == 12
        assert set(data["schedule"][0]) == {"period", "payment", "principal", "interest", "remaining_balance"}

    def test_csv_export(self, runner, tmp_path):
        path = tmp_path / "schedule.csv"
        result = runner.invoke(cli, ["schedule", "-p", "12000", "-r", "6", "-t", "12", "--output", str(path)])
        assert result.exit_code == 0, result.output
        with path.open(newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows[0] == ["Period", "Payment", "Principal", "Interest", "Remaining_Balance"]
        assert len(rows) == 13
        assert float(rows[-1][4]) == 0.0

    def test_unsupported_export(self, runner, tmp_path):
        result = runner.invoke(cli, ["schedule", "--output", str(tmp_path / "out.txt")])
        assert result.exit_code == 2
        assert "Unsupported output format" in result.output


class TestValidationErrors:
    @pytest.mark.parametrize(
        "args,message",
        [
            (["-p", "0"], "Loan amount must be positive"),
            (["--rate=-1"], "Interest rate must not be negative"),
            (["-t", "0"], "Loan term must be positive"),
            (["-p", "lots"], "Invalid amount"),
        ],
    )
    def test_bad_input(self, runner, args, message):
        result = runner.invoke(cli, ["summary"] + args)
        assert result.exit_code == 2
        assert message in result.output


class TestSummaryCommand:
    def test_default_loan(self, runner):
        result = runner.invoke(cli, ["summary"])
        assert result.exit_code == 0, result.output
        assert "Even distribution" in result.output
        assert "$1,703,367.00" in result.output

    def test_json_only(self, runner, tmp_path):
        path = tmp_path / "summary.json"
        result = runner.invoke(cli, ["summary", "-p", "12000", "-r", "0", "-t", "12", "--output", str(path)])
        assert result.exit_code == 0, result.output
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data == {"summary": {"total_payment": 12000.0, "total_interest": 0.0, "monthly_payment": 1000.0}}


class TestCompareCommand:
    def test_all_policies(self, runner):
        result = runner.invoke(cli, ["compare", "-p", "12000", "-r", "12", "-t", "12"])
        assert result.exit_code == 0, result.output
        for label in ("Fixed principal", "Even distribution", "Fixed interest"):
            assert label in result.output

    def test_selected_policies(self, runner):
        result = runner.invoke(
            cli, ["compare", "-p", "12000", "-r", "12", "-t", "12", "--policy", "fixedInterest", "--policy", "fixedPrincipal"]
        )
        assert result.exit_code == 0, result.output
        assert "Even distribution" not in result.output
        assert "-660.00" in result.output
