"""Tests for the command line interface."""

import json
import sys

import pytest

import exitmatch.__main__ as cli
from exitmatch.__main__ import main

BUSINESS = {
    "id": "biz-1",
    "industry": "Technology",
    "asking_price": 2_500_000,
    "annual_revenue": 850_000,
    "location": "London, UK",
    "employees": 30,
}

BUYER = {
    "id": "buyer-1",
    "industries": ["Technology"],
    "min_budget": 1_000_000,
    "max_budget": 3_000_000,
    "preferred_locations": ["London, UK"],
}


def write_json(path, data):
    path.write_text(json.dumps(data))
    return str(path)


def run_cli(monkeypatch, capsys, *args):
    monkeypatch.setattr(sys, "argv", ["exitmatch", *args])
    main()
    return json.loads(capsys.readouterr().out)


class TestMatchCommand:
    """Tests for `exitmatch match`."""

    def test_single_business(self, tmp_path, monkeypatch, capsys):
        business = write_json(tmp_path / "business.json", BUSINESS)
        buyer = write_json(tmp_path / "buyer.json", BUYER)
        result = run_cli(monkeypatch, capsys, "match", "-b", business, "--buyer", buyer, "--analysis")
        assert result["details"]["factors"]["industry_alignment"] == 100
        assert result["match_record"]["recommended"] is True
        assert result["analysis"]["estimated_time_to_close"] == "4-8 months"

    def test_ranks_a_list(self, tmp_path, monkeypatch, capsys):
        businesses = [
            {**BUSINESS, "id": "poor", "industry": "Hospitality", "location": "Edinburgh"},
            BUSINESS,
        ]
        business = write_json(tmp_path / "businesses.json", businesses)
        buyer = write_json(tmp_path / "buyer.json", BUYER)
        result = run_cli(monkeypatch, capsys, "match", "-b", business, "--buyer", buyer, "-l", "1")
        assert [r["business_id"] for r in result] == ["biz-1"]

    def test_missing_file_exits(self, tmp_path, monkeypatch):
        buyer = write_json(tmp_path / "buyer.json", BUYER)
        monkeypatch.setattr(
            sys, "argv", ["exitmatch", "match", "-b", str(tmp_path / "nope.json"), "--buyer", buyer]
        )
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 1

    def test_invalid_record_exits(self, tmp_path, monkeypatch):
        business = write_json(tmp_path / "business.json", {**BUSINESS, "asking_price": -5})
        buyer = write_json(tmp_path / "buyer.json", BUYER)
        monkeypatch.setattr(sys, "argv", ["exitmatch", "match", "-b", business, "--buyer", buyer])
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 1


class TestValueCommand:
    """Tests for `exitmatch value`."""

    def test_writes_output_file(self, tmp_path, monkeypatch):
        answers = write_json(
            tmp_path / "answers.json",
            {"sector": "saas_b2b", "annual_revenue": 1_000_000, "profit_type": "ebitda",
             "profit_value": 200_000, "growth_rate": 25, "recurring_revenue_percentage": 70},
        )
        output = tmp_path / "out" / "valuation.json"
        monkeypatch.setattr(
            sys, "argv", ["exitmatch", "-o", str(output), "value", "-i", answers, "--seed", "1"]
        )
        main()
        result = json.loads(output.read_text())
        assert result["valuation_range"]["typical"] == 3_792_000


class TestIndustriesCommand:
    """Tests for `exitmatch industries`."""

    def test_by_key(self, monkeypatch, capsys):
        result = run_cli(monkeypatch, capsys, "industries", "-k", "saas_b2b")
        assert result["ebitda_multiple"]["typical"] == 15

    def test_by_category(self, monkeypatch, capsys):
        result = run_cli(monkeypatch, capsys, "industries", "--category", "Technology")
        assert "saas_b2b" in result
        assert all(ind["category"] == "Technology" for ind in result.values())

    def test_unknown_key_exits(self, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["exitmatch", "industries", "-k", "time_travel"])
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 1

    def test_unknown_key_is_logged(self, monkeypatch, caplog):
        monkeypatch.setattr(sys, "argv", ["exitmatch", "industries", "-k", "time_travel"])
        with pytest.raises(SystemExit):
            main()
        assert "Unknown industry: time_travel" in caplog.text

    def test_other_key_errors_are_not_reported_as_unknown_industry(self, tmp_path, monkeypatch):
        def broken(args):
            raise KeyError("annual_revenue")

        monkeypatch.setattr(cli, "run_value", broken)
        answers = write_json(tmp_path / "answers.json", {})
        monkeypatch.setattr(sys, "argv", ["exitmatch", "value", "-i", answers])
        with pytest.raises(KeyError):
            main()
