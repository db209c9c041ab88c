import json

import pytest

from autodash.main import main, parse_filter_arguments
from autodash.utils.exceptions import LLMException

from conftest import FakeLLMClient


def test_parse_filter_arguments():
    filters = parse_filter_arguments(["region=East,West", "product=Widget", "region=North"])

    assert filters == {"region": ["East", "West", "North"], "product": ["Widget"]}


@pytest.mark.parametrize("value", ["region", "=East"])
def test_parse_filter_arguments_rejects_malformed(value):
    with pytest.raises(ValueError):
        parse_filter_arguments([value])


def test_cli_prints_dashboard(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(
        "autodash.services.suggestion_service.default_llm_client",
        FakeLLMClient(error=LLMException("offline")),
    )
    path = tmp_path / "sales.csv"
    path.write_text(
        "region,revenue\n"
        + "\n".join(f"{region},{value}" for region, value in [
            ("East", 10), ("West", 20), ("East", 30), ("North", 40), ("West", 50), ("East", 60),
        ])
    )

    exit_code = main([str(path), "--filter", "region=East"])

    output = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert output["dashboard"]["data_count"] == 3
    assert output["dashboard"]["total_count"] == 6
    assert output["schema"]["measures"][0]["name"] == "revenue"


def test_cli_reports_unsupported_file(tmp_path):
    path = tmp_path / "data.txt"
    path.write_text("hello")

    assert main([str(path)]) == 1


def test_cli_rejects_malformed_filter(tmp_path):
    path = tmp_path / "sales.csv"
    path.write_text("region,revenue\nEast,1\n")

    with pytest.raises(SystemExit) as exc_info:
        main([str(path), "--filter", "region"])

    assert exc_info.value.code == 2


def test_cli_does_not_report_internal_errors_as_usage_errors(tmp_path, monkeypatch):
    async def broken_run(args, filters):
        raise ValueError("bad cell")

    monkeypatch.setattr("autodash.main.run", broken_run)

    with pytest.raises(ValueError, match="bad cell"):
        main([str(tmp_path / "sales.csv"), "--filter", "region=East"])
