import pandas as pd
import pytest
import yaml

import logging_config
from funnel_model import cli

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def fresh_logging():
    logging_config.reset_logging()
    yield
    logging_config.reset_logging()


def test_main_defaults(tmp_path, capsys):
    out_dir = tmp_path / "out"
    code = cli.main(["--output-dir", str(out_dir), "--log-dir", str(tmp_path / "logs")])

    assert code == 0
    printed = capsys.readouterr().out
    assert "customer_lifetime_value" in printed
    assert "New subscribers per month: 1,152" in printed

    cohort = pd.read_csv(out_dir / "cohort_table.csv")
    assert len(cohort) == 13
    assert cohort.loc[0, "retention"] == 1.0
    summary = pd.read_csv(out_dir / "analysis_summary.csv")
    assert set(summary["metric"]) >= {"customer_lifetime_value", "retention_rate"}
    states = pd.read_csv(out_dir / "state_metrics.csv")
    assert states["state"].tolist() == ["visitor", "registered", "subscriber", "retained", "churned"]
    assert (tmp_path / "logs" / "combined.log").exists()


def test_overrides_apply_on_top_of_config(tmp_path):
    cfg = tmp_path / "funnel.yaml"
    cfg.write_text(yaml.safe_dump({"funnel": {"rebill_rate": 50, "periods": 3}}))
    args = cli.parse_arguments(["--config", str(cfg), "--rebill-rate", "60", "--price", "10"])

    config = cli.resolve_config(args)
    assert config.funnel.rebill_rate == 60
    assert config.funnel.periods == 3
    assert config.funnel.monthly_price == 10


def test_custom_chain_from_config(tmp_path):
    cfg = tmp_path / "chain.yaml"
    cfg.write_text(yaml.safe_dump({
        "funnel": {"periods": 2},
        "chain": {
            "states": [{"id": "paid"}, {"id": "lapsed", "is_absorbing": True}],
            "transitions": [
                {"from": "paid", "to": "paid", "probability": 0.5},
                {"from": "paid", "to": "lapsed", "probability": 0.5},
                {"from": "lapsed", "to": "lapsed", "probability": 1.0},
            ],
        },
    }))
    out_dir = tmp_path / "out"
    code = cli.main(["--config", str(cfg), "--output-dir", str(out_dir), "--log-dir", str(tmp_path / "logs")])

    assert code == 0
    cohort = pd.read_csv(out_dir / "cohort_table.csv")
    assert cohort["retention"].tolist() == pytest.approx([1.0, 0.5, 0.25])


def test_invalid_rate_returns_error(tmp_path):
    code = cli.main(["--rebill-rate", "150", "--log-dir", str(tmp_path / "logs")])
    assert code == 1


def test_missing_config_returns_error(tmp_path):
    code = cli.main(["--config", str(tmp_path / "missing.yaml"), "--log-dir", str(tmp_path / "logs")])
    assert code == 1


def test_singular_chain_returns_error(tmp_path):
    cfg = tmp_path / "stuck.yaml"
    cfg.write_text(yaml.safe_dump({
        "chain": {
            "states": [{"id": "stuck"}, {"id": "gone", "is_absorbing": True}],
            "transitions": [
                {"from": "stuck", "to": "stuck", "probability": 1.0},
                {"from": "gone", "to": "gone", "probability": 1.0},
            ],
        },
    }))
    code = cli.main(["--config", str(cfg), "--log-dir", str(tmp_path / "logs")])
    assert code == 1


def test_debug_flag_writes_module_debug_records(tmp_path):
    log_dir = tmp_path / "logs"
    code = cli.main(["--debug", "--log-dir", str(log_dir)])

    assert code == 0
    debug_log = (log_dir / "debug_detail.log").read_text(encoding="utf-8")
    assert "Steady state converged" in debug_log
    assert "funnel_model.chain.calculator" in debug_log


def test_debug_log_absent_without_flag(tmp_path):
    log_dir = tmp_path / "logs"
    assert cli.main(["--log-dir", str(log_dir)]) == 0
    assert not (log_dir / "debug_detail.log").exists()


def test_chain_option_loads_definition(tmp_path):
    chain_file = tmp_path / "trial.yaml"
    chain_file.write_text(yaml.safe_dump({
        "states": [{"id": "trial"}, {"id": "gone", "is_absorbing": True}],
        "transitions": [
            {"from": "trial", "to": "trial", "probability": 0.8},
            {"from": "trial", "to": "gone", "probability": 0.2},
            {"from": "gone", "to": "gone", "probability": 1.0},
        ],
    }))
    out_dir = tmp_path / "out"
    code = cli.main([
        "--chain", str(chain_file), "--periods", "2",
        "--output-dir", str(out_dir), "--log-dir", str(tmp_path / "logs"),
    ])

    assert code == 0
    cohort = pd.read_csv(out_dir / "cohort_table.csv")
    assert cohort["retention"].tolist() == pytest.approx([1.0, 0.8, 0.64])
    states = pd.read_csv(out_dir / "state_metrics.csv")
    assert states["state"].tolist() == ["trial", "gone"]
    assert states["expected_steps"].tolist() == pytest.approx([5.0, 0.0])


def test_missing_chain_file_returns_error(tmp_path):
    code = cli.main(["--chain", str(tmp_path / "missing.yaml"), "--log-dir", str(tmp_path / "logs")])
    assert code == 1
