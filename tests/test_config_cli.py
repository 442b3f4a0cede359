import json
from datetime import date
from pathlib import Path

import pytest
from dateutil.relativedelta import relativedelta
from typer.testing import CliRunner

from isda_bootstrap.cli import app
from isda_bootstrap.config import build_params, build_quotes, load_config
from isda_bootstrap.conventions import BusinessDayConvention, HolidayCalendar, StubType
from isda_bootstrap.dates import next_imm_date, parse_tenor, previous_imm_date, standard_maturity
from isda_bootstrap.exceptions import ConfigurationError, InvalidArgumentError

SAMPLE_CONFIG = Path(__file__).resolve().parents[1] / "examples" / "sample_quotes.yaml"

runner = CliRunner()


def test_parse_tenor():
    assert parse_tenor("3M") == relativedelta(months=3)
    assert parse_tenor("5y") == relativedelta(years=5)
    assert parse_tenor("1W") == relativedelta(weeks=1)
    with pytest.raises(InvalidArgumentError):
        parse_tenor("3X")
    with pytest.raises(InvalidArgumentError):
        parse_tenor("0M")


def test_imm_dates():
    assert previous_imm_date(date(2013, 6, 12)) == date(2013, 3, 20)
    assert previous_imm_date(date(2013, 6, 20)) == date(2013, 6, 20)
    assert previous_imm_date(date(2013, 1, 5)) == date(2012, 12, 20)
    assert next_imm_date(date(2013, 6, 20)) == date(2013, 9, 20)
    assert next_imm_date(date(2013, 12, 21)) == date(2014, 3, 20)
    assert standard_maturity(date(2013, 6, 12), "5Y") == date(2018, 6, 20)


def test_build_params_from_sample():
    params = build_params(load_config(SAMPLE_CONFIG))
    assert params.valuation_date == date(2013, 6, 12)
    assert params.stub_type is StubType.FRONT_SHORT
    assert params.business_day_convention is BusinessDayConvention.FOLLOWING
    assert isinstance(params.calendar, HolidayCalendar)
    assert date(2013, 7, 4) in params.calendar.holidays
    assert params.coupon_step == relativedelta(months=3)


def test_quotes_from_tenors_and_dates(tmp_path):
    config = {
        "valuation_date": "2013-06-12",
        "quotes": [
            {"tenor": "1Y", "spread_bps": 80},
            {"maturity": "2016-06-20", "spread_bps": 120},
        ],
    }
    path = tmp_path / "quotes.json"
    path.write_text(json.dumps(config), encoding="utf-8")
    loaded = load_config(path)
    params = build_params(loaded)
    quotes = build_quotes(loaded, params)
    assert [q.maturity for q in quotes] == [date(2014, 6, 20), date(2016, 6, 20)]
    assert quotes[0].tenor == "1Y"
    assert quotes[1].spread_decimal == pytest.approx(0.012)


def test_bad_configuration_raises():
    with pytest.raises(ConfigurationError):
        build_params({"valuation_date": "2013-06-12", "isda": {"stub_type": "sideways"}})
    with pytest.raises(ConfigurationError):
        build_params({})
    params = build_params({"valuation_date": "2013-06-12"})
    with pytest.raises(ConfigurationError):
        build_quotes({"quotes": [{"spread_bps": 100}]}, params)
    with pytest.raises(ConfigurationError):
        build_quotes({"quotes": []}, params)


def test_load_config_requires_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_load_config_wraps_parse_and_io_errors(tmp_path):
    broken_yaml = tmp_path / "broken.yaml"
    broken_yaml.write_text("quotes: [1, 2\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(broken_yaml)
    broken_json = tmp_path / "broken.json"
    broken_json.write_text("{valuation_date: 2013-06-12}", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(broken_json)
    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "missing.yaml")


def test_calibrate_command_rejects_malformed_config(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{valuation_date: 2013-06-12}", encoding="utf-8")
    result = runner.invoke(app, ["calibrate", str(path), "--no-plots"])
    assert result.exit_code == 2
    assert not isinstance(result.exception, ValueError)


def test_calibrate_command_without_plots():
    result = runner.invoke(app, ["calibrate", str(SAMPLE_CONFIG), "--no-plots"])
    assert result.exit_code == 0, result.output
    assert "Calibrated hazard rates" in result.output
    assert "2018-06-20" in result.output


def test_calibrate_command_writes_plots(tmp_path):
    result = runner.invoke(app, ["calibrate", str(SAMPLE_CONFIG), "--plot-dir", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "hazard_curve.png").exists()
    assert (tmp_path / "par_spread_errors.png").exists()


def test_schedule_command():
    result = runner.invoke(app, ["schedule", "2014-06-20", "2014-12-20"])
    assert result.exit_code == 0, result.output
    assert "2014-09-22" in result.output
    assert "2014-12-21" in result.output


def test_schedule_command_rejects_bad_dates():
    result = runner.invoke(app, ["schedule", "2014-12-20", "2014-06-20"])
    assert result.exit_code != 0
    result = runner.invoke(app, ["schedule", "not-a-date", "2014-06-20"])
    assert result.exit_code != 0
