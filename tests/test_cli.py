import json
import os

import pytest
from tsr_sim import cli
from tsr_sim.state import FlightPhase


def test_parse_args_defaults():
    args = cli.parse_args([])
    assert args.output_dir == "plots"
    assert args.quiet is False
    assert args.no_plots is False
    assert args.csv is False
    assert args.full_mission is False
    assert args.rocket is None
    assert args.dt is None
    assert args.max_time is None
    assert args.landing_reserve == 0.0
    assert args.stop_on_orbit is False


def test_parse_args_overrides():
    args = cli.parse_args(["-q", "--dt", "0.1", "--max-time", "50", "--landing-reserve", "1200",
                           "--full-mission", "-o", "out"])
    assert args.quiet
    assert args.dt == 0.1
    assert args.max_time == 50.0
    assert args.landing_reserve == 1200.0
    assert args.full_mission
    assert args.output_dir == "out"


def test_build_config():
    cfg = cli.build_config(cli.parse_args(["-q", "--dt", "0.1", "--landing-reserve", "900",
                                           "--stop-on-orbit"]))
    assert cfg.dt == 0.1
    assert cfg.booster_landing_reserve_kg == 900.0
    assert cfg.stop_on_orbit
    assert cfg.verbose is False


def test_load_rocket(tmp_path):
    path = tmp_path / "rocket.json"
    path.write_text(json.dumps({"name": "Test Vehicle", "stage2": {"thrust": 80000}}))
    rocket = cli.load_rocket(str(path))
    assert rocket.name == "Test Vehicle"
    assert rocket.stage2.thrust == 80000.0


def test_main_writes_csv(tmp_path):
    final_state = cli.main(["--quiet", "--no-plots", "--csv", "--max-time", "2",
                            "-o", str(tmp_path)])
    assert final_state.phase is FlightPhase.BURNING
    assert os.path.exists(tmp_path / "telemetry.csv")
    assert not any(name.endswith(".png") for name in os.listdir(tmp_path))


def test_main_generates_plots(tmp_path):
    cli.main(["--quiet", "--max-time", "3", "-o", str(tmp_path)])
    assert os.path.exists(tmp_path / "01_altitude_profile.png")


def test_main_missing_rocket_file(tmp_path):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--quiet", "--rocket", str(tmp_path / "missing.json")])
    assert exc.value.code == 2


def test_main_invalid_rocket(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"stage1": {"fuel_mass": -5}}))
    with pytest.raises(SystemExit) as exc:
        cli.main(["--quiet", "--rocket", str(path)])
    assert exc.value.code == 2


def test_main_invalid_dt():
    with pytest.raises(SystemExit) as exc:
        cli.main(["--quiet", "--dt", "0"])
    assert exc.value.code == 2
