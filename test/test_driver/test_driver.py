"""Test the driver and the command-line interface on a small event file."""

import csv
import os

import h5py
import pytest
import yaml

from detqa import Driver
from detqa.bin.cli import cli
from detqa.io.results import read_histogram


def read_rows(path):
    """Reads a CSV file into a list of dictionaries."""
    with open(path, "r", encoding="utf-8") as in_file:
        return list(csv.DictReader(in_file))


@pytest.fixture(name="driver_cfg")
def fixture_driver_cfg(event_file, tmp_path):
    """Full driver configuration, which reads the test event file."""
    return {
        "base": {"seed": 0, "log_dir": str(tmp_path / "logs"), "verbosity": "warning"},
        "io": {"reader": {"name": "hdf5", "file_keys": event_file, "create_run_map": True}},
        "calo": {"led_removal": True, "cell_selection": True},
        "reco": {"v0": {"min_cpa": 0.99}},
        "qa": {"tpc_pid": None, "trd_pid": {"min_ntracklets": 6}},
        "ana": {"overwrite": True, "v0_candidates": None},
    }


class TestDriver:
    """Test the event loop of the driver."""

    def test_initialize(self, driver_cfg, tmp_path):
        """The driver builds every configured stage."""
        driver = Driver(driver_cfg)
        assert len(driver) == 4
        assert driver.iterations == 4
        assert driver.log_prefix == "events_test"
        assert driver.output == os.path.join(str(tmp_path / "logs"), "events_test_qa.h5")
        assert driver.calo is not None
        assert driver.reco is not None
        assert list(driver.qa.modules.keys()) == ["tpc_pid", "trd_pid"]

    def test_process(self, driver_cfg):
        """Each entry goes through every stage."""
        driver = Driver(driver_cfg)
        data = driver.process(entry=1)
        assert data["accepted"]
        assert data["event"].event == 1
        assert len(data["v0_candidates"]) == 1
        assert data["clusters"][0].n_cells == 2

        data = driver.process(run=1000, event=3)
        assert data["index"] == 3

        with pytest.raises(AssertionError):
            driver.process()

    def test_iterate(self, driver_cfg):
        """The driver can be iterated over."""
        driver = Driver(driver_cfg)
        events = [data["event"].event for data in driver]
        assert events == [0, 1, 2, 3]

    def test_rejected(self, driver_cfg):
        """Rejected events skip the downstream stages."""
        driver_cfg["calo"] = {"exotic_removal": True, "exotic_energy": 10.0}
        driver = Driver(driver_cfg)
        data = driver.process(entry=0)
        assert not data["accepted"]
        assert "v0_candidates" not in data
        assert driver.qa["trd_pid"].histos["fLikeTRD"].entries == 0

    def test_iterations(self, driver_cfg):
        """The number of iterations must not exceed the number of entries."""
        driver_cfg["base"]["iterations"] = 2
        assert Driver(driver_cfg).iterations == 2

        driver_cfg["base"]["iterations"] = 5
        with pytest.raises(AssertionError):
            Driver(driver_cfg)

    def test_random_seed(self, driver_cfg):
        """A seed is drawn when none is provided."""
        del driver_cfg["base"]["seed"]
        driver = Driver(driver_cfg)
        assert driver.seed > 0
        assert driver.cfg["base"]["seed"] == driver.seed

    def test_get_prefix(self):
        """The prefix summarizes the list of input files."""
        assert Driver.get_prefix(["/data/events_1.h5"]) == "events_1"
        assert Driver.get_prefix(["a/events_1.h5", "b/events_3.h5"]) == "events_--1--3"
        files = ["events_1_reco.h5", "events_2_reco.h5", "events_3_reco.h5"]
        assert Driver.get_prefix(files) == "events_--1--1--3--_reco"

    @pytest.mark.slow
    def test_run(self, driver_cfg, tmp_path):
        """The full loop logs every entry and stores the QA output."""
        driver = Driver(driver_cfg)
        driver.run()

        log_dir = tmp_path / "logs"
        rows = read_rows(log_dir / "detqa_log.csv")
        assert [int(row["iter"]) for row in rows] == [0, 1, 2, 3]
        assert all(row["run"] == "1000" for row in rows)
        assert "read_time" in rows[0]
        assert "qa_trd_pid_time" in rows[0]

        assert len(read_rows(log_dir / "v0_candidates_candidates.csv")) == 4

        with h5py.File(driver.output, "r") as in_file:
            assert yaml.safe_load(in_file["info"].attrs["cfg"])["reco"] == driver_cfg["reco"]
            hist = read_histogram(in_file["trd_pid/histos/fLikeTRD"])
            assert hist.entries == 12
            assert "6Tracklets" in in_file["trd_pid/results/thresholds"]

    @pytest.mark.slow
    def test_writer(self, driver_cfg, tmp_path):
        """Accepted events can be written back to file."""
        output = str(tmp_path / "selected.h5")
        driver_cfg["io"]["writer"] = {"name": "hdf5", "file_name": output}
        driver_cfg["base"]["iterations"] = 2
        driver = Driver(driver_cfg)
        driver.run()

        with h5py.File(output, "r") as in_file:
            assert len(in_file["events"]) == 2
            assert len(in_file["clusters/cell_ids"]) == 2 * 3


class TestCLI:
    """Test the command-line entry point."""

    @pytest.mark.slow
    def test_cli(self, event_file, tmp_path):
        """The configuration is completed from the command line."""
        config = tmp_path / "qa.yaml"
        config.write_text("""
base:
  seed: 0
  verbosity: warning
io:
  reader:
    name: hdf5
qa:
  trd_pid:
    min_ntracklets: 4
""")
        output = str(tmp_path / "out" / "qa.h5")
        cli(
            [
                "-c",
                str(config),
                "-s",
                event_file,
                "-n",
                "3",
                "-o",
                output,
                "--log-dir",
                str(tmp_path / "logs"),
                "--set",
                "qa.trd_pid.min_ntracklets=6",
            ]
        )

        assert len(read_rows(tmp_path / "logs" / "detqa_log.csv")) == 3
        with h5py.File(output, "r") as in_file:
            assert set(in_file["trd_pid/results/thresholds"].keys()) == {"6Tracklets"}

    def test_missing_reader(self, tmp_path):
        """The configuration must define a reader."""
        config = tmp_path / "qa.yaml"
        config.write_text("base:\n  seed: 0\n")
        with pytest.raises(KeyError):
            cli(["-c", str(config)])

    def test_invalid_override(self, event_file, tmp_path):
        """Overrides must be of the form key=value."""
        config = tmp_path / "qa.yaml"
        config.write_text("io:\n  reader:\n    name: hdf5\n")
        with pytest.raises(ValueError):
            cli(["-c", str(config), "-s", event_file, "--set", "qa.trd_pid"])
