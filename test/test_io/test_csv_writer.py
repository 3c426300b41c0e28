"""Test the CSV row writer."""

import pytest

from detqa.io import CSVWriter


@pytest.fixture(name="csv_path")
def fixture_csv_path(tmp_path):
    """Path to a CSV file which does not exist yet."""
    return str(tmp_path / "rows.csv")


def read_lines(path):
    """Reads the lines of a text file."""
    with open(path, "r", encoding="utf-8") as in_file:
        return in_file.read().splitlines()


class TestCSVWriter:
    """Test the creation and the extension of CSV files."""

    def test_append(self, csv_path):
        """The first row sets the header."""
        writer = CSVWriter(csv_path)
        writer.append({"run": 1000, "event": 0, "mass": 1.115})
        writer.append({"run": 1000, "event": 1, "mass": 1.12})
        assert read_lines(csv_path) == ["run,event,mass", "1000,0,1.115", "1000,1,1.12"]

    def test_key_order(self, csv_path):
        """Rows with the keys in a different order follow the header."""
        writer = CSVWriter(csv_path)
        writer.append({"a": 1, "b": 2})
        writer.append({"b": 4, "a": 3})
        assert read_lines(csv_path)[-1] == "3,4"

    def test_existing_file(self, csv_path):
        """Existing files are protected, unless overwritten or extended."""
        CSVWriter(csv_path).append({"a": 1, "b": 2})
        with pytest.raises(FileExistsError):
            CSVWriter(csv_path)

        writer = CSVWriter(csv_path, append=True)
        assert writer.result_keys == ["a", "b"]
        writer.append({"a": 3, "b": 4})
        assert read_lines(csv_path) == ["a,b", "1,2", "3,4"]

        CSVWriter(csv_path, overwrite=True).append({"c": 5})
        assert read_lines(csv_path) == ["c", "5"]

    def test_append_missing(self, tmp_path):
        """Only existing files can be extended."""
        with pytest.raises(FileNotFoundError):
            CSVWriter(str(tmp_path / "missing.csv"), append=True)

    def test_key_mismatch(self, csv_path):
        """New keys are never accepted, missing keys only when requested."""
        writer = CSVWriter(csv_path)
        writer.append({"a": 1, "b": 2})
        with pytest.raises(AssertionError):
            writer.append({"a": 1, "b": 2, "c": 3})
        with pytest.raises(AssertionError):
            writer.append({"a": 1})

        writer = CSVWriter(csv_path, append=True, accept_missing=True)
        writer.append({"b": 7})
        assert read_lines(csv_path)[-1] == "-1,7"
