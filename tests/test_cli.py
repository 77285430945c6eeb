"""Tests for the command line interface."""

import json

import pandas as pd
from click.testing import CliRunner

from housing_cleaner.cli import main


class TestCli:

    def test_cleans_file(self, nashville_csv, tmp_path):
        out = tmp_path / "out.csv"
        result = CliRunner().invoke(main, ["--input", str(nashville_csv), "--output", str(out)])
        assert result.exit_code == 0, result.output
        assert '"rows_after": 5' in result.output
        cleaned = pd.read_csv(out)
        assert "sale_date_raw" not in cleaned.columns
        assert sorted(cleaned["id"]) == [1, 2, 3, 5, 6]

    def test_default_output_path(self, nashville_csv):
        result = CliRunner().invoke(main, ["--input", str(nashville_csv)])
        assert result.exit_code == 0, result.output
        assert (nashville_csv.parent / "nashville_cleaned.csv").exists()

    def test_keep_raw_date(self, nashville_csv, tmp_path):
        out = tmp_path / "out.csv"
        result = CliRunner().invoke(
            main, ["--input", str(nashville_csv), "--output", str(out), "--keep-raw-date"]
        )
        assert result.exit_code == 0, result.output
        assert "sale_date_raw" in pd.read_csv(out).columns

    def test_column_map(self, tmp_path, records_frame):
        source = tmp_path / "custom.csv"
        records_frame.rename(columns={"parcel_id": "Parcel"}).to_csv(source, index=False)
        mapping = tmp_path / "map.json"
        mapping.write_text(json.dumps({"columns": {"Parcel": "parcel_id"}}))
        result = CliRunner().invoke(
            main,
            ["--input", str(source), "--output", str(tmp_path / "o.csv"), "--column-map", str(mapping)],
        )
        assert result.exit_code == 0, result.output

    def test_invalid_column_map(self, nashville_csv, tmp_path):
        mapping = tmp_path / "map.json"
        mapping.write_text(json.dumps(["not", "a", "map"]))
        result = CliRunner().invoke(main, ["--input", str(nashville_csv), "--column-map", str(mapping)])
        assert result.exit_code == 2

    def test_missing_column_exits_with_error(self, tmp_path):
        source = tmp_path / "bad.csv"
        pd.DataFrame({"ParcelID": ["1"], "SaleDate": ["2013-04-09"]}).to_csv(source, index=False)
        result = CliRunner().invoke(main, ["--input", str(source)])
        assert result.exit_code == 1
        assert "Error:" in result.output
