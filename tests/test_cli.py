"""Tests for the validate / normalize / report commands."""

import json
from pathlib import Path

import pytest

from humdata_pipeline import cli
from humdata_pipeline.cli import infer_dataset_type, load_dataset_file, main

# ─── Helpers ──────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _keep_root_logging(monkeypatch):
    """main() reconfigures the root logger; leave pytest's capture handlers alone."""
    monkeypatch.setattr(cli, "configure_global_logging", lambda *args, **kwargs: None)


def _write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


def _dataset_file(path: Path, records, **metadata) -> Path:
    return _write_json(path, {"metadata": metadata, "data": records})


def _write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "pipeline.yaml"
    path.write_text(text)
    return path


# ─── File helpers ────────────────────────────────────────────────────────────


class TestLoadDatasetFile:
    def test_wrapped(self, tmp_path, casualty_records):
        path = _dataset_file(tmp_path / "daily.json", casualty_records, dataset="casualties")
        records, metadata = load_dataset_file(path)
        assert records == casualty_records
        assert metadata == {"dataset": "casualties"}

    def test_bare_list(self, tmp_path, casualty_records):
        records, metadata = load_dataset_file(_write_json(tmp_path / "daily.json", casualty_records))
        assert records == casualty_records
        assert metadata == {}

    def test_non_mapping_metadata_ignored(self, tmp_path):
        path = _write_json(tmp_path / "daily.json", {"metadata": "v2", "data": []})
        assert load_dataset_file(path) == ([], {})


class TestInferDatasetType:
    def test_explicit_wins(self):
        assert infer_dataset_type(Path("a/b.json"), {"dataset": "conflict"}, "healthcare") == "healthcare"

    def test_metadata(self):
        assert infer_dataset_type(Path("a/b.json"), {"dataset_type": " conflict "}) == "conflict"

    def test_path_fallback(self):
        assert infer_dataset_type(Path("data/Goodshepherd/Healthcare.json"), {}) == "goodshepherd/healthcare"


# ─── validate ────────────────────────────────────────────────────────────────


class TestValidateCommand:
    def test_passing_dataset(self, tmp_path, casualty_records, capsys):
        path = _dataset_file(tmp_path / "daily.json", casualty_records, dataset="casualties")
        assert main(["validate", str(path)]) == 0
        out = capsys.readouterr().out
        assert "Validation Summary" in out
        assert "Passed: 1" in out

    def test_failing_dataset(self, tmp_path):
        records = [{"date": "2024-01-15", "facility_name": "Al-Shifa"}]
        path = _write_json(tmp_path / "attacks.json", records)
        assert main(["validate", str(path), "--type", "healthcare"]) == 1

    def test_write_result_file(self, tmp_path, casualty_records):
        path = _write_json(tmp_path / "gaza" / "casualties.json", casualty_records)
        assert main(["validate", str(path), "--write"]) == 0

        result = json.loads((tmp_path / "gaza" / "casualties_validation.json").read_text())
        assert result["dataset_type"] == "gaza/casualties"
        assert result["schema"] == "casualties"
        assert result["meets_threshold"] is True
        assert result["record_count"] == 3

    def test_unreadable_file(self, tmp_path, casualty_records):
        good = _dataset_file(tmp_path / "daily.json", casualty_records, dataset="casualties")
        broken = tmp_path / "broken.json"
        broken.write_text("{not json")
        assert main(["validate", str(good), str(broken), str(tmp_path / "absent.json")]) == 1

    def test_verbose_lists_issues(self, tmp_path, capsys):
        path = _write_json(tmp_path / "attacks.json", [{"date": "2024-01-15", "facility_name": "Al-Shifa"}])
        main(["validate", str(path), "--type", "healthcare", "-v"])
        assert "Missing required field: incident_type" in capsys.readouterr().out


# ─── normalize ───────────────────────────────────────────────────────────────


class TestNormalizeCommand:
    def test_normalized_output_validates(self, tmp_path, t4p_casualties_payload):
        raw = _write_json(tmp_path / "killed-in-gaza.json", t4p_casualties_payload)
        assert main(["normalize", str(raw), "--type", "casualties", "--source", "tech4palestine"]) == 0

        output = tmp_path / "killed-in-gaza_normalized.json"
        document = json.loads(output.read_text())
        assert document["metadata"]["dataset"] == "casualties"
        assert document["metadata"]["source"] == "tech4palestine"
        assert len(document["data"]) == 2
        assert document["errors"] == []

        assert main(["validate", str(output)]) == 0

    def test_schema_recorded_for_validation(self, tmp_path, t4p_infrastructure_payload):
        raw = _write_json(tmp_path / "infrastructure.json", t4p_infrastructure_payload)
        output = tmp_path / "out" / "summary.json"
        args = ["normalize", str(raw), "--type", "infrastructure", "--source", "tech4palestine"]
        args += ["--output", str(output)]
        assert main(args) == 0
        assert json.loads(output.read_text())["metadata"]["dataset"] == "infrastructure_summary"

    def test_malformed_payload(self, tmp_path):
        raw = _write_json(tmp_path / "raw.json", {"unexpected": 1})
        assert main(["normalize", str(raw), "--type", "casualties", "--source", "tech4palestine"]) == 1
        document = json.loads((tmp_path / "raw_normalized.json").read_text())
        assert document["data"] == []
        assert document["errors"][0].startswith("Normalization failed")

    def test_unsupported_pair(self, tmp_path, capsys):
        raw = _write_json(tmp_path / "raw.json", [])
        assert main(["normalize", str(raw), "--type", "casualties", "--source", "acled"]) == 1
        assert "Unsupported data source: casualties/acled" in capsys.readouterr().out

    def test_unreadable_payload(self, tmp_path, capsys):
        assert main(["normalize", str(tmp_path / "absent.json"), "--type", "casualties", "--source", "hdx"]) == 1
        assert "Could not read" in capsys.readouterr().out

    def test_strict_mode_from_config(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HUMDATA_CONFIG", str(_write_config(tmp_path, "normalization:\n  strict_mode: true\n")))
        raw = _write_json(tmp_path / "raw.json", [{"report_date": "2024-01-15", "killed": "n/a", "injured": 2}])
        assert main(["normalize", str(raw), "--type", "casualties", "--source", "tech4palestine"]) == 1
        document = json.loads((tmp_path / "raw_normalized.json").read_text())
        assert any("killed value 'n/a' is not a number" in message for message in document["errors"])

    def test_lenient_by_default(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HUMDATA_CONFIG", str(_write_config(tmp_path, "top_issue_limit: 5\n")))
        raw = _write_json(tmp_path / "raw.json", [{"report_date": "2024-01-15", "killed": "n/a", "injured": 2}])
        assert main(["normalize", str(raw), "--type", "casualties", "--source", "tech4palestine"]) == 0
        document = json.loads((tmp_path / "raw_normalized.json").read_text())
        assert document["errors"] == []
        assert any("killed value 'n/a' is not a number" in message for message in document["warnings"])

    def test_strict_flag(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HUMDATA_CONFIG", str(_write_config(tmp_path, "top_issue_limit: 5\n")))
        raw = _write_json(tmp_path / "raw.json", [{"report_date": "2024-01-15", "killed": "n/a", "injured": 2}])
        args = ["normalize", str(raw), "--type", "casualties", "--source", "tech4palestine", "--strict"]
        assert main(args) == 1


# ─── report ──────────────────────────────────────────────────────────────────


class TestReportCommand:
    def test_report_from_written_results(self, tmp_path, casualty_records):
        data_dir = tmp_path / "data"
        path = _dataset_file(data_dir / "tech4palestine" / "casualties.json", casualty_records, dataset="casualties")
        assert main(["validate", str(path), "--write"]) == 0

        output_dir = tmp_path / "reports"
        assert main(["report", str(data_dir), "--output-dir", str(output_dir)]) == 0

        report = json.loads((output_dir / "validation-report.json").read_text())
        assert report["summary"]["total_datasets"] == 1
        assert report["summary"]["passed_validation"] == 1
        assert "tech4palestine" in report["by_source"]
        assert (output_dir / "validation-report.md").exists()

    def test_report_dirs_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HUMDATA_DATA_DIR", str(tmp_path / "data"))
        monkeypatch.delenv("HUMDATA_REPORT_DIR", raising=False)
        assert main(["report"]) == 0
        assert (tmp_path / "data" / "validation" / "validation-report.json").exists()


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "validate" in capsys.readouterr().out
