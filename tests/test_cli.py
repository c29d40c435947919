import json

import numpy as np
from typer.testing import CliRunner

from dtwalign.cli import app, load_feature_frames
from dtwalign.config import parse_durations


runner = CliRunner()


def write_frames(tmp_path):
    file_a = tmp_path / "reference.npy"
    file_b = tmp_path / "source.npy"
    np.save(file_a, np.array([[0.0], [1.0], [2.0]]))
    np.save(file_b, np.array([[0.0], [0.0], [1.0], [2.0], [2.0]]))
    return file_a, file_b


class TestLoadFeatureFrames:
    def test_csv(self, tmp_path):
        p = tmp_path / "frames.csv"
        p.write_text("0,1\n2,3\n4,5\n", encoding="utf-8")
        frames = load_feature_frames(str(p))
        assert frames.shape == (3, 2)

    def test_json_scalars(self, tmp_path):
        p = tmp_path / "frames.json"
        p.write_text("[1, 2, 3, 4]", encoding="utf-8")
        frames = load_feature_frames(str(p))
        assert frames.shape == (4, 1)


class TestAlignCommand:
    def test_align_writes_json(self, tmp_path):
        file_a, file_b = write_frames(tmp_path)
        out = tmp_path / "result.json"

        result = runner.invoke(app, ["align", str(file_a), str(file_b), "--window", "3", "--out", str(out)])

        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["path_cost"] == 0.0
        assert data["path"] == [[0, 0], [0, 1], [1, 2], [2, 3], [2, 4]]
        assert data["compacted_path"] == [[0, 1], [2, 2], [3, 4]]
        assert data["degenerate_steps"] == 0

    def test_align_rejects_small_window(self, tmp_path):
        file_a, file_b = write_frames(tmp_path)
        result = runner.invoke(app, ["align", str(file_a), str(file_b), "--window", "1"])
        assert result.exit_code != 0

    def test_align_missing_file(self, tmp_path):
        result = runner.invoke(app, ["align", str(tmp_path / "nope.npy"), str(tmp_path / "nope2.npy")])
        assert result.exit_code != 0
        assert isinstance(result.exception, FileNotFoundError)

    def test_align_unsupported_extension(self, tmp_path):
        p = tmp_path / "frames.wav"
        p.write_bytes(b"RIFF")
        result = runner.invoke(app, ["align", str(p), str(p)])
        assert result.exit_code != 0


class TestPlanCommand:
    def test_plan_two_passes(self, tmp_path):
        file_a = tmp_path / "reference.npy"
        file_b = tmp_path / "source.npy"
        np.save(file_a, np.arange(20, dtype=np.float64).reshape(-1, 1))
        np.save(file_b, (np.arange(40, dtype=np.float64) / 2).reshape(-1, 1))
        out = tmp_path / "plan.json"

        result = runner.invoke(app, [
            "plan", str(file_a), str(file_b), "--fps", "10", "--durations", "4,1", "--out", str(out),
        ])

        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text(encoding="utf-8"))
        assert len(data["passes"]) == 2
        assert len(data["compacted_path"]) == 20

    def test_plan_rejects_bad_durations(self, tmp_path):
        file_a, file_b = write_frames(tmp_path)
        result = runner.invoke(app, ["plan", str(file_a), str(file_b), "--fps", "10", "--durations", "4,soon"])
        assert result.exit_code == 2


def test_parse_durations_skips_empty_items():
    assert parse_durations("60, 15,,") == [60.0, 15.0]


def test_memory_command():
    result = runner.invoke(app, ["memory", "1000", "500", "200"])
    assert result.exit_code == 0
    assert "1.6MB" in result.output
