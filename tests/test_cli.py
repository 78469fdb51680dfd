"""Tests for the command-line interface."""

import json
import logging
from unittest.mock import patch

import numpy as np
import pytest
import yaml
from click.testing import CliRunner
from PIL import Image

from dominantcolors.cli import cli


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop the handlers bound to the runner's streams after each command."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def red_blue_image(tmp_path):
    """PNG with 75% red and 25% blue pixels."""
    pixels = np.zeros((8, 8, 3), dtype=np.uint8)
    pixels[:, :6] = (255, 0, 0)
    pixels[:, 6:] = (0, 0, 255)
    path = tmp_path / "red_blue.png"
    Image.fromarray(pixels).save(path)
    return path


class TestExtractCommand:
    """Test the extract command."""

    def test_prints_palette_table(self, runner, red_blue_image):
        result = runner.invoke(cli, ["extract", str(red_blue_image)])

        assert result.exit_code == 0, result.output
        assert "#FF0000" in result.output
        assert "#0000FF" in result.output

    def test_writes_json_output(self, runner, red_blue_image, tmp_path):
        output = tmp_path / "out" / "palette.json"

        result = runner.invoke(
            cli,
            ["extract", str(red_blue_image), "--max-count", "3", "--output", str(output)],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert data["size"] == [8, 8]
        assert data["settings"]["max_count"] == 3
        assert [entry["hex"] for entry in data["palette"]] == ["#FF0000", "#0000FF"]
        assert data["palette"][0]["weight"] == 48
        assert data["palette"][0]["fraction"] == pytest.approx(0.75)

    def test_exclusion_flags(self, runner, tmp_path):
        path = tmp_path / "black.png"
        Image.new("RGB", (4, 4)).save(path)

        result = runner.invoke(cli, ["extract", str(path), "--exclude-black"])

        assert result.exit_code == 0, result.output
        assert "No colors found" in result.output

    def test_unreadable_image_exits_with_error(self, runner, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("not an image")

        result = runner.invoke(cli, ["extract", str(path)])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_invalid_max_count_exits_with_error(self, runner, red_blue_image):
        result = runner.invoke(cli, ["extract", str(red_blue_image), "--max-count", "0"])

        assert result.exit_code == 1
        assert "max_count" in result.output

    def test_unknown_formula_is_rejected(self, runner, red_blue_image):
        result = runner.invoke(cli, ["extract", str(red_blue_image), "--formula", "cie2077"])
        assert result.exit_code == 2

    def test_config_file_supplies_defaults(self, runner, red_blue_image, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({"extraction": {"max_count": 1}}))
        output = tmp_path / "palette.json"

        result = runner.invoke(
            cli,
            ["--config", str(config_path), "extract", str(red_blue_image), "-o", str(output)],
        )

        assert result.exit_code == 0, result.output
        assert len(json.loads(output.read_text())["palette"]) == 1

    def test_unexpected_failure_exits_with_error(self, runner, red_blue_image):
        with patch(
            "dominantcolors.cli.DominantColors.extract", side_effect=RuntimeError("boom")
        ):
            result = runner.invoke(cli, ["extract", str(red_blue_image)])

        assert result.exit_code == 1
        assert "boom" in result.output

    def test_quiet_suppresses_table(self, runner, red_blue_image):
        result = runner.invoke(cli, ["--quiet", "extract", str(red_blue_image)])

        assert result.exit_code == 0
        assert "#FF0000" not in result.output


class TestAverageCommand:
    """Test the average command."""

    def test_strip_averages(self, runner, red_blue_image, tmp_path):
        output = tmp_path / "average.json"

        result = runner.invoke(
            cli, ["average", str(red_blue_image), "--count", "4", "-o", str(output)]
        )

        assert result.exit_code == 0, result.output
        palette = json.loads(output.read_text())["palette"]
        assert [entry["hex"] for entry in palette] == [
            "#FF0000",
            "#FF0000",
            "#FF0000",
            "#0000FF",
        ]

    def test_invalid_count_exits_with_error(self, runner, red_blue_image):
        result = runner.invoke(cli, ["average", str(red_blue_image), "--count", "0"])
        assert result.exit_code == 1


class TestInitConfigCommand:
    """Test configuration file generation."""

    def test_writes_profile(self, runner, tmp_path):
        path = tmp_path / "dominantcolors.yaml"

        result = runner.invoke(
            cli, ["init-config", "--output", str(path), "--profile", "accurate"]
        )

        assert result.exit_code == 0, result.output
        config = yaml.safe_load(path.read_text())
        assert config["extraction"]["quality"] == "high"
        assert config["extraction"]["max_count"] == 10

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output
