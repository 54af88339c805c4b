"""Tests for CLI commands using click.testing.CliRunner."""

from unittest.mock import patch

from click.testing import CliRunner

from gifpress.cli import compress, info, main
from gifpress.error_handling import CompressionError
from gifpress.io import read_gif


class TestMainCLI:
    """Tests for main CLI group."""

    def test_main_help(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "animated GIF recompression" in result.output
        assert "compress" in result.output
        assert "info" in result.output

    def test_main_version(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert "gifpress, version 0.1.0" in result.output

    def test_main_invalid_command(self):
        runner = CliRunner()
        result = runner.invoke(main, ["invalid-command"])

        assert result.exit_code == 2
        assert "No such command" in result.output


class TestCompressCommand:
    """Tests for compress CLI command."""

    def test_compress_help(self):
        runner = CliRunner()
        result = runner.invoke(compress, ["--help"])

        assert result.exit_code == 0
        for option in ("--colors", "--resize", "--lossy", "--frame-skip", "--optimize", "--preset"):
            assert option in result.output

    def test_compress_file(self, sample_gif, tmp_path):
        output = tmp_path / "out.gif"
        runner = CliRunner()
        result = runner.invoke(
            main,
            ["compress", str(sample_gif), str(output), "--colors", "16", "--resize", "50"],
        )

        assert result.exit_code == 0, result.output
        assert output.exists()
        assert "Results" in result.output
        assert "8x8 → 4x4" in result.output
        image = read_gif(output)
        assert (image.width, image.height) == (4, 4)

    def test_compress_with_preset(self, gif_writer, tmp_path):
        source = gif_writer(
            tmp_path / "long.gif",
            colors=[(255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 0)],
            size=(20, 20),
        )
        output = tmp_path / "out.gif"
        runner = CliRunner()
        result = runner.invoke(main, ["compress", str(source), str(output), "--preset", "high"])

        assert result.exit_code == 0, result.output
        assert "color_count=32" in result.output
        assert "Frames: 4 → 3" in result.output
        assert read_gif(output).width == 10

    def test_color_count_out_of_range(self, sample_gif, tmp_path):
        runner = CliRunner()
        result = runner.invoke(
            compress, [str(sample_gif), str(tmp_path / "out.gif"), "--colors", "1"]
        )

        assert result.exit_code == 2
        assert not (tmp_path / "out.gif").exists()

    def test_unknown_preset(self, sample_gif, tmp_path):
        runner = CliRunner()
        result = runner.invoke(
            compress, [str(sample_gif), str(tmp_path / "out.gif"), "--preset", "ultra"]
        )

        assert result.exit_code == 2

    def test_missing_input(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(compress, [str(tmp_path / "nope.gif"), str(tmp_path / "o.gif")])

        assert result.exit_code == 2

    def test_pipeline_failure_reported(self, sample_gif, tmp_path):
        runner = CliRunner()
        with patch(
            "gifpress.pipeline.compress_gif", side_effect=CompressionError("stage failed")
        ):
            result = runner.invoke(compress, [str(sample_gif), str(tmp_path / "out.gif")])

        assert result.exit_code == 1
        assert "Compression failed: stage failed" in result.output


class TestInfoCommand:
    """Tests for info CLI command."""

    def test_info(self, sample_gif):
        runner = CliRunner()
        result = runner.invoke(info, [str(sample_gif)])

        assert result.exit_code == 0, result.output
        assert "sample.gif" in result.output
        assert "Canvas: 8x8" in result.output
        assert "Frames: 3" in result.output
        assert "Loop: forever" in result.output

    def test_info_not_a_gif(self, tmp_path):
        path = tmp_path / "fake.gif"
        path.write_bytes(b"nothing to see")
        runner = CliRunner()
        result = runner.invoke(info, [str(path)])

        assert result.exit_code == 1
        assert "Inspection failed" in result.output
