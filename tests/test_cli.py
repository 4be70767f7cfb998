"""Tests for the svg-laser-text command line interface."""

from pathlib import Path
from textwrap import dedent

from click.testing import CliRunner

from svg_laser_text import __version__
from svg_laser_text.cli.commands.batch import BATCH_TEMPLATE, DEFAULT_TEMPLATE_NAME, load_batch_config
from svg_laser_text.cli.main import cli
from svg_laser_text.svg.parser import find_glyph_paths, find_text_elements, parse_svg, read_canvas


class TestRenderCommand:
    def test_render_to_stdout(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli, ["--config", str(config_file), "render", "Hello"])
        assert result.exit_code == 0, result.output
        assert 'width="90mm"' in result.output
        assert 'viewBox="0 0 90 45"' in result.output

    def test_text_and_outline_share_canvas(self, runner: CliRunner, config_file: Path, tmp_path: Path) -> None:
        text_svg = tmp_path / "out" / "text.svg"
        outline_svg = tmp_path / "out" / "outline.svg"
        for mode, path in (("text", text_svg), ("outline", outline_svg)):
            result = runner.invoke(
                cli, ["--config", str(config_file), "render", "Hi שלום", "--mode", mode, "-o", str(path)]
            )
            assert result.exit_code == 0, result.output
            assert "Wrote" in result.output

        assert read_canvas(parse_svg(text_svg)) == read_canvas(parse_svg(outline_svg))
        assert len(find_text_elements(parse_svg(text_svg).getroot())) == 6
        assert len(find_glyph_paths(parse_svg(outline_svg).getroot())) == 1

        result = runner.invoke(cli, ["compare", str(text_svg), str(outline_svg)])
        assert result.exit_code == 0, result.output
        assert "Canvas match" in result.output

    def test_multi_line_escape(self, runner: CliRunner, config_file: Path, tmp_path: Path) -> None:
        out = tmp_path / "lines.svg"
        result = runner.invoke(cli, ["--config", str(config_file), "render", "Hi\\nHello", "-o", str(out)])
        assert result.exit_code == 0, result.output
        canvas = read_canvas(parse_svg(out))
        assert (canvas.width, canvas.height) == (90.0, 81.0)

    def test_font_override(self, runner: CliRunner, font_files: dict[str, Path], tmp_path: Path) -> None:
        config = tmp_path / "bare.yaml"
        config.write_text("default_family: null\n", encoding="utf-8")
        out = tmp_path / "override.svg"
        result = runner.invoke(
            cli,
            [
                "--config", str(config),
                "render", "Aש",
                "--font", str(font_files["latin"]),
                "--script-font", f"hebrew={font_files['hebrew']}",
                "-o", str(out),
            ],
        )
        assert result.exit_code == 0, result.output
        assert read_canvas(parse_svg(out)).width == 33.0

    def test_bad_script_font(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli, ["--config", str(config_file), "render", "A", "--script-font", "hebrew"])
        assert result.exit_code == 2

    def test_invalid_font_size(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli, ["--config", str(config_file), "render", "A", "-s", "0"])
        assert result.exit_code == 1

    def test_no_glyphs(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli, ["--config", str(config_file), "render", "กขค"])
        assert result.exit_code == 1

    def test_show_bounds(self, runner: CliRunner, config_file: Path, tmp_path: Path) -> None:
        result = runner.invoke(
            cli,
            ["--config", str(config_file), "render", "A", "--show-bounds", "-o", str(tmp_path / "a.svg")],
        )
        assert result.exit_code == 0, result.output


class TestGroup:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("render", "batch", "fonts", "compare"):
            assert command in result.output

    def test_missing_config_file(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["--config", str(tmp_path / "absent.yaml"), "fonts", "list"])
        assert result.exit_code == 1
        assert "Config error" in result.output


class TestFontsCommand:
    def test_list(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli, ["--config", str(config_file), "fonts", "list"])
        assert result.exit_code == 0, result.output
        assert "Total: 2 fonts" in result.output

    def test_list_unreadable_font(self, runner: CliRunner, tmp_path: Path) -> None:
        config = tmp_path / "broken.yaml"
        config.write_text(
            f"default_family: null\nfonts:\n  hebrew: {tmp_path / 'missing.ttf'}\n", encoding="utf-8"
        )
        result = runner.invoke(cli, ["--config", str(config), "fonts", "list"])
        assert result.exit_code == 1

    def test_coverage(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli, ["--config", str(config_file), "fonts", "coverage", "Aש"])
        assert result.exit_code == 0, result.output
        assert "U+05E9" in result.output
        assert "have no font" not in result.output

    def test_coverage_reports_missing(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli, ["--config", str(config_file), "fonts", "coverage", "Aก"])
        assert result.exit_code == 0
        assert "1 character(s) have no font" in result.output


class TestCompareCommand:
    def _svg(self, path: Path, width: str, height: str, view_box: str | None = None) -> Path:
        vb = f' viewBox="{view_box}"' if view_box else ""
        path.write_text(
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}"{vb}/>',
            encoding="utf-8",
        )
        return path

    def test_match(self, runner: CliRunner, tmp_path: Path) -> None:
        a = self._svg(tmp_path / "a.svg", "90mm", "45mm", "0 0 90 45")
        b = self._svg(tmp_path / "b.svg", "90mm", "45mm", "0 0 90 45")
        result = runner.invoke(cli, ["compare", str(a), str(b)])
        assert result.exit_code == 0, result.output
        assert "Canvas match" in result.output

    def test_width_mismatch(self, runner: CliRunner, tmp_path: Path) -> None:
        a = self._svg(tmp_path / "a.svg", "90mm", "45mm", "0 0 90 45")
        b = self._svg(tmp_path / "b.svg", "36mm", "45mm", "0 0 36 45")
        result = runner.invoke(cli, ["compare", str(a), str(b)])
        assert result.exit_code == 1
        assert "Canvas mismatch" in result.output

    def test_unit_mismatch(self, runner: CliRunner, tmp_path: Path) -> None:
        a = self._svg(tmp_path / "a.svg", "90mm", "45mm")
        b = self._svg(tmp_path / "b.svg", "90in", "45in")
        result = runner.invoke(cli, ["compare", str(a), str(b)])
        assert result.exit_code == 1

    def test_tolerance(self, runner: CliRunner, tmp_path: Path) -> None:
        a = self._svg(tmp_path / "a.svg", "90mm", "45mm")
        b = self._svg(tmp_path / "b.svg", "90.0004mm", "45mm")
        assert runner.invoke(cli, ["compare", str(a), str(b)]).exit_code == 1
        assert runner.invoke(cli, ["compare", str(a), str(b), "--tolerance", "0.001"]).exit_code == 0

    def test_unparseable(self, runner: CliRunner, tmp_path: Path) -> None:
        a = self._svg(tmp_path / "a.svg", "90mm", "45mm")
        bad = tmp_path / "bad.svg"
        bad.write_text("<svg", encoding="utf-8")
        result = runner.invoke(cli, ["compare", str(a), str(bad)])
        assert result.exit_code == 1


class TestBatchTemplate:
    def test_creates_template(self, runner: CliRunner, tmp_path: Path) -> None:
        output = tmp_path / "my_batch.yaml"
        result = runner.invoke(cli, ["batch", "template", str(output)])
        assert result.exit_code == 0, result.output
        assert output.read_text(encoding="utf-8") == BATCH_TEMPLATE

    def test_default_name(self, runner: CliRunner) -> None:
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["batch", "template"])
            assert result.exit_code == 0, result.output
            assert Path(DEFAULT_TEMPLATE_NAME).exists()

    def test_declined_overwrite(self, runner: CliRunner, tmp_path: Path) -> None:
        output = tmp_path / "existing.yaml"
        output.write_text("keep me", encoding="utf-8")
        result = runner.invoke(cli, ["batch", "template", str(output)], input="n\n")
        assert "Aborted" in result.output
        assert output.read_text(encoding="utf-8") == "keep me"

    def test_force_overwrite(self, runner: CliRunner, tmp_path: Path) -> None:
        output = tmp_path / "existing.yaml"
        output.write_text("old", encoding="utf-8")
        result = runner.invoke(cli, ["batch", "template", str(output), "-f"])
        assert result.exit_code == 0
        assert output.read_text(encoding="utf-8") == BATCH_TEMPLATE

    def test_template_is_loadable(self, tmp_path: Path) -> None:
        path = tmp_path / "batch.yaml"
        path.write_text(BATCH_TEMPLATE, encoding="utf-8")
        config = load_batch_config(path)
        assert [job.output.name for job in config.jobs] == ["hello.svg", "shalom.svg"]
        assert config.settings.output_dir == tmp_path / "output"
        assert config.jobs[1].settings(config.settings).direction.value == "rtl"


class TestBatchRun:
    def test_renders_every_job(self, runner: CliRunner, config_file: Path, tmp_path: Path) -> None:
        batch_file = tmp_path / "jobs.yaml"
        batch_file.write_text(
            dedent("""
                settings:
                  font_size: 30
                  output_dir: renders
                jobs:
                  - text: Hello
                    output: hello.svg
                  - text: "שלום"
                    output: shalom.svg
                    direction: rtl
                  - Hi
            """),
            encoding="utf-8",
        )
        result = runner.invoke(cli, ["--config", str(config_file), "batch", "run", str(batch_file)])
        assert result.exit_code == 0, result.output
        assert "Success: 3" in result.output

        renders = tmp_path / "renders"
        assert read_canvas(parse_svg(renders / "hello.svg")).width == 90.0
        assert read_canvas(parse_svg(renders / "shalom.svg")).width == 60.0
        assert (renders / "text_003.svg").exists()

    def test_failed_job_continues(self, runner: CliRunner, config_file: Path, tmp_path: Path) -> None:
        batch_file = tmp_path / "jobs.yaml"
        batch_file.write_text(
            dedent("""
                settings:
                  output_dir: renders
                jobs:
                  - text: A
                    font_size: 0
                  - text: B
            """),
            encoding="utf-8",
        )
        result = runner.invoke(cli, ["--config", str(config_file), "batch", "run", str(batch_file)])
        assert result.exit_code == 0, result.output
        assert "Success: 1" in result.output
        assert "Failed: 1" in result.output
        assert (tmp_path / "renders" / "text_002.svg").exists()

    def test_stop_on_error(self, runner: CliRunner, config_file: Path, tmp_path: Path) -> None:
        batch_file = tmp_path / "jobs.yaml"
        batch_file.write_text(
            dedent("""
                settings:
                  output_dir: renders
                  continue_on_error: false
                jobs:
                  - text: "กขค"
                  - text: B
            """),
            encoding="utf-8",
        )
        result = runner.invoke(cli, ["--config", str(config_file), "batch", "run", str(batch_file)])
        assert result.exit_code == 1
        assert not (tmp_path / "renders" / "text_002.svg").exists()

    def test_bad_batch_config(self, runner: CliRunner, tmp_path: Path) -> None:
        batch_file = tmp_path / "jobs.yaml"
        batch_file.write_text("settings:\n  colour: red\njobs: [A]\n", encoding="utf-8")
        result = runner.invoke(cli, ["batch", "run", str(batch_file)])
        assert result.exit_code == 1
        assert "Error loading config" in result.output

    def test_empty_jobs(self, runner: CliRunner, tmp_path: Path) -> None:
        batch_file = tmp_path / "jobs.yaml"
        batch_file.write_text("jobs: []\n", encoding="utf-8")
        result = runner.invoke(cli, ["batch", "run", str(batch_file)])
        assert result.exit_code == 1
