"""
Tests for the unified pipeline, its renderers and the batch runner.
"""
import json
import subprocess
import sys
from pathlib import Path

import pytest
from loguru import logger
from PIL import Image

from analyze import (
    LOGGED_MODULES, OUTPUT_FORMATS, PaletteReport, configure_logging, format_report, render,
    render_html, run_pipeline, text_color_for_background
)
from batch_analyze import find_images, main
from extract_colors import ExtractedColor, ExtractionError


class TestRunPipeline:

    def test_block_image(self, image_file):
        report = run_pipeline(image_file, color_count=3)
        assert [c.hex for c in report.colors] == ["#ff0000", "#00ff00", "#0000ff"]
        assert [c.percentage for c in report.colors] == [50, 30, 20]
        assert report.selected == 0
        assert report.variations is not None
        assert [g.id for g in report.gradients] == ["light-dark", "triadic", "radial", "rainbow", "conic"]

    def test_selected_is_clamped(self, image_file):
        report = run_pipeline(image_file, color_count=3, selected=10)
        assert report.selected == 2
        assert report.variations.shades[0] != report.variations.tints[0]

    def test_shuffle_reproducible_with_seed(self, image_file):
        first = run_pipeline(image_file, color_count=3, shuffle=True, seed=5)
        second = run_pipeline(image_file, color_count=3, shuffle=True, seed=5)
        assert first.shuffled
        assert first.gradients == second.gradients

    def test_kmeans_method(self, image_file):
        report = run_pipeline(image_file, color_count=3, method="kmeans")
        assert {c.hex for c in report.colors} == {"#ff0000", "#00ff00", "#0000ff"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            run_pipeline(tmp_path / "missing.png")

    def test_invalid_count(self, image_file):
        with pytest.raises(ValueError):
            run_pipeline(image_file, color_count=20)

    def test_to_dict_is_json_serializable(self, image_file):
        data = json.loads(json.dumps(run_pipeline(image_file, color_count=3).to_dict()))
        assert data["colorCount"] == 3
        assert data["colors"][0]["hex"] == "#ff0000"
        assert set(data["variations"]) == {"tints", "shades", "tones"}
        assert data["shuffled"] is False


class TestRender:

    @pytest.fixture
    def report(self, image_file):
        return run_pipeline(image_file, color_count=3)

    def test_prose(self, report):
        text = render(report)
        assert text.startswith("PALETTE: 3 colors (requested 3)")
        assert " *1. #ff0000 | RGB(255, 0, 0) | HSL(0, 100%, 50%) | 50%" in text
        assert "VARIATIONS of #ff0000:" in text
        assert "GRADIENTS:" in text
        assert "linear-gradient(135deg, #ff0000, #00ff00, #0000ff)" in text

    def test_prose_marks_shuffled(self, image_file):
        text = render(run_pipeline(image_file, color_count=3, shuffle=True, seed=1))
        assert "GRADIENTS (shuffled):" in text

    def test_html(self, report):
        html = render_html(report)
        assert html.startswith("<!DOCTYPE html>")
        assert html.count('class="color-card"') == 3
        assert ".gradient-0 {" in html
        assert 'class="gradient-bar gradient-4"' in html
        assert "Variations of #ff0000" in html

    def test_html_escapes_source(self):
        report = PaletteReport(
            source="<script>.png",
            color_count=3,
            colors=[ExtractedColor("#336699", (51, 102, 153), (210, 50, 40), 100)],
            selected=0,
            variations=None,
        )
        html = render_html(report)
        assert "&lt;script&gt;.png" in html
        assert "<script>" not in html

    def test_text_color(self):
        assert text_color_for_background(80) == "#000"
        assert text_color_for_background(50) == "#fff"


class TestFormatReport:

    @pytest.fixture
    def report(self, image_file):
        return run_pipeline(image_file, color_count=3)

    def test_every_format_renders(self, report):
        for fmt in OUTPUT_FORMATS:
            assert format_report(report, fmt)

    def test_text_and_json(self, report):
        assert format_report(report) == render(report)
        assert json.loads(format_report(report, "report-json"))["colorCount"] == 3

    def test_palette_export(self, report):
        assert format_report(report, "scss").splitlines()[0] == "$color-1: #ff0000;"

    def test_gradient_css(self, report):
        css = format_report(report, "gradients-css")
        assert ".gradient-1 {\n  background: linear-gradient(135deg, #ff0000, #00ff00, #0000ff);" in css
        assert css.count("background:") == len(report.gradients)

    def test_gradient_tailwind(self, report):
        lines = format_report(report, "gradients-tailwind").splitlines()
        assert [line.split(":")[0] for line in lines] == [g.id for g in report.gradients]
        assert lines[1] == 'triadic: className="bg-gradient-to-br from-[#ff0000] via-[#00ff00] to-[#0000ff]"'

    def test_unknown_format(self, report):
        with pytest.raises(ValueError):
            format_report(report, "yaml")

    def test_options_are_keyword_only(self, image_file):
        with pytest.raises(TypeError):
            run_pipeline(image_file, 3, 1)


class TestLogging:

    @pytest.fixture
    def messages(self):
        configure_logging(verbose=True)
        captured = []
        logger.add(captured.append, level="DEBUG", format="{name}: {message}")
        yield captured
        logger.remove()
        logger.add(sys.stderr)
        for name in LOGGED_MODULES:
            logger.disable(name)

    def test_library_is_quiet_on_import(self):
        code = (
            "from extract_gradients import generate_gradients\n"
            "from extract_colors import extract_palette\n"
            "import numpy as np\n"
            "generate_gradients(['#123456'])\n"
            "extract_palette(np.full((4, 4, 4), 255, dtype=np.uint8), 4, 4, 3)\n"
        )
        result = subprocess.run(
            [sys.executable, "-c", code],
            cwd=Path(__file__).resolve().parent.parent,
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0, result.stderr
        assert result.stderr == ""

    def test_configure_logging_enables_library_records(self, messages):
        from extract_gradients import generate_gradients

        generate_gradients(['#123456'])
        assert any(m.startswith("extract_gradients: No complementary gradient") for m in messages)

    def test_pipeline_records(self, messages, image_file):
        run_pipeline(image_file, color_count=3)
        assert any(m.startswith("analyze: Extracted 3 colors") for m in messages)
        assert any(m.startswith("extract_colors: Coverage counts") for m in messages)


class TestBatch:

    def test_find_images(self, tmp_path):
        for name in ("b.PNG", "a.jpg", "notes.txt", "c.webp"):
            (tmp_path / name).write_bytes(b"")
        assert [p.name for p in find_images(tmp_path)] == ["a.jpg", "b.PNG", "c.webp"]

    def test_missing_input_dir(self, tmp_path, monkeypatch):
        monkeypatch.setattr(sys, "argv", [
            "batch_analyze.py", "--input", str(tmp_path / "nope"), "--output", str(tmp_path / "out")
        ])
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 2

    def test_writes_reports(self, tmp_path, monkeypatch, rgb_blocks, capsys):
        images = tmp_path / "images"
        images.mkdir()
        Image.fromarray(rgb_blocks).save(images / "blocks.png")
        out = tmp_path / "out"

        monkeypatch.setattr(sys, "argv", [
            "batch_analyze.py", "-i", str(images), "-o", str(out), "--colors", "3"
        ])
        main()

        assert (out / "blocks-palette.html").exists()
        assert "Completed: 1/1 succeeded" in capsys.readouterr().out

    def test_failures_exit_nonzero(self, tmp_path, monkeypatch):
        images = tmp_path / "images"
        images.mkdir()
        (images / "broken.png").write_bytes(b"not an image")

        monkeypatch.setattr(sys, "argv", [
            "batch_analyze.py", "-i", str(images), "-o", str(tmp_path / "out")
        ])
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 1


def test_extraction_error_reaches_caller(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"garbage")
    with pytest.raises(ExtractionError):
        run_pipeline(path)
