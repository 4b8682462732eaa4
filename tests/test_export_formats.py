"""
Unit tests for code snippet exports.
"""
import json

import pytest

from export_formats import (
    ANIMATION_NAME, EXPORT_FORMATS, export_gradients, export_palette, gradient_to_css,
    gradient_to_tailwind
)
from extract_colors import ExtractedColor
from extract_gradients import Gradient, generate_gradients


@pytest.fixture
def colors():
    return [
        ExtractedColor("#ff0000", (255, 0, 0), (0, 100, 50), 60),
        ExtractedColor("#1f4e79", (31, 78, 121), (209, 59, 30), 40),
    ]


class TestPaletteExports:

    def test_css(self, colors):
        assert export_palette(colors, "css") == (
            ":root {\n"
            "  --color-1: #ff0000;\n"
            "  --color-2: #1f4e79;\n"
            "}"
        )

    def test_scss(self, colors):
        assert export_palette(colors, "scss") == "$color-1: #ff0000;\n$color-2: #1f4e79;"

    def test_tailwind(self, colors):
        assert export_palette(colors, "tailwind") == (
            "colors: {\n"
            "    'brand-1': '#ff0000',\n"
            "    'brand-2': '#1f4e79',\n"
            "}"
        )

    def test_json(self, colors):
        assert json.loads(export_palette(colors, "json")) == ["#ff0000", "#1f4e79"]

    def test_swift(self, colors):
        assert export_palette(colors, "swift").splitlines()[1] == 'let color2 = UIColor(hex: "1f4e79")'

    def test_flutter(self, colors):
        assert export_palette(colors, "flutter").splitlines()[0] == (
            "static const Color color1 = Color(0xFFFF0000);"
        )

    def test_kotlin(self, colors):
        assert export_palette(colors, "kotlin").splitlines() == [
            "val color1 = Color(0xFFFF0000) // RGB(255, 0, 0)",
            "val color2 = Color(0xFF1F4E79) // RGB(31, 78, 121)",
        ]

    def test_every_format_renders(self, colors):
        for fmt in EXPORT_FORMATS:
            assert "ff0000" in export_palette(colors, fmt).lower()

    def test_unknown_format(self, colors):
        with pytest.raises(ValueError):
            export_palette(colors, "xml")


class TestGradientExports:

    @pytest.fixture
    def gradients(self, complementary_palette):
        return {g.id: g for g in generate_gradients(complementary_palette)}

    def test_plain_css(self, gradients):
        rule = gradient_to_css(gradients["radial"], class_name="hero")
        assert rule == ".hero {\n  background: radial-gradient(circle, #ff0000, #00ffff);\n}"

    def test_animated_css(self, gradients):
        rule = gradient_to_css(gradients["complementary-animated"])
        assert "background-size: 200% 200%;" in rule
        assert f"animation: {ANIMATION_NAME} 3s ease infinite;" in rule
        assert f"@keyframes {ANIMATION_NAME}" in rule
        assert "::before" not in rule

    def test_grainy_css(self, gradients):
        rule = gradient_to_css(gradients["complementary-grainy"], class_name="g")
        assert ".g::before {" in rule
        assert "mix-blend-mode: overlay;" in rule
        assert "position: relative;" in rule
        assert "@keyframes" not in rule

    def test_tailwind_linear(self):
        gradient = Gradient("x", "X", "linear-gradient(to bottom, #000000, #808080, #ffffff)",
                            ("#000000", "#808080", "#ffffff"), "to bottom")
        assert gradient_to_tailwind(gradient) == (
            'className="bg-gradient-to-b from-[#000000] via-[#808080] to-[#ffffff]"'
        )

    def test_tailwind_radial_uses_arbitrary_value(self, gradients):
        assert gradient_to_tailwind(gradients["radial"]) == (
            'className="bg-[radial-gradient(circle, #ff0000, #00ffff)]"'
        )

    def test_tailwind_unknown_direction_defaults_right(self, gradients):
        assert gradient_to_tailwind(gradients["complementary-animated"]).startswith(
            'className="bg-gradient-to-r from-[#ff0000]'
        )

    def test_export_gradients(self, complementary_palette):
        gradients = generate_gradients(complementary_palette)
        css = export_gradients(gradients, "gradients-css")
        assert css.count("@keyframes") == 1
        assert ".gradient-2::before {" in css
        assert len(export_gradients(gradients, "gradients-tailwind").splitlines()) == len(gradients)

    def test_unknown_gradient_format(self, complementary_palette):
        with pytest.raises(ValueError):
            export_gradients(generate_gradients(complementary_palette), "css")
