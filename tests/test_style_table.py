from __future__ import annotations

import pytest

from mdhighlight.configuration import (
    CODE_COLOR,
    HEADING_COLOR,
    FontSpec,
    MarkdownColors,
    MarkdownConfiguration,
    MarkdownFonts,
    MarkdownStyle,
)
from mdhighlight.services.markdown_tree import NodeKind
from mdhighlight.services.style_table import StyleTable


class TestDefaults:
    def test_default_fonts_and_colors(self):
        cfg = MarkdownConfiguration()
        assert cfg.body.font == FontSpec(16)
        assert cfg.body.color is None
        assert cfg.heading1 == MarkdownStyle(FontSpec(28, "bold"), HEADING_COLOR)
        assert cfg.heading2.font.size == 24
        assert cfg.heading3.font.size == 20
        assert cfg.code == MarkdownStyle(FontSpec(14, "medium", monospace=True), CODE_COLOR)
        assert cfg.emphasis.font.italic
        assert cfg.strong.font.weight == "bold"
        assert cfg.debounce_ms == 10

    def test_bundles_round_trip(self):
        fonts = MarkdownFonts(body=FontSpec.system(12))
        colors = MarkdownColors(link="#112233")
        cfg = MarkdownConfiguration.from_parts(fonts, colors, debounce_ms=50)
        assert cfg.fonts == fonts
        assert cfg.colors == colors
        assert cfg.debounce_ms == 50
        assert cfg.link == MarkdownStyle(FontSpec.system(12), "#112233")


class TestStyleTable:
    def test_headings_by_level(self):
        table = StyleTable()
        cfg = table.configuration
        assert table.style_for(NodeKind.HEADING, 1) == cfg.heading1
        assert table.style_for(NodeKind.HEADING, 2) == cfg.heading2
        assert table.style_for(NodeKind.HEADING, 3) == cfg.heading3

    @pytest.mark.parametrize("level", [4, 5, 6, 99])
    def test_deep_headings_fall_back_to_heading3(self, level):
        table = StyleTable()
        assert table.style_for(NodeKind.HEADING, level) == table.configuration.heading3

    def test_configured_heading5_is_used(self):
        custom = MarkdownStyle(FontSpec.bold(15), "#000000")
        table = StyleTable(MarkdownConfiguration(heading5=custom))
        assert table.heading_style(5) == custom
        assert table.heading_style(6) == custom
        assert table.heading_style(4) == table.configuration.heading3

    def test_missing_level_means_level_one(self):
        table = StyleTable()
        assert table.style_for(NodeKind.HEADING) == table.configuration.heading1
        assert table.heading_style(0) == table.configuration.heading1

    def test_inline_kinds(self):
        table = StyleTable()
        cfg = table.configuration
        assert table.style_for(NodeKind.EMPHASIS) == cfg.emphasis
        assert table.style_for(NodeKind.STRONG) == cfg.strong
        assert table.style_for(NodeKind.INLINE_CODE) == cfg.code
        assert table.style_for(NodeKind.CODE_BLOCK) == cfg.code
        assert table.style_for(NodeKind.LINK) == cfg.link

    def test_unstyled_kind_raises(self):
        with pytest.raises(KeyError):
            StyleTable().style_for(NodeKind.PARAGRAPH)

    def test_missing_top_heading_falls_back_to_body(self):
        table = StyleTable(MarkdownConfiguration(heading1=None))
        assert table.heading_style(1) == table.body
        assert table.heading_style(2) == table.configuration.heading2
