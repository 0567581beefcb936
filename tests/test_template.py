"""
Tests for the template scanner and renderer.
"""

import pytest

from pagegen.localization import LocalizationIndex
from pagegen.template import (
    Literal,
    Placeholder,
    Template,
    TemplateError,
    is_empty_value,
    render_aggregate,
    render_page,
    scan,
)


class TestScanner:
    """Test single-pass scanning into segments."""

    def test_plain_line(self):
        lines = scan("no placeholders")
        assert lines[0].segments == [Literal("no placeholders")]
        assert lines[0].placeholders == []

    def test_placeholders(self):
        line = scan("|{{{cost1}}} x{{{ct1}}}")[0]
        assert line.segments == [
            Literal("|"), Placeholder("cost1"), Literal(" x"), Placeholder("ct1"),
        ]
        assert line.placeholders == ["cost1", "ct1"]

    def test_line_numbers(self):
        lines = scan("a\nb\nc")
        assert [l.number for l in lines] == [1, 2, 3]

    def test_round_trip(self):
        text = "{{Infobox\n|name={{{name}}}\n}}\n"
        assert "\n".join(l.raw for l in scan(text)) == text

    def test_unterminated_is_literal(self):
        line = scan("|x={{{broken")[0]
        assert line.segments == [Literal("|x={{{broken")]

    def test_unterminated_before_placeholder(self):
        line = scan("{{{broken and {{{ok}}}")[0]
        assert line.placeholders == ["ok"]
        assert line.segments[0] == Literal("{{{broken and ")
        assert line.raw == "{{{broken and {{{ok}}}"

    def test_placeholder_does_not_span_lines(self):
        lines = scan("{{{a\nb}}}")
        assert all(l.placeholders == [] for l in lines)

    def test_wiki_template_braces(self):
        """Two braces are wiki markup, not placeholders."""
        assert scan("{{Infobox crop")[0].placeholders == []

    def test_separators(self):
        lines = scan("|-\n |} ")
        assert lines[0].is_row_separator
        assert lines[1].is_table_end


class TestEmptiness:
    """Test the emptiness policy."""

    @pytest.mark.parametrize("value", ["", "   ", None, "None", "NONE", "N/A", "n/a", "[]", "None x0"])
    def test_empty(self, value):
        assert is_empty_value(value, "description")

    def test_zero_cost_substring(self):
        assert is_empty_value("Wood x3, None x0", "constructionCost")

    @pytest.mark.parametrize("value", ["0", "0.00"])
    def test_zero_quantity(self, value):
        assert is_empty_value(value, "ct1")

    @pytest.mark.parametrize("value", ["0", "0.00"])
    def test_zero_elsewhere_kept(self, value):
        """Zero only counts as empty for quantity keys."""
        assert not is_empty_value(value, "growthTime")

    def test_values_kept(self):
        assert not is_empty_value("Wheat", "name")
        assert not is_empty_value("5", "ct1")
        assert not is_empty_value("False", "isPerennial")


class TestRenderPage:
    """Test per-row rendering and line suppression."""

    def test_substitution(self):
        template = Template.parse("|name={{{stringKey}}}\n|growth={{{growthTime}}} days")
        out = render_page(template, {"stringKey": "Wheat", "growthTime": "3.50"})
        assert out == "|name=Wheat\n|growth=3.50 days"

    def test_unknown_key_left_alone(self):
        template = Template.parse("|a={{{known}}}\n|b={{{unknown}}}")
        assert render_page(template, {"known": "x"}) == "|a=x\n|b={{{unknown}}}"

    def test_zero_count_drops_line_and_separator(self):
        template = Template.parse("{|\n|-\n|{{{cost1}}} x{{{ct1}}}\n|-\n|Other\n|}")
        out = render_page(template, {"cost1": "Wood", "ct1": "0"})
        assert out == "{|\n|-\n|Other\n|}"

    def test_cost_pair_kept(self):
        template = Template.parse("|{{{cost1}}} x{{{ct1}}}\n|-")
        assert render_page(template, {"cost1": "Wood", "ct1": "5"}) == "|Wood x5\n|-"

    def test_none_cost_drops_line(self):
        template = Template.parse("|{{{cost2}}} x{{{ct2}}}\n|-\n|end")
        assert render_page(template, {"cost2": "None", "ct2": "3"}) == "|end"

    def test_cost_pair_missing_key_drops_line(self):
        """A missing side of a cost pair counts as empty."""
        template = Template.parse("|{{{cost3}}} x{{{ct3}}}\n|end")
        assert render_page(template, {"cost3": "Wood"}) == "|end"

    def test_empty_field_drops_line(self):
        template = Template.parse("|Tags||{{{tooltipTags}}}\n|-\n|Value||{{{value}}}")
        out = render_page(template, {"tooltipTags": "", "value": "7.25"})
        assert out == "|Value||7.25"

    def test_absent_key_does_not_drop_line(self):
        template = Template.parse("|x={{{notExtracted}}}")
        assert render_page(template, {}) == "|x={{{notExtracted}}}"

    def test_only_following_separator_dropped(self):
        template = Template.parse("|-\n|a={{{a}}}\n|b")
        assert render_page(template, {"a": "N/A"}) == "|-\n|b"

    def test_localized_values(self):
        index = LocalizationIndex.from_rows([("Crop_Wheat_Name", {"Text": "Wheat"})])
        template = Template.parse("|name={{{stringKey}}}")
        assert render_page(template, {"stringKey": "Crop_Wheat_Name"}, index) == "|name=Wheat"

    def test_template_not_mutated(self):
        template = Template.parse("|a={{{a}}}\n|b={{{b}}}")
        render_page(template, {"a": "", "b": "x"})
        assert len(template.lines) == 2


class TestRenderAggregate:
    """Test one-page rendering of all rows."""

    TEMPLATE = "== Resources ==\n{| class=\"wikitable\"\n! Name !! Stack\n|-\n| {{{name}}} || {{{stackSize}}}\n|}\n[[Category:Resources]]"

    def test_rows_repeated(self):
        template = Template.parse(self.TEMPLATE)
        out = render_aggregate(template, [
            {"name": "Wood", "stackSize": "50"},
            {"name": "Stone", "stackSize": "25"},
        ])
        assert out == (
            "== Resources ==\n{| class=\"wikitable\"\n! Name !! Stack\n"
            "|-\n| Wood || 50\n"
            "|-\n| Stone || 25\n"
            "|}\n[[Category:Resources]]"
        )

    def test_no_rows(self):
        template = Template.parse(self.TEMPLATE)
        out = render_aggregate(template, [])
        assert out == "== Resources ==\n{| class=\"wikitable\"\n! Name !! Stack\n|}\n[[Category:Resources]]"

    def test_fragment_ends_at_next_separator(self):
        """Sample rows after the first are not repeated."""
        template = Template.parse("{|\n|-\n| {{{name}}}\n|-\n| sample\n|}")
        assert render_aggregate(template, [{"name": "A"}]) == "{|\n|-\n| A\n|}"

    def test_missing_table_end_appended(self):
        template = Template.parse("{|\n|-\n| {{{name}}}\n|-")
        assert render_aggregate(template, [{"name": "A"}]) == "{|\n|-\n| A\n|}"

    def test_no_fragment(self):
        template = Template.parse("just text {{{name}}}", "Broken.txt")
        with pytest.raises(TemplateError):
            render_aggregate(template, [{"name": "A"}])
