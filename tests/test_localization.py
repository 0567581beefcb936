"""
Tests for the localization index.
"""

from pagegen.localization import (
    LocalizationIndex,
    RawValue,
    StringPropertyValue,
    TextValue,
    payload_for_row,
)


class TestPayloads:
    """Test payload variant selection at build time."""

    def test_ftext(self):
        row = {"Text": {"Namespace": "", "Key": "1", "SourceString": "Wheat", "LocalizedString": "Blé"}}
        assert payload_for_row(row) == TextValue("Blé")

    def test_invariant_ftext(self):
        assert payload_for_row({"Text": {"CultureInvariantString": "Wheat"}}) == TextValue("Wheat")

    def test_string_property(self):
        assert payload_for_row({"Text": {"Value": "Edible"}}) == StringPropertyValue("Edible")
        assert payload_for_row({"Text": {"Content": "Edible"}}) == StringPropertyValue("Edible")

    def test_direct_string(self):
        assert payload_for_row({"Text": "Grain"}) == RawValue("Grain")

    def test_value_member(self):
        """Rows may store the text under Value instead of Text."""
        assert payload_for_row({"Value": "Water"}) == RawValue("Water")

    def test_plain_string_row(self):
        assert payload_for_row("Grain") == RawValue("Grain")

    def test_other_stored_value(self):
        assert payload_for_row({"Text": 42}) == RawValue(42)

    def test_nothing_usable(self):
        assert payload_for_row({}) is None
        assert payload_for_row({"Text": None}) is None
        assert payload_for_row(None) is None


class TestLookup:
    """Test lookups against a built index."""

    def setup_method(self):
        self.index = LocalizationIndex.from_rows([
            ("Crop_Wheat_Name", {"Text": {"SourceString": "Wheat", "LocalizedString": "Wheat"}}),
            ("Tag_Edible", {"Text": {"Value": "Edible"}}),
            ("Count", {"Text": 42}),
            ("Broken", {}),
        ])

    def test_found(self):
        assert self.index.lookup("Crop_Wheat_Name") == (True, "Wheat")
        assert self.index.lookup("Tag_Edible") == (True, "Edible")

    def test_raw_value_text_form(self):
        assert self.index.lookup("Count") == (True, "42")

    def test_not_found(self):
        assert self.index.lookup("Crop_Rice_Name") == (False, "")

    def test_case_sensitive(self):
        assert self.index.lookup("crop_wheat_name") == (False, "")

    def test_unusable_rows_not_indexed(self):
        assert "Broken" not in self.index
        assert len(self.index) == 3

    def test_localize_passes_through_unknown(self):
        assert self.index.localize("Crop_Wheat_Name") == "Wheat"
        assert self.index.localize("Plain text") == "Plain text"

    def test_empty_index(self):
        index = LocalizationIndex.empty()
        assert len(index) == 0
        assert index.localize("Crop_Wheat_Name") == "Crop_Wheat_Name"


class TestFixtureTable:
    """Test the index built from the fixture language table."""

    def test_entries(self, localization):
        assert len(localization) == 7
        assert localization.localize("Crop_Wheat_Desc") == "Golden grain for bread."
        assert localization.localize("Bld_Well_Desc") == "Draws fresh water."
        assert localization.localize("Tag_Grain") == "Grain"
