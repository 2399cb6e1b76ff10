"""Tests del Value Object OptionSet."""

import pytest

from rental_engine.domain.errors import UnknownOptionError, ValidationError
from rental_engine.domain.value_objects.option_set import OptionKey, OptionSet


class TestFromInput:
    """Entrada del llamador: estricta."""

    def test_only_true_flags_are_selected(self):
        options = OptionSet.from_input({"unlimited_km": True, "child_seat": False})

        assert OptionKey.UNLIMITED_KM in options
        assert OptionKey.CHILD_SEAT not in options
        assert len(options) == 1

    def test_legacy_camel_case_keys(self):
        options = OptionSet.from_input({"unlimitedKm": True, "tireInsurance": True})

        assert options == OptionSet.of(OptionKey.UNLIMITED_KM, OptionKey.TIRE_INSURANCE)

    def test_unknown_key_fails(self):
        with pytest.raises(UnknownOptionError) as exc_info:
            OptionSet.from_input({"jetpack": True})

        assert exc_info.value.option_key == "jetpack"

    def test_non_boolean_value_fails(self):
        with pytest.raises(ValidationError):
            OptionSet.from_input({"unlimited_km": "yes"})

    def test_none_is_empty(self):
        assert OptionSet.from_input(None) == OptionSet.empty()


class TestParse:
    """Opciones persistidas: tolerante."""

    def test_json_string(self):
        options = OptionSet.parse('{"sim_card": true, "child_seat": false}')

        assert options == OptionSet.of(OptionKey.SIM_CARD)

    @pytest.mark.parametrize("raw", [None, "", "{not json", "[1, 2]", 42])
    def test_malformed_payload_is_empty(self, raw):
        assert OptionSet.parse(raw) == OptionSet.empty()

    def test_unknown_keys_are_ignored(self):
        options = OptionSet.parse({"jetpack": True, "child_seat": True})

        assert options == OptionSet.of(OptionKey.CHILD_SEAT)

    def test_non_true_values_are_not_selected(self):
        assert OptionSet.parse({"child_seat": "true"}) == OptionSet.empty()

    def test_to_dict_lists_every_key(self):
        as_dict = OptionSet.of(OptionKey.SIM_CARD).to_dict()

        assert set(as_dict) == {key.value for key in OptionKey}
        assert as_dict["sim_card"] is True
        assert as_dict["child_seat"] is False
        assert OptionSet.parse(as_dict) == OptionSet.of(OptionKey.SIM_CARD)

    def test_iteration_is_sorted(self):
        options = OptionSet.of(OptionKey.UNLIMITED_KM, OptionKey.CHILD_SEAT)

        assert [key.value for key in options] == ["child_seat", "unlimited_km"]
