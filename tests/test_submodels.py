"""Tests for sub-model blocks and the schema catalogue."""

import json
import math

import pytest

from system_model import (
    ConfigurationError, NotFoundError, ParameterRangeError, Role, SubModelBlock,
    make_block, state_dimension, validate_block,
)
from system_model.config import SchemaCatalog, default_catalog


class TestBlockConstruction:

    def test_defaults_fill_missing_parameters(self):
        avr = make_block("AVRTypeI", Ka=50.0)
        assert avr["Ka"] == 50.0
        assert avr["Ta"] == 0.2
        assert list(avr.parameters) == list(default_catalog().get_schema("AVRTypeI").parameter_names)

    def test_unknown_variant(self):
        with pytest.raises(NotFoundError, match="AVRTypeZ"):
            make_block("AVRTypeZ")

    def test_unknown_parameter(self):
        with pytest.raises(ParameterRangeError) as exc_info:
            make_block("SingleMass", J=1.0)
        assert exc_info.value.field == "J"
        assert exc_info.value.component == "SingleMass"

    def test_role_comes_from_schema(self):
        assert make_block("KauraPLL").role is Role.FREQUENCY_ESTIMATOR
        assert make_block("TGTypeI").role is Role.GOVERNOR

    def test_with_parameters_returns_new_block(self):
        shaft = make_block("SingleMass")
        heavier = shaft.with_parameters(H=6.0)
        assert heavier["H"] == 6.0
        assert shaft["H"] == 3.148
        assert heavier != shaft

    def test_equal_inputs_give_equal_blocks(self):
        assert make_block("AVRTypeI", Ka=10.0) == SubModelBlock("AVRTypeI", {"Ka": 10.0})

    def test_parameters_are_read_only(self):
        avr = make_block("AVRTypeI")
        with pytest.raises(TypeError):
            avr.parameters["Ka"] = -5.0
        assert avr["Ka"] == make_block("AVRTypeI")["Ka"]

    def test_caller_dict_is_not_aliased(self):
        given = {"Ka": 10.0}
        avr = SubModelBlock("AVRTypeI", given)
        given["Ka"] = -5.0
        assert avr["Ka"] == 10.0

    def test_equal_blocks_hash_equal(self):
        a = make_block("SingleMass", H=4.0)
        b = make_block("SingleMass", H=4.0)
        assert hash(a) == hash(b)
        assert len({a, b, make_block("SingleMass")}) == 2


class TestValidate:

    def test_valid_block_passes(self):
        validate_block(make_block("AVRTypeI"))

    def test_negative_gain_names_field(self):
        with pytest.raises(ParameterRangeError) as exc_info:
            validate_block(make_block("AVRTypeI", Ka=-1.0), owner="gen1")
        assert exc_info.value.field == "Ka"
        assert exc_info.value.component == "gen1"

    def test_zero_time_constant(self):
        with pytest.raises(ParameterRangeError, match="Ta"):
            make_block("AVRTypeI", Ta=0.0).validate()

    def test_non_finite_parameter(self):
        with pytest.raises(ParameterRangeError, match="must be finite"):
            make_block("PSSFixed", V_pss=math.inf).validate()

    def test_non_numeric_parameter(self):
        with pytest.raises(ParameterRangeError, match="real number"):
            make_block("SingleMass", H="3.0").validate()

    def test_explicit_maximum(self):
        with pytest.raises(ParameterRangeError, match="efficiency"):
            make_block("TGFixed", efficiency=1.5).validate()

    def test_ordered_limits(self):
        with pytest.raises(ParameterRangeError) as exc_info:
            make_block("AVRTypeI", Va_min=6.0).validate()
        assert exc_info.value.field == "Va_min"

    def test_first_violation_in_schema_order(self):
        block = make_block("AVRTypeI", Tr=-1.0, Ka=-1.0)
        with pytest.raises(ParameterRangeError) as exc_info:
            block.validate()
        assert exc_info.value.field == "Ka"


class TestStateDimension:

    @pytest.mark.parametrize("variant, expected", [
        ("BaseMachine", 0),
        ("OneDOneQMachine", 2),
        ("SauerPaiMachine", 6),
        ("SingleMass", 2),
        ("FiveMassShaft", 10),
        ("AVRTypeI", 4),
        ("SEXS", 2),
        ("TGTypeI", 3),
        ("PSSFixed", 0),
        ("VirtualInertiaQDroop", 3),
        ("VoltageModeControl", 6),
        ("KauraPLL", 4),
        ("LCLFilter", 6),
    ])
    def test_declared_dimension(self, variant, expected):
        assert state_dimension(make_block(variant)) == expected

    def test_dimension_matches_state_names(self):
        block = make_block("SingleMass")
        assert block.state_names == ("delta", "omega")
        assert block.state_dimension() == len(block.state_names)


class TestSchemaCatalog:

    def test_every_shipped_variant_has_valid_defaults(self):
        catalog = default_catalog()
        for variant in catalog.get_valid_variants():
            block = make_block(variant)
            block.validate()
            assert isinstance(block.role, Role)
            assert block.state_dimension() >= 0

    def test_every_role_has_a_variant(self):
        catalog = default_catalog()
        for role in Role:
            assert catalog.variants_for_role(role.value), role

    def test_stats(self):
        stats = default_catalog().get_config_stats()
        assert stats["total_variants"] == len(default_catalog().get_valid_variants())

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            SchemaCatalog(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "schemas.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            SchemaCatalog(path)

    def test_unknown_rule(self, tmp_path):
        path = tmp_path / "schemas.json"
        path.write_text(json.dumps({
            "Odd": {"Role": "PSS", "States": [], "Parameters": {"k": {"Rule": "prime"}}},
        }))
        with pytest.raises(ConfigurationError, match="prime"):
            SchemaCatalog(path)

    def test_custom_catalogue(self, tmp_path):
        path = tmp_path / "schemas.json"
        path.write_text(json.dumps({
            "TinyPSS": {"Role": "PSS", "States": ["x"], "Parameters": {"k": {"Rule": "positive"}}},
        }))
        catalog = SchemaCatalog(path)
        schema = catalog.get_schema("TinyPSS")
        assert schema.states == ("x",)
        assert schema.parameters[0].required
        with pytest.raises(NotFoundError):
            catalog.get_schema("AVRTypeI")
