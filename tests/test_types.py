"""Tests for data types, ports and node types."""

import pytest
from pydantic import BaseModel, Field

import blendnodes as bn

from ._catalog import ADD, COMBINE, LABEL, VECTOR, Vector


class TestDataType:
    """Tests for DataType construction and literal validation."""

    def test_enum_values_are_coerced(self) -> None:
        data_type = bn.DataType("num", "Number", "number", "#fff", shape="square")  # ty: ignore[invalid-argument-type]
        assert data_type.underlying_type is bn.UnderlyingType.NUMBER
        assert data_type.shape is bn.HandleShape.SQUARE

    def test_default_shape_is_circle(self) -> None:
        assert bn.DataType("s", "S", bn.UnderlyingType.STRING, "#fff").shape is bn.HandleShape.CIRCLE

    def test_complex_requires_schema(self) -> None:
        with pytest.raises(ValueError, match="requires a schema"):
            bn.DataType("vec", "Vector", bn.UnderlyingType.COMPLEX, "#fff")

    def test_primitive_rejects_schema(self) -> None:
        with pytest.raises(ValueError, match="must not define a schema"):
            bn.DataType("num", "Number", bn.UnderlyingType.NUMBER, "#fff", schema=int)

    def test_number_literals(self) -> None:
        number = bn.DataType("num", "Number", bn.UnderlyingType.NUMBER, "#fff")
        assert number.validate_value(3) == 3
        assert number.validate_value(2.5) == 2.5
        for bad in ("3", True, None, [1]):
            with pytest.raises(bn.ValueValidationError, match="expects a number"):
                number.validate_value(bad)

    def test_string_literals(self) -> None:
        text = bn.DataType("str", "String", bn.UnderlyingType.STRING, "#fff")
        assert text.validate_value("") == ""
        with pytest.raises(bn.ValueValidationError, match="expects a string"):
            text.validate_value(1)

    def test_complex_literals_are_parsed_by_schema(self) -> None:
        assert VECTOR.is_complex
        assert VECTOR.validate_value({"x": 1, "y": "2"}) == Vector(x=1.0, y=2.0)
        with pytest.raises(bn.ValueValidationError, match="schema of data type 'vec'"):
            VECTOR.validate_value({"x": "not a number", "y": 0})

    def test_annotated_schema(self) -> None:
        class Ramp(BaseModel):
            stops: list[float] = Field(min_length=2)

        ramp = bn.DataType("ramp", "Color Ramp", bn.UnderlyingType.COMPLEX, "#c7c729", schema=Ramp)
        assert ramp.validate_value({"stops": [0, 1]}).stops == [0.0, 1.0]
        with pytest.raises(bn.ValueValidationError):
            ramp.validate_value({"stops": [0]})

    def test_adapter_is_ignored_by_equality(self) -> None:
        first = bn.DataType("vec", "Vector", bn.UnderlyingType.COMPLEX, "#fff", schema=Vector)
        second = bn.DataType("vec", "Vector", bn.UnderlyingType.COMPLEX, "#fff", schema=Vector)
        assert first == second


class TestNodeType:
    """Tests for NodeType port lookups."""

    def test_iter_inputs_flattens_panels(self) -> None:
        assert [port.name for port in COMBINE.iter_inputs()] == ["x", "y", "offset"]

    def test_port_lookup_by_side(self) -> None:
        assert LABEL.port("text", bn.PortSide.INPUT) is LABEL.inputs[0]
        assert LABEL.port("text", bn.PortSide.OUTPUT) is LABEL.outputs[0]
        assert ADD.input_port("sum") is None
        assert ADD.output_port("sum") is not None

    def test_default_input_values(self) -> None:
        assert ADD.default_input_values() == {"a": 0, "b": 0}
        # "size" accepts no literal, so it is never seeded
        assert LABEL.default_input_values() == {"text": ""}
        assert COMBINE.default_input_values() == {"x": 0.0, "y": 0.0, "offset": {"x": 0, "y": 0}}

    def test_duplicate_input_names_rejected(self) -> None:
        with pytest.raises(ValueError, match="input port 'a' more than once"):
            bn.NodeType(
                "bad",
                "Bad",
                inputs=(
                    bn.PortDefinition("a", "num"),
                    bn.InputPanel("Panel", (bn.PortDefinition("a", "num"),)),
                ),
            )

    def test_sequences_become_tuples(self) -> None:
        node_type = bn.NodeType("n", "N", outputs=[bn.PortDefinition("o", "num")])  # ty: ignore[invalid-argument-type]
        assert isinstance(node_type.outputs, tuple)
