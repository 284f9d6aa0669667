import dataclasses
import json

import hypothesis.strategies as st
import pytest
from hypothesis import given

from kaleido.kaleido_ast import (
    BinaryOp,
    Call,
    FunctionDef,
    NumberLiteral,
    Prototype,
    VariableRef,
    dump,
)


def test_number_to_dict() -> None:
    assert NumberLiteral(1.5).to_dict() == {"kind": "number", "value": 1.5}


def test_variable_to_dict() -> None:
    assert VariableRef("x").to_dict() == {"kind": "variable", "name": "x"}


def test_binary_to_dict_nests_operands() -> None:
    node = BinaryOp("+", NumberLiteral(1.0), VariableRef("y"))
    assert node.to_dict() == {
        "kind": "binary",
        "operator": "+",
        "left": {"kind": "number", "value": 1.0},
        "right": {"kind": "variable", "name": "y"},
    }


def test_call_arguments_are_tuple() -> None:
    node = Call("foo", [NumberLiteral(1.0)])  # type: ignore[arg-type]
    assert node.arguments == (NumberLiteral(1.0),)
    assert node == Call("foo", (NumberLiteral(1.0),))
    assert node.to_dict()["arguments"] == [{"kind": "number", "value": 1.0}]


def test_call_without_arguments() -> None:
    assert Call("now").to_dict() == {"kind": "call", "callee": "now", "arguments": []}


def test_prototype_arity_and_duplicates() -> None:
    proto = Prototype("f", ["a", "a", "b"])  # type: ignore[arg-type]
    assert proto.arity == 3
    assert proto.parameter_names == ("a", "a", "b")
    assert not proto.is_anonymous


def test_anonymous_function() -> None:
    fn = FunctionDef.anonymous(NumberLiteral(4.0))
    assert fn.signature == Prototype("", ())
    assert fn.signature.is_anonymous
    assert fn.signature.arity == 0
    assert fn.to_dict() == {
        "kind": "function",
        "signature": {"kind": "prototype", "name": "", "parameters": []},
        "body": {"kind": "number", "value": 4.0},
    }


def test_nodes_are_immutable() -> None:
    node = VariableRef("x")
    with pytest.raises(dataclasses.FrozenInstanceError):
        node.name = "y"  # type: ignore[misc]


def test_structural_equality() -> None:
    a = BinaryOp("*", VariableRef("x"), NumberLiteral(2.0))
    b = BinaryOp("*", VariableRef("x"), NumberLiteral(2.0))
    assert a == b
    assert a != BinaryOp("+", VariableRef("x"), NumberLiteral(2.0))
    assert NumberLiteral(1.0) != VariableRef("1.0")


def test_nodes_are_hashable() -> None:
    nodes = {Call("f", (VariableRef("x"),)), Call("f", (VariableRef("x"),))}
    assert len(nodes) == 1


def test_dump_is_json_serializable() -> None:
    nodes = [
        FunctionDef(Prototype("id", ("x",)), VariableRef("x")),
        Prototype("sin", ("x",)),
    ]
    data = dump(nodes)
    assert json.loads(json.dumps(data)) == data
    assert [d["kind"] for d in data] == ["function", "prototype"]


@given(st.text(), st.lists(st.text(), max_size=5))  # type: ignore[misc]
def test_prototype_to_dict(name: str, params: list[str]) -> None:
    d = Prototype(name, tuple(params)).to_dict()
    assert d["name"] == name
    assert d["parameters"] == params


@given(st.floats(allow_nan=False))  # type: ignore[misc]
def test_number_equality(value: float) -> None:
    assert NumberLiteral(value) == NumberLiteral(value)
