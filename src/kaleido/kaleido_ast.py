"""
Defines the abstract syntax tree (AST) node types for the Kaleido language.

The AST is a closed set of immutable node classes. Consumers dispatch on the node
type (e.g. with `match`/`isinstance`) rather than calling methods on a common base:

Expression nodes (`AstNode`):
    NumberLiteral: A numeric literal such as `1.0`.
    VariableRef: A reference to a named variable, not yet resolved.
    BinaryOp: A binary operator applied to two operand subtrees.
    Call: A call of a named function with positional argument expressions.

Top-level nodes (`TopLevel`):
    Prototype: A function signature, i.e. its name and parameter names (arity).
    FunctionDef: A signature paired with a body expression. A bare top-level
        expression is wrapped in a FunctionDef with an anonymous prototype.

ASTDict:
    TypedDict representation produced by `to_dict()` on every node, suitable for
    JSON output or debugging. The `kind` key names the variant.

Example:
    FunctionDef(Prototype("add", ("a", "b")), BinaryOp("+", VariableRef("a"), VariableRef("b")))
"""

from dataclasses import dataclass
from typing import Any, TypedDict, Union


class ASTDict(TypedDict, total=False):
    """
    Serialized form of an AST node.

    Fields:
        kind (str): Node variant ("number", "variable", "binary", "call", "prototype", "function").
        value (float): NumberLiteral value.
        name (str): VariableRef or Prototype name.
        operator (str): BinaryOp operator character.
        left (ASTDict): BinaryOp left operand.
        right (ASTDict): BinaryOp right operand.
        callee (str): Call target name.
        arguments (list[ASTDict]): Call arguments in order.
        parameters (list[str]): Prototype parameter names in order.
        signature (ASTDict): FunctionDef prototype.
        body (ASTDict): FunctionDef body expression.
    """

    kind: str
    value: float
    name: str
    operator: str
    left: "ASTDict"
    right: "ASTDict"
    callee: str
    arguments: list["ASTDict"]
    parameters: list[str]
    signature: "ASTDict"
    body: "ASTDict"


@dataclass(frozen=True)
class NumberLiteral:
    value: float

    def to_dict(self) -> ASTDict:
        return {"kind": "number", "value": self.value}


@dataclass(frozen=True)
class VariableRef:
    name: str

    def to_dict(self) -> ASTDict:
        return {"kind": "variable", "name": self.name}


@dataclass(frozen=True)
class BinaryOp:
    operator: str
    left: "AstNode"
    right: "AstNode"

    def to_dict(self) -> ASTDict:
        return {
            "kind": "binary",
            "operator": self.operator,
            "left": self.left.to_dict(),
            "right": self.right.to_dict(),
        }


@dataclass(frozen=True)
class Call:
    """A call expression. `arguments` is stored as a tuple; lists are converted."""

    callee: str
    arguments: tuple["AstNode", ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "arguments", tuple(self.arguments))

    def to_dict(self) -> ASTDict:
        return {
            "kind": "call",
            "callee": self.callee,
            "arguments": [arg.to_dict() for arg in self.arguments],
        }


@dataclass(frozen=True)
class Prototype:
    """
    A function signature: its name and ordered parameter names.

    The number of parameters is the function's arity. Duplicate names are kept as
    written; nothing at this layer validates them. An empty name marks the
    anonymous wrapper used for top-level expressions.
    """

    name: str
    parameter_names: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameter_names", tuple(self.parameter_names))

    @property
    def arity(self) -> int:
        return len(self.parameter_names)

    @property
    def is_anonymous(self) -> bool:
        return self.name == ""

    def to_dict(self) -> ASTDict:
        return {
            "kind": "prototype",
            "name": self.name,
            "parameters": list(self.parameter_names),
        }


@dataclass(frozen=True)
class FunctionDef:
    signature: Prototype
    body: "AstNode"

    @classmethod
    def anonymous(cls, body: "AstNode") -> "FunctionDef":
        """Wraps a bare expression in a zero-parameter function with an empty name."""
        return cls(Prototype(""), body)

    def to_dict(self) -> ASTDict:
        return {
            "kind": "function",
            "signature": self.signature.to_dict(),
            "body": self.body.to_dict(),
        }


AstNode = Union[NumberLiteral, VariableRef, BinaryOp, Call]
"""Any expression node."""

TopLevel = Union[FunctionDef, Prototype]
"""Anything the driving loop can hand to a consumer."""


def dump(nodes: list[Any]) -> list[ASTDict]:
    """Serializes a sequence of nodes with `to_dict()`."""
    return [node.to_dict() for node in nodes]
