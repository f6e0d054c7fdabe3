"""Synthesized JavaScript fragments and the builders that assemble them.

Fragments render to single-line source so inserting them never shifts the
line numbers of the surrounding program.
"""

import json
from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict

from saga_locations.models import LocationData

LOCATION_KEY = "@@redux-saga/LOCATION"
WRAPPER_FUNCTION_NAME = "reduxSagaSource"
WRAPPER_RESULT_NAME = "res"


class Fragment(BaseModel, ABC):
    model_config = ConfigDict(frozen=True)

    @abstractmethod
    def render(self) -> str: ...


class Identifier(Fragment):
    name: str

    def render(self) -> str:
        return self.name


class StringLiteral(Fragment):
    value: str

    def render(self) -> str:
        return json.dumps(self.value)


class NumericLiteral(Fragment):
    value: int

    def render(self) -> str:
        return str(self.value)


class Raw(Fragment):
    """Source text carried over from the input program."""

    text: str

    def render(self) -> str:
        return self.text


class MemberExpression(Fragment):
    target: Fragment
    property: Identifier

    def render(self) -> str:
        return f"{self.target.render()}.{self.property.render()}"


class CallExpression(Fragment):
    callee: Fragment
    arguments: list[Fragment] = []

    def render(self) -> str:
        return f"{self.callee.render()}({', '.join(arg.render() for arg in self.arguments)})"


class ObjectExpression(Fragment):
    properties: list[tuple[str, Fragment]] = []

    def render(self) -> str:
        return "{" + ", ".join(f"{key}: {value.render()}" for key, value in self.properties) + "}"


class ExpressionStatement(Fragment):
    expression: Fragment

    def render(self) -> str:
        return f"{self.expression.render()};"


class ImmediateWrapper(Fragment):
    """``(function name() { var res = <value>; <side_effect>; return res; })()``"""

    value: Fragment
    side_effect: ExpressionStatement

    def render(self) -> str:
        return (
            f"(function {WRAPPER_FUNCTION_NAME}() {{ "
            f"var {WRAPPER_RESULT_NAME} = {self.value.render()}; "
            f"{self.side_effect.render()} "
            f"return {WRAPPER_RESULT_NAME}; }})()"
        )


def build_key_expression(use_symbol: bool = True) -> Fragment:
    if use_symbol is False:
        return StringLiteral(value=LOCATION_KEY)
    return CallExpression(
        callee=MemberExpression(target=Identifier(name="Symbol"), property=Identifier(name="for")),
        arguments=[StringLiteral(value=LOCATION_KEY)],
    )


def _define_property(target: Fragment, key: Fragment, metadata: ObjectExpression) -> CallExpression:
    return CallExpression(
        callee=MemberExpression(target=Identifier(name="Object"), property=Identifier(name="defineProperty")),
        arguments=[target, key, ObjectExpression(properties=[("value", metadata)])],
    )


def _location_properties(location: LocationData) -> list[tuple[str, Fragment]]:
    return [
        ("fileName", StringLiteral(value=location.file_name)),
        ("lineNumber", NumericLiteral(value=location.line_number)),
    ]


def build_declaration_annotation(target_name: str, key: Fragment, location: LocationData) -> ExpressionStatement:
    metadata = ObjectExpression(properties=_location_properties(location))
    return ExpressionStatement(expression=_define_property(Identifier(name=target_name), key, metadata))


def build_expression_wrapper(target: Fragment, key: Fragment, location: LocationData, code: str) -> ImmediateWrapper:
    metadata = ObjectExpression(properties=[*_location_properties(location), ("code", StringLiteral(value=code))])
    side_effect = ExpressionStatement(expression=_define_property(Identifier(name=WRAPPER_RESULT_NAME), key, metadata))
    return ImmediateWrapper(value=target, side_effect=side_effect)
