"""Tagged parameter schemas for tool arguments.

Each tool declares its parameters as a tree of ``Param`` objects. The tree
renders the JSON schema the model sees (``to_json_schema``) and validates the
arguments the model sends back (``validate``). Validation is pure: it never
mutates its input and either returns a cleaned copy with defaults applied or
raises ``SchemaViolation`` listing every problem found.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..errors import SchemaViolation


class _NoDefault:
    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Any = _NoDefault()


@dataclass(frozen=True, kw_only=True)
class Param:
    description: str = ""
    default: Any = NO_DEFAULT

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT

    def _base_schema(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.description:
            out["description"] = self.description
        if self.has_default:
            out["default"] = self.default
        return out

    def to_json_schema(self) -> dict[str, Any]:
        raise NotImplementedError

    def check(self, value: Any, path: str, errors: list[str]) -> Any:
        raise NotImplementedError


@dataclass(frozen=True, kw_only=True)
class StringParam(Param):
    def to_json_schema(self) -> dict[str, Any]:
        return {"type": "string", **self._base_schema()}

    def check(self, value: Any, path: str, errors: list[str]) -> Any:
        if not isinstance(value, str):
            errors.append(f"{path}: expected string, got {_type_name(value)}")
        return value


@dataclass(frozen=True, kw_only=True)
class NumberParam(Param):
    integer: bool = False
    minimum: float | None = None
    maximum: float | None = None

    def to_json_schema(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": "integer" if self.integer else "number"}
        if self.minimum is not None:
            out["minimum"] = self.minimum
        if self.maximum is not None:
            out["maximum"] = self.maximum
        out.update(self._base_schema())
        return out

    def check(self, value: Any, path: str, errors: list[str]) -> Any:
        # bool is an int subclass; JSON true is not a number
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            errors.append(f"{path}: expected number, got {_type_name(value)}")
            return value
        if self.integer:
            if isinstance(value, float):
                if not value.is_integer():
                    errors.append(f"{path}: expected integer, got {value}")
                    return value
                value = int(value)
        if self.minimum is not None and value < self.minimum:
            errors.append(f"{path}: must be >= {self.minimum:g}")
        if self.maximum is not None and value > self.maximum:
            errors.append(f"{path}: must be <= {self.maximum:g}")
        return value


@dataclass(frozen=True, kw_only=True)
class BooleanParam(Param):
    def to_json_schema(self) -> dict[str, Any]:
        return {"type": "boolean", **self._base_schema()}

    def check(self, value: Any, path: str, errors: list[str]) -> Any:
        if not isinstance(value, bool):
            errors.append(f"{path}: expected boolean, got {_type_name(value)}")
        return value


@dataclass(frozen=True, kw_only=True)
class EnumParam(Param):
    values: tuple[str, ...] = ()

    def to_json_schema(self) -> dict[str, Any]:
        return {"type": "string", "enum": list(self.values), **self._base_schema()}

    def check(self, value: Any, path: str, errors: list[str]) -> Any:
        if value not in self.values:
            allowed = ", ".join(repr(v) for v in self.values)
            errors.append(f"{path}: expected one of {allowed}, got {value!r}")
        return value


@dataclass(frozen=True, kw_only=True)
class ArrayParam(Param):
    items: Param
    min_items: int | None = None
    max_items: int | None = None

    def to_json_schema(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": "array", "items": self.items.to_json_schema()}
        if self.min_items is not None:
            out["minItems"] = self.min_items
        if self.max_items is not None:
            out["maxItems"] = self.max_items
        out.update(self._base_schema())
        return out

    def check(self, value: Any, path: str, errors: list[str]) -> Any:
        if not isinstance(value, list):
            errors.append(f"{path}: expected array, got {_type_name(value)}")
            return value
        n = len(value)
        if self.min_items is not None and n < self.min_items:
            errors.append(f"{path}: expected at least {self.min_items} item(s), got {n}")
        if self.max_items is not None and n > self.max_items:
            errors.append(f"{path}: expected at most {self.max_items} item(s), got {n}")
        return [self.items.check(v, f"{path}[{i}]", errors) for i, v in enumerate(value)]


@dataclass(frozen=True, kw_only=True)
class ObjectParam(Param):
    properties: Mapping[str, Param] = field(default_factory=dict)
    required: tuple[str, ...] = ()

    def to_json_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {k: p.to_json_schema() for k, p in self.properties.items()},
            "required": list(self.required),
            **self._base_schema(),
        }

    def check(self, value: Any, path: str, errors: list[str]) -> Any:
        if not isinstance(value, Mapping):
            errors.append(f"{path or 'arguments'}: expected object, got {_type_name(value)}")
            return value
        out: dict[str, Any] = {}
        for key, param in self.properties.items():
            sub = f"{path}.{key}" if path else key
            # models often send null for omitted optionals
            if key not in value or value[key] is None:
                if key in self.required:
                    errors.append(f"{sub}: field is required")
                elif param.has_default:
                    out[key] = copy.deepcopy(param.default)
                continue
            out[key] = param.check(value[key], sub, errors)
        # unknown keys are dropped
        return out


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def validate(schema: ObjectParam, args: Any, *, tool: str = "tool") -> dict[str, Any]:
    errors: list[str] = []
    cleaned = schema.check({} if args is None else args, "", errors)
    if errors:
        raise SchemaViolation(tool, errors)
    return cleaned
