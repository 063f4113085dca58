"""
Where Filter Model Module

This module provides the recursive filter expression used to narrow Weaviate searches
and batch deletions. A filter is either a combinator (``And``, ``Or``, ``Not``) over a
non-empty list of child filters, or a leaf comparing the property at ``path`` against
exactly one typed value field (``valueText``, ``valueInt``, ``valueGeoRange``, ...).

Filters are usually received as JSON from tool parameters, so ``WhereFilter.from_dict``
checks the whole tree and reports the first structural problem as a ``ValueError``.

Author: Weaviate Team
Version: 1.0.0
"""

from dataclasses import dataclass
from enum import Enum
import math
from typing import Any, Dict, List, Mapping, Optional, Tuple


class FilterOperator(str, Enum):
    AND = "And"
    OR = "Or"
    NOT = "Not"
    EQUAL = "Equal"
    NOT_EQUAL = "NotEqual"
    GREATER_THAN = "GreaterThan"
    GREATER_THAN_EQUAL = "GreaterThanEqual"
    LESS_THAN = "LessThan"
    LESS_THAN_EQUAL = "LessThanEqual"
    LIKE = "Like"
    CONTAINS_ANY = "ContainsAny"
    CONTAINS_ALL = "ContainsAll"
    WITHIN_GEO_RANGE = "WithinGeoRange"
    IS_NULL = "IsNull"


COMBINATOR_OPERATORS = frozenset({FilterOperator.AND, FilterOperator.OR, FilterOperator.NOT})


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)


def _is_bool(v: Any) -> bool:
    return isinstance(v, bool)


def _is_str(v: Any) -> bool:
    return isinstance(v, str)


def _array_of(check):
    def _check(v: Any) -> bool:
        return isinstance(v, (list, tuple)) and all(check(x) for x in v)
    return _check


def _is_geo_range(v: Any) -> bool:
    if not isinstance(v, Mapping):
        return False
    coords = v.get("geoCoordinates")
    distance = v.get("distance")
    if not isinstance(coords, Mapping) or not isinstance(distance, Mapping):
        return False
    return (
        _is_number(coords.get("latitude"))
        and _is_number(coords.get("longitude"))
        and _is_number(distance.get("max"))
    )


# Value field name -> type check for the value it carries (declaration order is
# the order fields are reported in error messages)
VALUE_FIELDS = {
    "valueInt": _is_int,
    "valueNumber": _is_number,
    "valueBoolean": _is_bool,
    "valueString": _is_str,
    "valueText": _is_str,
    "valueDate": _is_str,
    "valueGeoRange": _is_geo_range,
    "valueIntArray": _array_of(_is_int),
    "valueNumberArray": _array_of(_is_number),
    "valueBooleanArray": _array_of(_is_bool),
    "valueStringArray": _array_of(_is_str),
    "valueTextArray": _array_of(_is_str),
    "valueDateArray": _array_of(_is_str),
}


@dataclass(frozen=True)
class WhereFilter:
    """
    A node of a Weaviate where-filter tree.

    Attributes:
        operator (FilterOperator): Combinator or comparison operator
        path (Tuple[str, ...]): Property path compared by a leaf; empty on combinators
        operands (Tuple[WhereFilter, ...]): Child filters of a combinator; empty on leaves
        value_field (Optional[str]): Name of the populated value field on a leaf
        value (Any): Value held by ``value_field``
    """

    operator: FilterOperator
    path: Tuple[str, ...] = ()
    operands: Tuple["WhereFilter", ...] = ()
    value_field: Optional[str] = None
    value: Any = None

    def __post_init__(self):
        object.__setattr__(self, "operator", FilterOperator(self.operator))
        object.__setattr__(self, "path", tuple(self.path or ()))
        object.__setattr__(self, "operands", tuple(self.operands or ()))

        if self.is_combinator:
            if not self.operands:
                raise ValueError(f"Operator '{self.operator.value}' requires at least one operand")
            if self.path or self.value_field is not None:
                raise ValueError(f"Operator '{self.operator.value}' cannot carry a path or value")
            return

        if self.operands:
            raise ValueError(f"Operator '{self.operator.value}' does not take operands")
        if not self.path or not all(isinstance(p, str) and p for p in self.path):
            raise ValueError(f"Operator '{self.operator.value}' requires a non-empty property path")
        if self.value_field not in VALUE_FIELDS:
            raise ValueError(
                f"Operator '{self.operator.value}' requires exactly one value field "
                f"({', '.join(VALUE_FIELDS)})"
            )
        if not VALUE_FIELDS[self.value_field](self.value):
            raise ValueError(f"Invalid value for '{self.value_field}': {self.value!r}")

    @property
    def is_combinator(self) -> bool:
        return self.operator in COMBINATOR_OPERATORS

    @classmethod
    def combine(cls, operator: FilterOperator, *operands: "WhereFilter") -> "WhereFilter":
        return cls(operator=operator, operands=operands)

    @classmethod
    def leaf(cls, operator: FilterOperator, path, value_field: str, value: Any) -> "WhereFilter":
        if isinstance(path, str):
            path = [path]
        return cls(operator=operator, path=tuple(path), value_field=value_field, value=value)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WhereFilter":
        """
        Build and check a filter tree from its JSON form.

        Args:
            data (Mapping[str, Any]): Filter in Weaviate's where-filter JSON shape, e.g.
                ``{"operator": "Equal", "path": ["title"], "valueText": "Hello"}``

        Returns:
            WhereFilter: The validated filter tree

        Raises:
            ValueError: If any node breaks the combinator/leaf invariants
        """
        if not isinstance(data, Mapping):
            raise ValueError("Filter must be a JSON object")

        raw_op = data.get("operator")
        try:
            operator = FilterOperator(raw_op)
        except ValueError:
            allowed = ", ".join(op.value for op in FilterOperator)
            raise ValueError(f"Unknown filter operator {raw_op!r}. Allowed: {allowed}") from None

        if operator in COMBINATOR_OPERATORS:
            operands = data.get("operands")
            if not isinstance(operands, (list, tuple)):
                raise ValueError(f"Operator '{operator.value}' requires an 'operands' array")
            return cls(operator=operator, operands=tuple(cls.from_dict(o) for o in operands))

        populated = [f for f in VALUE_FIELDS if data.get(f) is not None]
        if len(populated) != 1:
            raise ValueError(
                f"Operator '{operator.value}' requires exactly one value field, got {len(populated)}"
            )
        path = data.get("path")
        if isinstance(path, str):
            path = [path]
        if not isinstance(path, (list, tuple)):
            raise ValueError(f"Operator '{operator.value}' requires a 'path' array")
        field = populated[0]
        return cls(operator=operator, path=tuple(path), value_field=field, value=data[field])

    def to_dict(self) -> Dict[str, Any]:
        """Return the filter in Weaviate's where-filter JSON shape."""
        if self.is_combinator:
            return {
                "operator": self.operator.value,
                "operands": [o.to_dict() for o in self.operands],
            }
        value = self.value
        if isinstance(value, tuple):
            value = list(value)
        return {
            "operator": self.operator.value,
            "path": list(self.path),
            self.value_field: value,
        }


def parse_where_filter(data: Optional[Mapping[str, Any]]) -> Optional[WhereFilter]:
    """Build a ``WhereFilter`` from JSON, passing ``None`` and existing filters through."""
    if data is None or isinstance(data, WhereFilter):
        return data
    return WhereFilter.from_dict(data)


def equality_filter(conditions: Mapping[str, Any]) -> Optional[WhereFilter]:
    """
    Build an ``Equal`` filter (``And`` of several) from simple ``{property: value}`` pairs.

    Args:
        conditions (Mapping[str, Any]): Property names mapped to the values they must equal

    Returns:
        Optional[WhereFilter]: The filter, or None when there are no conditions
    """
    leaves: List[WhereFilter] = []
    for prop, value in (conditions or {}).items():
        if isinstance(value, bool):
            field = "valueBoolean"
        elif isinstance(value, int):
            field = "valueInt"
        elif isinstance(value, float):
            field = "valueNumber"
        else:
            field, value = "valueText", str(value)
        leaves.append(WhereFilter.leaf(FilterOperator.EQUAL, prop, field, value))
    if not leaves:
        return None
    if len(leaves) == 1:
        return leaves[0]
    return WhereFilter.combine(FilterOperator.AND, *leaves)
