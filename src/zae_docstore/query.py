"""Parameterized id-membership filters."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from .exceptions import ValidationError
from .schema import DOCUMENT_ID_ATTR

ID_ATTRIBUTE = DOCUMENT_ID_ATTR

# DynamoDB accepts at most 100 operands on the right-hand side of IN
MAX_IN_OPERANDS = 100


@dataclass(frozen=True)
class IdFilter:
    """
    A filter expression with its bound parameters.

    Attributes:
        expression: FilterExpression text, or None when unrestricted
        names: ExpressionAttributeNames placeholders
        values: ExpressionAttributeValues, one bound value per id
    """

    expression: str | None = None
    names: dict[str, str] = field(default_factory=dict)
    values: dict[str, Any] = field(default_factory=dict)

    @property
    def unrestricted(self) -> bool:
        return self.expression is None

    def as_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for a Query or Scan call."""
        if self.expression is None:
            return {}
        return {
            "FilterExpression": self.expression,
            "ExpressionAttributeNames": dict(self.names),
            "ExpressionAttributeValues": dict(self.values),
        }


def _param_name(index: int) -> str:
    return f":item_{index}"


def build_id_filter(ids: Sequence[str] | None) -> IdFilter:
    """
    Build a filter selecting documents whose id is in ``ids``.

    Every id is passed as a bound value, never spliced into the expression.
    The ``#id`` placeholder names the non-key id copy written with every item.

    - no ids: unrestricted filter (matches everything in the partition)
    - one id: ``#id = :item_0``
    - many ids: ``#id IN (:item_0, :item_1, ...)`` in input order

    Raises:
        ValidationError: If more ids are given than the store accepts in IN;
            callers split longer lists into chunks of MAX_IN_OPERANDS
    """
    if not ids:
        return IdFilter()

    if len(ids) > MAX_IN_OPERANDS:
        raise ValidationError(
            "ids",
            len(ids),
            f"At most {MAX_IN_OPERANDS} ids can be looked up in one call",
        )

    names = {"#id": ID_ATTRIBUTE}

    if len(ids) == 1:
        return IdFilter(
            expression=f"#id = {_param_name(0)}",
            names=names,
            values={_param_name(0): {"S": ids[0]}},
        )

    values = {_param_name(i): {"S": item_id} for i, item_id in enumerate(ids)}
    expression = f"#id IN ({', '.join(values)})"
    return IdFilter(expression=expression, names=names, values=values)
