from typing import Dict, Iterable, Union
from collections.abc import Iterable as IterableABC

from ..selectors import (
    SELECTOR_TYPES, LabelSelector, EqualsSelector, NotEqualsSelector, ExistsSelector
)

LabelValue = Union[str, None, Iterable[str], LabelSelector]
Selectors = Union[str, LabelSelector, Iterable[LabelSelector], Dict[str, LabelValue]]


def _from_pair(key, value) -> LabelSelector:
    if value is None:
        return ExistsSelector(key)
    if isinstance(value, str):
        return EqualsSelector(key, value)
    if isinstance(value, SELECTOR_TYPES):
        return value
    if isinstance(value, IterableABC):
        return NotEqualsSelector(key, *value)
    raise ValueError(f"selector value '{value}' should be str, None, Iterable or a label selector")


def build_selector(selectors: Selectors) -> str:
    """Build the `labelSelector` query parameter. Expressions are joined with `,` (logical AND)."""
    if isinstance(selectors, str):
        return selectors
    if isinstance(selectors, SELECTOR_TYPES):
        return selectors.to_expression()
    if isinstance(selectors, dict):
        selectors = [_from_pair(k, v) for k, v in selectors.items()]

    res = []
    for sel in selectors:
        if not isinstance(sel, SELECTOR_TYPES):
            raise ValueError(f"'{sel}' is not a label selector")
        res.append(sel.to_expression())
    return ','.join(res)
