"""Label selector expressions.

Label keys and values are not validated: malformed selectors are rejected by the API server.
"""
from dataclasses import dataclass
from typing import Tuple, Union

__all__ = ['LabelSelector', 'EqualsSelector', 'NotEqualsSelector', 'ExistsSelector', 'NotExistsSelector']


@dataclass(frozen=True)
class EqualsSelector:
    """Select objects where `label` has the given value"""
    label: str
    value: str

    def to_expression(self) -> str:
        return f"{self.label}={self.value}"


@dataclass(frozen=True, init=False)
class NotEqualsSelector:
    """Select objects where `label` has none of the given values.
    Note that `label notin (value)` also matches objects without the label.
    """
    label: str
    values: Tuple[str, ...]

    def __init__(self, label: str, *values: str):
        object.__setattr__(self, 'label', label)
        object.__setattr__(self, 'values', tuple(values))

    def to_expression(self) -> str:
        return f"{self.label} notin ({','.join(self.values)})"


@dataclass(frozen=True)
class ExistsSelector:
    """Select objects having `label`"""
    label: str

    def to_expression(self) -> str:
        return self.label


@dataclass(frozen=True)
class NotExistsSelector:
    """Select objects not having `label`"""
    label: str

    def to_expression(self) -> str:
        return f"!{self.label}"


LabelSelector = Union[EqualsSelector, NotEqualsSelector, ExistsSelector, NotExistsSelector]
SELECTOR_TYPES = (EqualsSelector, NotEqualsSelector, ExistsSelector, NotExistsSelector)
