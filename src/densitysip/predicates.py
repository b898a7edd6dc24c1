"""
Control predicates: classify each sample as unlabeled control or labeled treatment.

A predicate is either
- any callable taking a sample metadata record (a mapping of column -> value)
  and returning a bool, or
- a small expression tree built with `equals`/`isin` and combined with
  `&`, `|` and `~`, e.g. ``equals("Substrate", "12C-Con") | isin("Day", [0, 1])``.

Expression trees report the columns they reference, so a missing column is
detected before any sample is evaluated.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, Iterable, Mapping, Union

import numpy as np
import pandas as pd

__all__ = [
    "Expr",
    "Equals",
    "IsIn",
    "Not",
    "And",
    "Or",
    "equals",
    "isin",
    "ControlPredicate",
    "predicate_columns",
    "evaluate_predicate",
    "classify_samples",
]


class Expr:
    """Base class of predicate expressions."""

    def __call__(self, record: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    @property
    def columns(self) -> FrozenSet[str]:
        raise NotImplementedError

    def __and__(self, other: "Expr") -> "Expr":
        return And(self, other)

    def __or__(self, other: "Expr") -> "Expr":
        return Or(self, other)

    def __invert__(self) -> "Expr":
        return Not(self)


@dataclass(frozen=True)
class Equals(Expr):
    column: str
    value: Any

    def __call__(self, record: Mapping[str, Any]) -> bool:
        return bool(record[self.column] == self.value)

    @property
    def columns(self) -> FrozenSet[str]:
        return frozenset([self.column])


@dataclass(frozen=True)
class IsIn(Expr):
    column: str
    values: tuple

    def __call__(self, record: Mapping[str, Any]) -> bool:
        return record[self.column] in self.values

    @property
    def columns(self) -> FrozenSet[str]:
        return frozenset([self.column])


@dataclass(frozen=True)
class Not(Expr):
    operand: Expr

    def __call__(self, record: Mapping[str, Any]) -> bool:
        return not self.operand(record)

    @property
    def columns(self) -> FrozenSet[str]:
        return self.operand.columns


@dataclass(frozen=True)
class And(Expr):
    left: Expr
    right: Expr

    def __call__(self, record: Mapping[str, Any]) -> bool:
        return self.left(record) and self.right(record)

    @property
    def columns(self) -> FrozenSet[str]:
        return self.left.columns | self.right.columns


@dataclass(frozen=True)
class Or(Expr):
    left: Expr
    right: Expr

    def __call__(self, record: Mapping[str, Any]) -> bool:
        return self.left(record) or self.right(record)

    @property
    def columns(self) -> FrozenSet[str]:
        return self.left.columns | self.right.columns


ControlPredicate = Union[Expr, Callable[[Mapping[str, Any]], bool]]


def equals(column: str, value: Any) -> Equals:
    return Equals(column, value)


def isin(column: str, values: Iterable[Any]) -> IsIn:
    return IsIn(column, tuple(values))


def predicate_columns(predicate: ControlPredicate) -> FrozenSet[str]:
    """Columns referenced by an expression predicate (empty for plain callables)."""
    if isinstance(predicate, Expr):
        return predicate.columns
    return frozenset()


def evaluate_predicate(predicate: ControlPredicate, record: Mapping[str, Any]) -> bool:
    """
    Evaluate a predicate on one sample record.

    Raises:
        KeyError: the predicate references a column absent from the record
        ValueError: the predicate did not return a boolean
    """
    try:
        result = predicate(record)
    except KeyError as e:
        raise KeyError(f"Control predicate references a missing column: {e}") from e
    if not isinstance(result, (bool, np.bool_)):
        raise ValueError(
            f"Control predicate must return a boolean, got {type(result).__name__}: {result!r}"
        )
    return bool(result)


def classify_samples(df: pd.DataFrame, predicate: ControlPredicate, sample_col: str) -> pd.Series:
    """
    Evaluate the predicate once per sample, using the sample's first row as its metadata record.

    Returns a boolean Series indexed by sample id (True = control).
    """
    if not callable(predicate):
        raise ValueError(f"Control predicate must be callable, got {type(predicate).__name__}")
    missing = sorted(predicate_columns(predicate) - set(df.columns))
    if missing:
        raise KeyError(f"Control predicate columns not found: {missing}. Available: {list(df.columns)[:20]}")

    samples = df.drop_duplicates(subset=sample_col)
    flags = {
        rec[sample_col]: evaluate_predicate(predicate, rec)
        for rec in samples.to_dict("records")
    }
    return pd.Series(flags, dtype=bool, name=sample_col)
