from __future__ import annotations
from typing import Optional

import numpy as np
from pandera import Column, DataFrameSchema, Check

from .config import TAXON_COL, SAMPLE_COL, DENSITY_COL, COUNT_COL, IS_CONTROL_COL, W_COL

schema_formatted = DataFrameSchema({
    TAXON_COL: Column(nullable=False),
    SAMPLE_COL: Column(nullable=False),
    IS_CONTROL_COL: Column(bool, nullable=False),
    DENSITY_COL: Column(float, Check(np.isfinite, error="buoyant density must be finite"), nullable=False),
    COUNT_COL: Column(float, Check.ge(0), nullable=True),
})

schema_w_table = DataFrameSchema({
    TAXON_COL: Column(nullable=False),
    IS_CONTROL_COL: Column(bool, nullable=False),
    W_COL: Column(float, nullable=True),
})


def assert_formatted(df, replicate_col: Optional[str] = None):
    schema = schema_formatted
    if replicate_col is not None and replicate_col not in schema.columns:
        schema = schema.add_columns({replicate_col: Column(nullable=True)})
    schema.validate(df, lazy=True)


def assert_w_table(df):
    schema_w_table.validate(df, lazy=True)
