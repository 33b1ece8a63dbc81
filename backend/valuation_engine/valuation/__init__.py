"""
Valuation pipeline: EBITDA normalization, value-driver aggregation,
multiple resolution and range calculation.
"""
