"""
assaystat.reporting
===================

Polars DataFrame views of result records (`tables`).
"""
