"""
Statistical methods of the engine.

1. **Common** (assaystat.stats.common):
   Generic numerical building blocks independent of any experimental design:
   special functions, distribution CDFs, combinatorial primitives and
   multiple-testing corrections.

2. **Schemes** (assaystat.stats.schemes):
   Hypothesis tests for particular kinds of data (contingency tables,
   grouped measurements, survival records) composed from `common`.

Example:
--------
>>> from assaystat.stats.common.distributions import chi_square_cdf
>>> chi_square_cdf(-1.0, 2)
0.0

>>> from assaystat.stats.schemes.contingency import chi_square_test
>>> chi_square_test([[5, 5], [5, 5]]).statistic
0.0
"""
