"""
assaystat.api - Facade
======================

Entry points organised by the question being asked rather than by the test
that answers it. The caller still names the test; the facade only chains a
global test to its post-hoc follow-up.

- `compare_proportions()`: success rates across groups, with pairwise
  comparisons and p-value correction
- `compare_measurements()`: one-way ANOVA with Tukey HSD
"""
