"""
Hypothesis tests for the kinds of data an experiment produces.

- `contingency`: count data (chi-square, Fisher's exact, proportion z-test,
  pairwise proportion comparisons)
- `anova`: grouped measurements (one-way and multi-way ANOVA, Tukey HSD)
- `survival`: censored follow-up times (log-rank test, Kaplan-Meier)
"""
