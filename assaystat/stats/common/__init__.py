"""
assaystat.stats.common
======================

Common numerical methods.

Generic, reusable implementations that the hypothesis tests in
`assaystat.stats.schemes` are composed from:

- `special`: gamma, log-gamma, regularized incomplete gamma and beta,
  standard normal CDF
- `distributions`: chi-square, F and studentized-range CDFs
- `combinatorics`: log-factorials and hypergeometric probabilities
- `correction`: Bonferroni, Holm and Benjamini-Hochberg adjustments
"""
