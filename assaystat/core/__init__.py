"""
assaystat.core
==============

Infrastructure shared by every statistical module: typed names, result
records, the error taxonomy and analysis settings.
"""
