import os
import sys

# Put project root on sys.path so autodoc can import the package if needed
sys.path.insert(0, os.path.abspath("../.."))

project = "assaystat"
author = "assaystat developers"

extensions = [
    "autoapi.extension",
    "sphinx.ext.doctest",
    "sphinx.ext.napoleon",
    "myst_parser",
]
templates_path = []
exclude_patterns = []

html_theme = "alabaster"

master_doc = "index"

# ---------------------------------------------------------------------------
# sphinx-autoapi: generate the API reference for the `assaystat` package
# ---------------------------------------------------------------------------
autoapi_type = "python"
# Restrict autoapi to the package source directory so module names stay
# rooted at `assaystat.*`.
autoapi_dirs = ["../../assaystat"]

autoapi_ignore = [
    "**/docs/**",
    "**/tests/**",
    "**/.venv/**",
    "**/__pycache__/**",
]

autodoc_typehints = "description"

autoapi_options = [
    "members",
    "undoc-members",
    "show-inheritance",
    "show-module-summary",
]

autoapi_python_class_content = "both"
