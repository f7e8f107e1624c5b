"""Analysis core of the SQL workbench: splitting, parameters, plans, advice and diffs."""

__version__ = "0.1.0"
