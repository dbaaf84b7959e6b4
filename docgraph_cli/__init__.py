"""DocGraph: documentation dependency graph and blast-radius engine."""

__version__ = "1.0.0"
