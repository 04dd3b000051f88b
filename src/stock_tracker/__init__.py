"""Stock Tracker: product catalog store, form validation and stock reports."""

__version__ = "0.1.0"
