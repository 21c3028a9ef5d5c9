"""Reconcile two transaction exports and report what is missing from each."""

__version__ = "0.1.0"
