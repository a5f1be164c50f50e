"""Reconcile a GitHub release and its tags from a CI pipeline."""

__version__ = "0.3.0"
