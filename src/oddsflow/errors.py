"""Failures that cross module boundaries.

Validation problems are not exceptions; see ``oddsflow.validation``.
"""
from __future__ import annotations


class StoreError(Exception):
    """A prediction could not be written. The draft should be kept for retry."""


class FetchError(Exception):
    """A read from the table store failed. Callers degrade to an empty result."""


class SignInRequired(Exception):
    """An anonymous viewer tried to open the prediction editor."""
