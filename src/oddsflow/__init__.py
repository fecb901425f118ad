"""Community match predictions for the OddsFlow site."""

__version__ = "0.1.0"
