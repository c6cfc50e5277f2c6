"""Carrier routing for marketplace fulfillment: documents, carrier selection, pickups, tracking."""

__version__ = "1.0.0"
