"""Catalog decoding, reconciliation and category importers."""
