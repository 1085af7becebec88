"""Recategorization and price matching services."""
