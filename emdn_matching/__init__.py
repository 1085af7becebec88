"""EMDN recategorization and reference-price matching."""
