"""Configuration, defaults, data preparation and small shared helpers."""
