"""Shared helpers: logging, YAML config, seeding."""
