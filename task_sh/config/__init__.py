"""Configuration, settings and credential handling."""
