"""Data models and error types shared across the pipeline."""
