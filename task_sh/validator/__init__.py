"""Safety classification of generated commands."""
