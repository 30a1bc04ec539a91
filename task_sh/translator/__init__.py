"""Prompt construction, backend access and reply parsing."""
