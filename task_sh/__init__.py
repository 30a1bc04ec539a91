"""
task-sh: turn natural-language task descriptions into vetted shell commands.
"""

__version__ = "0.3.0"
