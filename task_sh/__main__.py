"""
Main entry point for running task-sh as a module.

This allows the package to be executed directly with:
python -m task_sh
"""

from task_sh.main import app


def main() -> None:
    """Run the task-sh CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
