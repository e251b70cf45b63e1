"""Main entry point for the CourseHub CLI.

Usage:
    python -m coursehub.main --help
    coursehub --help  # If installed via pip/uv
"""

from coursehub.cli import main

if __name__ == "__main__":
    main()
