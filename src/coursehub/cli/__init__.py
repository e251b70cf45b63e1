"""CLI commands for CourseHub.

Provides command-line interface using Typer:
- coursehub serve: Run the API server
- coursehub seed: Create the admin user if absent

Usage:
    coursehub --help
    coursehub serve --port 8080
    coursehub seed
"""

import typer

from coursehub.cli.seed import app as seed_app
from coursehub.cli.serve import app as serve_app

app = typer.Typer(
    name="coursehub",
    help="CourseHub: course catalog and enrollment service",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")
app.add_typer(seed_app, name="seed")


@app.callback()
def callback() -> None:
    """CourseHub: course catalog and enrollment service."""


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
