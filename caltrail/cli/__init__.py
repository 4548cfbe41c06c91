# caltrail/cli/__init__.py
import click

from caltrail import db
from .seed import seed_group
from .export import export_group


@click.command("init-db")
def init_db():
    """Create every table that does not exist yet."""
    db.create_all()
    click.secho("Database tables created.", fg="green")


def register_cli(app):
    """Register the app's CLI groups and commands."""
    app.cli.add_command(init_db)
    app.cli.add_command(seed_group)
    app.cli.add_command(export_group)
