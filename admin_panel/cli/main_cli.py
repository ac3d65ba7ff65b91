# admin_panel/cli/main_cli.py
import typer
from . import auth_cli
from . import users_cli

app = typer.Typer(
    name="admin-panel",
    help="Admin Panel Command Line Interface.",
    no_args_is_help=True
)

app.add_typer(auth_cli.app, name="auth")
app.add_typer(users_cli.app, name="users")


@app.callback()
def main_callback():
    """
    Admin Panel main CLI application.
    Run 'admin-panel auth login' first; later commands reuse the saved token.
    """
    pass


def cli_entry_point():
    """Entry point function for console script registration in pyproject.toml"""
    app()


if __name__ == "__main__":
    cli_entry_point()
