# admin_panel/cli/auth_cli.py
import typer
from typing_extensions import Annotated

from .utils_cli import clear_token, load_token, make_api_request, save_token

app = typer.Typer(
    name="auth",
    help="Log in to and out of the Admin Panel API.",
    no_args_is_help=True
)


@app.command("login")
def login(
    email: Annotated[str, typer.Option(prompt="Email", help="Email of an existing user.")],
    password: Annotated[str, typer.Option(prompt=True, hide_input=True, help="Login password.")],
):
    """Log in and save the session token for later commands."""
    data = make_api_request(
        "POST", "/auth/login", json_payload={"email": email, "password": password}, quiet=True
    )
    save_token(data["token"])
    user = data.get("user") or {}
    typer.secho(f"Logged in as {user.get('email', email)} (roles: {user.get('roles', [])}).", fg=typer.colors.GREEN)


@app.command("me")
def me():
    """Show the identity behind the saved token."""
    data = make_api_request("GET", "/auth/me")
    if data is None:
        typer.secho("Not logged in.", fg=typer.colors.YELLOW)


@app.command("refresh")
def refresh():
    """Extend the lifetime of the current session."""
    make_api_request("POST", "/auth/refresh")


@app.command("logout")
def logout():
    """Destroy the server session and forget the saved token."""
    if load_token() is None:
        typer.secho("No saved token; nothing to do.", fg=typer.colors.YELLOW)
        return
    make_api_request("POST", "/auth/logout")
    clear_token()
    typer.secho("Logged out.", fg=typer.colors.GREEN)
