# admin_panel/cli/users_cli.py
import typer
from typing import List, Optional
from typing_extensions import Annotated

from .utils_cli import make_api_request

app = typer.Typer(
    name="users",
    help="Manage Admin Panel users.",
    no_args_is_help=True
)


@app.command("create")
def create_user(
    email: Annotated[str, typer.Option(prompt="User email", help="Unique email address.")],
    name: Annotated[Optional[str], typer.Option(help="Display name.")] = None,
    roles: Annotated[Optional[List[str]], typer.Option("--role", help="Role to grant; repeat for several.")] = None,
):
    """Create a user (requires the admin role)."""
    payload = {"email": email, "name": name, "roles": roles or []}
    make_api_request("POST", "/users", json_payload=payload, expected_status=201)


@app.command("get")
def get_user(user_id: Annotated[int, typer.Argument(help="ID of the user to retrieve.")]):
    """Get a single user."""
    make_api_request("GET", f"/users/{user_id}")


@app.command("list")
def list_users(
    page: Annotated[int, typer.Option("--page", help="1-based page number.", min=1)] = 1,
    limit: Annotated[int, typer.Option("--limit", help="Page size.", min=1, max=100)] = 10,
):
    """List users one page at a time."""
    make_api_request("GET", "/users", params_payload={"page": page, "limit": limit})


@app.command("update")
def update_user(
    user_id: Annotated[int, typer.Argument(help="ID of the user to update.")],
    email: Annotated[Optional[str], typer.Option(help="New email address.")] = None,
    name: Annotated[Optional[str], typer.Option(help="New display name.")] = None,
    roles: Annotated[Optional[List[str]], typer.Option("--role", help="Replace roles; repeat for several.")] = None,
):
    """Update the given fields of a user."""
    payload = {}
    if email is not None:
        payload["email"] = email
    if name is not None:
        payload["name"] = name
    if roles:
        payload["roles"] = roles

    if not payload:
        typer.secho("No update fields provided. Nothing to do.", fg=typer.colors.YELLOW)
        raise typer.Exit()

    make_api_request("PUT", f"/users/{user_id}", json_payload=payload)


@app.command("delete")
def delete_user(
    user_id: Annotated[int, typer.Argument(help="ID of the user to delete.")],
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip the confirmation prompt.")] = False,
):
    """Delete a user (requires the admin role)."""
    if not force:
        typer.confirm(f"Delete user {user_id}?", abort=True)
    make_api_request("DELETE", f"/users/{user_id}")
