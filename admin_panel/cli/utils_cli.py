# admin_panel/cli/utils_cli.py
import requests
import typer
import json
from typing import Optional, Dict, Any, Union, List

from . import config


def load_token() -> Optional[str]:
    if config.ADMIN_PANEL_CLI_TOKEN:
        return config.ADMIN_PANEL_CLI_TOKEN
    if config.ADMIN_PANEL_CLI_TOKEN_FILE.exists():
        return config.ADMIN_PANEL_CLI_TOKEN_FILE.read_text(encoding="utf-8").strip() or None
    return None


def save_token(token: str) -> None:
    config.ADMIN_PANEL_CLI_TOKEN_FILE.write_text(token, encoding="utf-8")
    config.ADMIN_PANEL_CLI_TOKEN_FILE.chmod(0o600)


def clear_token() -> None:
    if config.ADMIN_PANEL_CLI_TOKEN_FILE.exists():
        config.ADMIN_PANEL_CLI_TOKEN_FILE.unlink()


def make_api_request(
    method: str,
    endpoint: str,
    json_payload: Optional[Dict[str, Any]] = None,
    params_payload: Optional[Dict[str, Any]] = None,
    expected_status: Union[int, List[int]] = 200,
    token: Optional[str] = None,
    quiet: bool = False,
) -> Any:
    """
    Call the admin panel API and return the ``data`` member of the envelope.

    Sends the saved session token as a Bearer header when one is available.
    Any unexpected status or connection problem ends the command with exit
    code 1.
    """
    full_url = f"{config.ADMIN_PANEL_CLI_API_BASE_URL}{endpoint}"
    headers: Dict[str, str] = {}

    session_token = token or load_token()
    if session_token:
        headers["Authorization"] = f"Bearer {session_token}"

    typer.echo(f"CLI: {method.upper()} {full_url}")
    if json_payload:
        log_payload = {k: ("*******" if k == "password" else v) for k, v in json_payload.items()}
        typer.echo(f"CLI: JSON Payload: {json.dumps(log_payload, indent=2)}")
    if params_payload:
        typer.echo(f"CLI: Query Params: {params_payload}")

    try:
        response = requests.request(
            method,
            full_url,
            json=json_payload,
            params=params_payload,
            headers=headers,
            timeout=30
        )
    except requests.exceptions.ConnectionError as e:
        typer.secho(
            f"CLI: Connection Error - Could not connect to API at {full_url}. Is the server running? Error: {e}",
            fg=typer.colors.RED
        )
        raise typer.Exit(code=1)
    except requests.exceptions.RequestException as e:
        typer.secho(f"CLI: Request Error - {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo(f"CLI: Response Status: {response.status_code}")
    expected_statuses = [expected_status] if isinstance(expected_status, int) else expected_status

    if response.status_code not in expected_statuses:
        err_msg = f"CLI: API Error - Expected status {expected_status}, got {response.status_code}."
        try:
            err_data = response.json()
            err_msg += f" Message: {err_data.get('message', response.text)}"
        except json.JSONDecodeError:
            err_msg += f" Raw response: {response.text}"
        typer.secho(err_msg, fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if not response.content:
        typer.secho(f"CLI: Success (Status {response.status_code}, No Content).", fg=typer.colors.GREEN)
        return None

    try:
        body = response.json()
    except json.JSONDecodeError:
        typer.secho(f"CLI: Error - Could not decode JSON response. Raw text: {response.text}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    data = body.get("data") if isinstance(body, dict) and "statusCode" in body else body
    if not quiet:
        typer.echo(typer.style("CLI: Response JSON:", fg=typer.colors.CYAN))
        typer.echo(json.dumps(data, indent=2))
    return data
