# admin_panel/cli/config.py
import os
from dotenv import load_dotenv
from pathlib import Path

# cli/config.py -> admin_panel/cli -> admin_panel -> project root
project_root = Path(__file__).parent.parent.parent.resolve()

load_dotenv(dotenv_path=project_root / '.env', override=True)

ADMIN_PANEL_CLI_API_BASE_URL = os.getenv("ADMIN_PANEL_CLI_API_BASE_URL", "http://127.0.0.1:3000")

# An explicit token in the environment wins over the one saved by `auth login`
ADMIN_PANEL_CLI_TOKEN = os.getenv("ADMIN_PANEL_CLI_TOKEN")
ADMIN_PANEL_CLI_TOKEN_FILE = Path(
    os.getenv("ADMIN_PANEL_CLI_TOKEN_FILE", str(Path.home() / ".admin_panel_token"))
)
