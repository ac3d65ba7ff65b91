import uvicorn
from dotenv import load_dotenv
import os
from pathlib import Path
import logging

# Configure logging before any application imports
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s RUN_DEV.PY - [%(levelname)s] - %(message)s'
)
logger = logging.getLogger("run_dev_script")

TRUTHY = ["true", "1", "yes", "on", "t"]

if __name__ == "__main__":
    project_root = Path(__file__).parent.resolve()
    dotenv_path_explicit = project_root / ".env"

    if dotenv_path_explicit.exists():
        logger.info(f".env file FOUND at: {dotenv_path_explicit}")
        load_dotenv(dotenv_path=dotenv_path_explicit, override=True)
    else:
        logger.warning(f".env file NOT FOUND at: {dotenv_path_explicit}. "
                       "Will rely on OS environment variables or pydantic-settings defaults.")

    _secret_val = os.getenv('LOGIN_SHARED_SECRET')
    logger.info(f"LOGIN_SHARED_SECRET: {'********' if _secret_val else 'None'}")
    logger.info(f"DEBUG_MODE: {os.getenv('DEBUG_MODE')}")
    logger.info(f"REDIS_ENABLED: {os.getenv('REDIS_ENABLED')}, REDIS_HOST: {os.getenv('REDIS_HOST')}")
    logger.info(f"SQLITE_DB_PATH: {os.getenv('SQLITE_DB_PATH')}")

    host = os.getenv("DEV_SERVER_HOST", "127.0.0.1")
    port = int(os.getenv("DEV_SERVER_PORT", os.getenv("PORT", "3000")))
    uvicorn_log_level = os.getenv("DEV_SERVER_LOG_LEVEL", "info").lower()

    debug_mode_bool_for_reload = os.getenv("DEBUG_MODE", "False").lower() in TRUTHY
    reload_bool = os.getenv("DEV_SERVER_RELOAD", str(debug_mode_bool_for_reload)).lower() in TRUTHY

    logger.info(f"Starting Uvicorn server on {host}:{port} (log level {uvicorn_log_level}, reload={reload_bool})")
    logger.info("App module: admin_panel.main:app")

    uvicorn.run(
        "admin_panel.main:app",
        host=host,
        port=port,
        log_level=uvicorn_log_level,
        reload=reload_bool
    )
