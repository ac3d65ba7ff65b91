# admin_panel/main.py
from contextlib import asynccontextmanager
import logging
from typing import Dict, Optional

from dotenv import load_dotenv
from fastapi import FastAPI
load_dotenv()

from .settings import Settings, settings as global_settings
from .auth.authenticator import TokenAuthenticationMiddleware
from .auth.credentials import CredentialVerifier, SharedSecretCredentialVerifier
from .auth.endpoints import auth_router
from .errors import StoreUnavailableError
from .exception_handlers import register_exception_handlers
from .http_client import HttpClientFactory, HttpClientService
from .responses import EnvelopeRoute
from .sessions import AbstractKeyValueStore, NullKeyValueStore, RedisKeyValueStore, SessionManager
from .storage.sqlite_base import close_sqlite_db_connection, configure_sqlite_db_path, get_sqlite_db_connection
from .users.endpoints import users_router
from .users.external.endpoints import external_users_router
from .users.sqlite_user_store import SQLiteUserStore
from .users.storage_interfaces import AbstractUserStore
from .users.stream_endpoints import stream_router

# Configure logging based on debug mode setting
if not logging.getLogger().hasHandlers():
    logging.basicConfig(
        level=global_settings.effective_log_level,
        format='%(asctime)s - %(name)s [%(levelname)s] - %(message)s'
    )
# settings.py may already have installed a handler, so basicConfig alone
# would leave the root level untouched
logging.getLogger().setLevel(global_settings.effective_log_level)

logger = logging.getLogger(__name__)
logger.setLevel(global_settings.effective_log_level)


async def _open_key_value_store(
    app_settings: Settings, injected: Optional[AbstractKeyValueStore]
) -> AbstractKeyValueStore:
    """
    Initialize the session store, falling back to NullKeyValueStore when Redis
    is disabled or does not answer at startup. The application keeps serving
    in that case, with every request unauthenticated.
    """
    if injected is None and not app_settings.redis_enabled:
        logger.warning("Redis disabled by configuration; sessions run in degraded mode.")
        store: AbstractKeyValueStore = NullKeyValueStore()
        await store.initialize()
        return store

    store = injected or RedisKeyValueStore(settings=app_settings)
    try:
        await store.initialize()
        return store
    except StoreUnavailableError as e:
        logger.error(f"Session store unavailable at startup, continuing in degraded mode: {e}")
        fallback = NullKeyValueStore()
        await fallback.initialize()
        return fallback


def create_app(
    settings: Optional[Settings] = None,
    *,
    key_value_store: Optional[AbstractKeyValueStore] = None,
    http_client_service: Optional[HttpClientService] = None,
    user_store: Optional[AbstractUserStore] = None,
    credential_verifier: Optional[CredentialVerifier] = None,
) -> FastAPI:
    """
    Build the application. Components not passed in are created from
    ``settings`` when the lifespan starts and released when it ends.
    """
    app_settings = settings or global_settings
    logging.getLogger().setLevel(app_settings.effective_log_level)
    logger.setLevel(app_settings.effective_log_level)

    @asynccontextmanager
    async def admin_panel_lifespan(app_instance: FastAPI):
        logger.info("Application startup initiated.")
        owns_http_client = http_client_service is None

        configure_sqlite_db_path(app_settings.sqlite_db_path)
        store = await _open_key_value_store(app_settings, key_value_store)
        session_manager = SessionManager(
            store=store,
            default_ttl_seconds=app_settings.session_ttl_seconds,
            key_prefix=app_settings.session_key_prefix,
        )
        http_service = http_client_service or HttpClientService(
            default_timeout=app_settings.http_client_default_timeout,
            default_retry_delay=app_settings.http_client_retry_delay,
        )
        users = user_store or SQLiteUserStore()
        await users.initialize()

        app_instance.state.key_value_store = store
        app_instance.state.session_manager = session_manager
        app_instance.state.http_client_service = http_service
        app_instance.state.http_client_factory = HttpClientFactory(http_service)
        app_instance.state.user_store = users
        app_instance.state.credential_verifier = credential_verifier or SharedSecretCredentialVerifier(
            app_settings.login_shared_secret
        )
        logger.info(f"Startup complete. Session store: {type(store).__name__}.")

        try:
            yield
        finally:
            logger.info("Application shutdown initiated.")
            if owns_http_client:
                await http_service.aclose()
            await store.teardown()
            await users.teardown()
            await close_sqlite_db_connection()
            logger.info("Application shutdown complete.")

    app = FastAPI(
        title=app_settings.app_name,
        debug=app_settings.debug_mode,
        version=app_settings.app_version,
        lifespan=admin_panel_lifespan,
    )
    app.router.route_class = EnvelopeRoute
    app.state.settings = app_settings

    register_exception_handlers(app)
    app.add_middleware(TokenAuthenticationMiddleware)

    @app.get("/")
    async def root_api():
        return {
            "name": app_settings.app_name,
            "version": app_settings.app_version,
            "environment": app_settings.environment,
        }

    @app.get("/health")
    async def health_api():
        """Reports each backing store; "degraded" when any of them is not answering."""
        store_statuses: Dict[str, str] = {}
        all_healthy = True

        try:
            conn = await get_sqlite_db_connection()
            conn.execute("SELECT 1")
            store_statuses["sqlite_main_db"] = "healthy"
        except Exception as e:
            store_statuses["sqlite_main_db"] = f"unhealthy: {e}"
            all_healthy = False

        store = getattr(app.state, "key_value_store", None)
        if isinstance(store, NullKeyValueStore) or store is None:
            store_statuses["session_store"] = "disabled"
            all_healthy = False
        else:
            try:
                if await store.ping():
                    store_statuses["session_store"] = "healthy"
                else:
                    store_statuses["session_store"] = "unhealthy"
                    all_healthy = False
            except StoreUnavailableError as e:
                store_statuses["session_store"] = f"unhealthy: {e}"
                all_healthy = False

        return {
            "status": "healthy" if all_healthy else "degraded",
            "details": store_statuses,
        }

    # The literal /users/external and /users/stream prefixes must be matched
    # before the /users/{user_id} routes
    app.include_router(auth_router)
    app.include_router(external_users_router)
    app.include_router(stream_router)
    app.include_router(users_router)

    logger.info(f"{app_settings.app_name} initialized. Routers mounted.")
    return app


app = create_app()
