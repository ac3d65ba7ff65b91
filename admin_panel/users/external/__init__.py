from .clients import EXAMPLE_API, EXAMPLE_API_SERVICE_NAME, example_api_descriptor
from .models import CreateExternalUser, ExternalUser, UpdateExternalUser
from .service import UserExternalService
from .endpoints import external_users_router

__all__ = [
    "EXAMPLE_API",
    "EXAMPLE_API_SERVICE_NAME",
    "example_api_descriptor",
    "CreateExternalUser",
    "ExternalUser",
    "UpdateExternalUser",
    "UserExternalService",
    "external_users_router",
]
