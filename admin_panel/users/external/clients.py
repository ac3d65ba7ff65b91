# admin_panel/users/external/clients.py
"""Descriptor for the public JSONPlaceholder demo API."""
from typing import Optional

from ...http_client.descriptors import (
    ClientDescriptor,
    body_param,
    delete,
    get,
    header_param,
    path_param,
    post,
    put,
    query_param,
)
from ...settings import settings

EXAMPLE_API_SERVICE_NAME = "jsonplaceholder"


def example_api_descriptor(base_url: Optional[str] = None) -> ClientDescriptor:
    return ClientDescriptor(
        service_name=EXAMPLE_API_SERVICE_NAME,
        base_url=base_url or settings.example_api_base_url,
        timeout=settings.example_api_timeout,
        retries=settings.example_api_retries,
        methods={
            "get_users": get("/users"),
            "get_user": get("/users/:id", path_param("id")),
            "search_users": get("/users", query_param("name"), query_param("email")),
            "create_user": post("/users", body_param()),
            "update_user": put("/users/:id", path_param("id"), body_param()),
            "delete_user": delete("/users/:id", path_param("id")),
            "get_user_with_auth": get("/users/:id", path_param("id"), header_param("Authorization")),
        },
    )


EXAMPLE_API = example_api_descriptor()
