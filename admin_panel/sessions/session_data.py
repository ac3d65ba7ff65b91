# admin_panel/sessions/session_data.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Union


class UserIdentity(BaseModel):
    """
    Identity snapshot stored in the session store under an opaque token.

    Written once at login and rewritten whole on refresh; never partially
    mutated. Every read from the store is validated against this model.
    """

    model_config = ConfigDict(frozen=True)

    id: Union[int, str] = Field(description="Primary key of the user record.")
    email: str
    name: Optional[str] = None
    roles: List[str] = Field(default_factory=list)

    def has_any_role(self, required_roles) -> bool:
        """True if at least one of ``required_roles`` is held by this identity."""
        return any(role in self.roles for role in required_roles)
