from typing import Optional

from pydantic import BaseModel


class Principal(BaseModel):
    """A caller already authenticated by the identity gateway."""

    user_id: str
    email: Optional[str] = None
