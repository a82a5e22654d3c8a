from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

Role = Literal["customer", "partner"]
ROLES = ("customer", "partner")

class Identity(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    phone: str
    name: Optional[str] = None
    role: Role
