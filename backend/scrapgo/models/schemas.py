from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from scrapgo.models.identity import Identity, Role

# --------------------------
# Auth
# --------------------------
class LoginIn(BaseModel):
    phone: str
    code: str
    role: Role

class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    identity: Identity

# --------------------------
# Pickups
# --------------------------
class PickupCreate(BaseModel):
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    address: str
    map_link: Optional[str] = None
    pickup_date: str
    time_slot: str

class AcceptIn(BaseModel):
    partner_name: Optional[str] = None

class StartIn(BaseModel):
    code: str

class ItemIn(BaseModel):
    id: Optional[str] = None
    name: str
    quantity: int
    price: Decimal

class ItemsIn(BaseModel):
    items: List[ItemIn]
    total_amount: Decimal

# --------------------------
# Dashboard
# --------------------------
class DashboardCounts(BaseModel):
    pending: int
    in_progress: int
    completed: int
