from fastapi import HTTPException

from scrapgo.core.errors import AuthError, EngineError, Result
from scrapgo.core.states import PickupStatus

STATUS_CODES = {
    EngineError.NOT_FOUND: 404,
    EngineError.INVALID_TRANSITION: 409,
    EngineError.INVALID_INPUT: 422,
    EngineError.CODE_MISMATCH: 403,
    EngineError.UNAUTHORIZED: 403,
    AuthError.INVALID_CODE: 401,
}

def ensure_ok(res: Result):
    """Unwrap a successful result or turn its failure kind into an HTTP error."""
    if res.ok:
        return res.value
    raise HTTPException(
        status_code=STATUS_CODES.get(res.error, 400),
        detail={"error": res.error.value, "message": res.detail},
    )

def ensure_role(identity, role: str):
    if identity.role != role:
        raise HTTPException(status_code=403, detail={"error": "unauthorized", "message": f"{role} only"})

def ensure_can_view(pickup, identity):
    if identity.role == "customer" and pickup.customer_id == identity.id:
        return
    if identity.role == "partner" and (
        pickup.state == PickupStatus.PENDING or getattr(pickup, "partner_id", None) == identity.id
    ):
        return
    raise HTTPException(status_code=403, detail={"error": "unauthorized", "message": "not your pickup"})
