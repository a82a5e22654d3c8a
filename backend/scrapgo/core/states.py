from enum import Enum


class PickupStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROCESS = "in-process"
    PENDING_APPROVAL = "pending-approval"
    COMPLETED = "completed"


# Partner drives the pickup up to item submission; only the customer closes it.
TRANSITIONS = {
    (PickupStatus.PENDING,          PickupStatus.ACCEPTED):         {"roles": ["partner"]},
    (PickupStatus.ACCEPTED,         PickupStatus.IN_PROCESS):       {"roles": ["partner"]},
    (PickupStatus.IN_PROCESS,       PickupStatus.PENDING_APPROVAL): {"roles": ["partner"]},
    (PickupStatus.PENDING_APPROVAL, PickupStatus.COMPLETED):        {"roles": ["customer"]},
}

IN_PROGRESS_STATES = {PickupStatus.ACCEPTED, PickupStatus.IN_PROCESS, PickupStatus.PENDING_APPROVAL}


def role_allowed(src: str, dst: str, role: str) -> bool:
    rule = TRANSITIONS.get((PickupStatus(src), PickupStatus(dst)))
    if not rule:
        return False
    return role in rule["roles"]
