"""
Declarative authorization rules.

Each model carries a list of grants. A grant either names the field that
holds the owner's identity id (owner rule) or a group whose members are
allowed (group rule), together with the operations it permits. Ownership is
whatever the named field says, not who created the row.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Optional
import logging

from .exceptions import AuthorizationError
from .security import Identity, UserGroup

logger = logging.getLogger(__name__)

class Operation(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"

ALL_OPERATIONS = frozenset(Operation)

@dataclass(frozen=True)
class Grant:
    operations: FrozenSet[Operation]
    owner_field: Optional[str] = None
    group: Optional[UserGroup] = None

    def applies_to(self, identity: Identity, record: Mapping[str, Any]) -> bool:
        if self.group is not None:
            return identity.in_group(self.group)
        if self.owner_field is not None:
            owner = record.get(self.owner_field)
            return owner is not None and owner == identity.id
        return False

def allow_owner(field: str, operations=ALL_OPERATIONS) -> Grant:
    return Grant(operations=frozenset(operations), owner_field=field)

def allow_group(group: UserGroup, operations=ALL_OPERATIONS) -> Grant:
    return Grant(operations=frozenset(operations), group=group)

POLICIES: Dict[str, List[Grant]] = {
    "UserProfile": [
        allow_owner("id"),
        allow_group(UserGroup.DOCTORS, [Operation.READ]),
    ],
    "Appointment": [
        allow_owner("patient_id", [Operation.CREATE, Operation.READ, Operation.UPDATE, Operation.DELETE]),
        allow_group(UserGroup.DOCTORS, [Operation.READ, Operation.UPDATE]),
    ],
    "MedicalRecord": [
        allow_group(UserGroup.DOCTORS, [Operation.CREATE, Operation.READ]),
        allow_owner("patient_id", [Operation.READ]),
    ],
}

def is_allowed(
    identity: Identity,
    model_name: str,
    operation: Operation,
    record: Mapping[str, Any]
) -> bool:
    """Return True if any grant on the model allows this operation on this record."""
    for grant in POLICIES.get(model_name, []):
        if operation in grant.operations and grant.applies_to(identity, record):
            return True
    return False

def authorize(
    identity: Identity,
    model_name: str,
    operation: Operation,
    record: Mapping[str, Any]
) -> None:
    """Raise AuthorizationError unless the caller holds a matching grant."""
    if not is_allowed(identity, model_name, operation, record):
        logger.warning(
            f"Denied {operation.value} on {model_name} for identity {identity.id}"
        )
        raise AuthorizationError(
            f"Not authorized to {operation.value} {model_name}"
        )
