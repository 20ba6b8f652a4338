"""
Authorization policy for galleries, photos and comments.

Any session may read any gallery and post new content; only the owner of a
photo or the author of a comment may change or remove it. Denials on existing
entities are reported exactly like missing entities.
"""
from enum import Enum
from typing import Optional, Any
from fastapi import Request
import logging

from services.errors import NotFoundOrForbiddenError, UnauthorizedError
from services.security import SecurityUtils

logger = logging.getLogger(__name__)

class ActionType(Enum):
    READ_GALLERY = "read_gallery"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"

MUTATING_ACTIONS = {ActionType.EDIT, ActionType.DELETE}

def is_allowed(action: ActionType, identity: Optional[str], owner_id: Optional[str] = None) -> bool:
    """
    Evaluate the policy for one request.

    Args:
        action: What the caller wants to do
        identity: Session identity, or None when there is no session
        owner_id: Owner/author of the target entity for mutating actions
    """
    if identity is None:
        return False
    if action in MUTATING_ACTIONS:
        return owner_id is not None and owner_id == identity
    return True

class OwnershipChecker:
    """
    Reusable ownership check for one entity kind and action.

    ``enforce`` returns the entity when the session identity owns it and
    raises NotFoundOrForbiddenError otherwise, whether the entity is missing
    or owned by someone else.
    """

    def __init__(self, entity_name: str, action: ActionType, owner_attr: str = "user_id"):
        if action not in MUTATING_ACTIONS:
            raise ValueError(f"{action.value} is not an ownership-scoped action")
        self.entity_name = entity_name
        self.action = action
        self.owner_attr = owner_attr

    def enforce(self, request: Request, identity: Optional[str], entity: Optional[Any],
                entity_id: Optional[str] = None) -> Any:
        if identity is None:
            raise UnauthorizedError()

        owner_id = getattr(entity, self.owner_attr, None) if entity is not None else None
        if is_allowed(self.action, identity, owner_id):
            return entity

        # Logged with the real reason; the client only ever sees one outcome
        SecurityUtils.log_security_event(
            "ownership_check_failed",
            {
                "entity": self.entity_name.lower(),
                "entity_id": entity_id,
                "action": self.action.value,
                "reason": "missing" if entity is None else "not_owner",
                "path": request.url.path,
                "method": request.method
            },
            user_id=identity,
            client_ip=SecurityUtils.get_client_ip(request)
        )
        raise NotFoundOrForbiddenError(self.entity_name, self.action.value)

    def deny(self) -> NotFoundOrForbiddenError:
        """The error for a guarded write that lost a race with a concurrent delete."""
        return NotFoundOrForbiddenError(self.entity_name, self.action.value)

def content_author(identity: Optional[str]) -> str:
    """
    Identity to record as owner/author of new content.
    Always the session identity, never a client-supplied value.
    """
    if not is_allowed(ActionType.CREATE, identity):
        raise UnauthorizedError()
    return identity

photo_delete_checker = OwnershipChecker("Photo", ActionType.DELETE)
comment_edit_checker = OwnershipChecker("Comment", ActionType.EDIT)
comment_delete_checker = OwnershipChecker("Comment", ActionType.DELETE)
