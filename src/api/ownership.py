"""Single-owner write authorization shared by every owned entity."""
import logging
import uuid
from typing import Any, Type, TypeVar

from sqlmodel import Session, SQLModel

from api.errors import Forbidden, NotFound

logger = logging.getLogger("ownership")

ModelT = TypeVar("ModelT", bound=SQLModel)


def identity_of(value: Any) -> str:
    """Canonical string form of a user, a user id, or a UUID."""
    raw = str(getattr(value, "id", value))
    try:
        return str(uuid.UUID(raw))
    except ValueError:
        return raw


def assert_owner(entity: Any, actor: Any, message: str = "You are not authorized to modify this resource") -> None:
    owner = getattr(entity, "owner_id", None)
    if owner is None or actor is None or identity_of(owner) != identity_of(actor):
        logger.warning(f"User {identity_of(actor)} denied on {type(entity).__name__} {getattr(entity, 'id', None)}")
        raise Forbidden(message)


def get_or_404(db_session: Session, model: Type[ModelT], entity_id: str, noun: str) -> ModelT:
    entity = db_session.get(model, entity_id)
    if entity is None:
        logger.warning(f"{noun} not found: {entity_id}")
        raise NotFound(f"{noun} not found")
    return entity


def get_owned_or_404(db_session: Session, model: Type[ModelT], entity_id: str, actor: Any, noun: str, action: str) -> ModelT:
    """Load an entity and check the actor owns it; NotFound wins over Forbidden."""
    entity = get_or_404(db_session, model, entity_id, noun)
    assert_owner(entity, actor, f"You are not authorized to {action} this {noun.lower()}")
    return entity
