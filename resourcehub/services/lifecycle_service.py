"""Moderation state machine for resources.

Edges and the parties allowed to take them are declared in ``TRANSITIONS``.
A request is checked in a fixed order: access to the resource, existence of
the edge, the actor's party on that edge, then the completeness guard for
anything entering ``pending``.
"""

import enum
import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.core.auth import Actor
from resourcehub.core.exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from resourcehub.models.resource import Resource, ResourceStatus
from resourcehub.services import notification_service, resource_service
from resourcehub.services.completeness import resource_missing_requirements

logger = logging.getLogger(__name__)


class Party(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"


def _build_transitions() -> dict[tuple[ResourceStatus, ResourceStatus], frozenset[Party]]:
    edges = {
        (ResourceStatus.PENDING, ResourceStatus.APPROVED): frozenset({Party.ADMIN}),
        (ResourceStatus.PENDING, ResourceStatus.REJECTED): frozenset({Party.ADMIN}),
        (ResourceStatus.APPROVED, ResourceStatus.SUSPENDED): frozenset({Party.ADMIN, Party.OWNER}),
    }
    for status in ResourceStatus:
        if status != ResourceStatus.PENDING:
            edges[(status, ResourceStatus.PENDING)] = frozenset({Party.OWNER})
        if status != ResourceStatus.DRAFT:
            edges[(status, ResourceStatus.DRAFT)] = frozenset({Party.OWNER})
    return edges


TRANSITIONS = _build_transitions()

_MODERATION_MESSAGES = {
    ResourceStatus.APPROVED: ("Resource approved", "Your resource '{title}' is now live on the marketplace."),
    ResourceStatus.REJECTED: ("Resource rejected", "Your resource '{title}' was rejected during review."),
    ResourceStatus.SUSPENDED: ("Resource suspended", "Your resource '{title}' has been suspended."),
}


def allowed_targets(current: ResourceStatus) -> dict[ResourceStatus, frozenset[Party]]:
    """Targets reachable from ``current`` and who may take each edge."""
    return {target: parties for (source, target), parties in TRANSITIONS.items() if source == current}


def _parties_of(actor: Actor, resource: Resource) -> set[Party]:
    parties = set()
    if resource.author_id == actor.id:
        parties.add(Party.OWNER)
    if actor.is_admin:
        parties.add(Party.ADMIN)
    return parties


async def transition(
    db: AsyncSession,
    actor: Actor,
    resource_id: str,
    target: ResourceStatus,
    reason: str | None = None,
) -> Resource:
    """Move a resource to ``target`` if the edge, the actor and the guard allow it."""
    resource = await resource_service.get_resource(db, resource_id)
    parties = _parties_of(actor, resource)
    if not parties:
        if not resource_service.is_visible(resource, actor):
            raise NotFoundError("Resource", resource_id)
        logger.warning("Actor %s denied status change on resource %s", actor.id, resource_id)
        raise AuthorizationError("Only the owner or an admin can change a resource's status")

    current = resource.status
    allowed = TRANSITIONS.get((current, target))
    if allowed is None:
        raise InvalidTransitionError("Resource", current.value, target.value)
    if not allowed & parties:
        who = " or ".join(sorted(party.value for party in allowed))
        logger.warning(
            "Actor %s denied %s -> %s on resource %s", actor.id, current.value, target.value, resource_id,
        )
        raise AuthorizationError(f"Only the {who} can move a resource from {current.value} to {target.value}")

    if target == ResourceStatus.PENDING:
        missing = resource_missing_requirements(resource)
        if missing:
            raise ValidationError(missing, message="Resource is not ready for review")

    resource.status = target
    if target == ResourceStatus.APPROVED:
        resource.approved_at = datetime.now(timezone.utc)
        resource.approved_by = actor.id

    if Party.OWNER not in parties and target in _MODERATION_MESSAGES:
        title, template = _MODERATION_MESSAGES[target]
        message = template.format(title=resource.title)
        if reason:
            message = f"{message} Reason: {reason}"
        notification_service.notify(
            db, resource.author_id, "resource_moderated", title, message, resource_id=resource.id,
        )

    await db.commit()
    await db.refresh(resource)
    logger.info(
        "Resource %s moved %s -> %s by %s", resource.id, current.value, target.value, actor.id,
    )
    return resource


async def submit_for_review(db: AsyncSession, actor: Actor, resource_id: str) -> Resource:
    return await transition(db, actor, resource_id, ResourceStatus.PENDING)


async def approve(db: AsyncSession, actor: Actor, resource_id: str) -> Resource:
    return await transition(db, actor, resource_id, ResourceStatus.APPROVED)


async def reject(db: AsyncSession, actor: Actor, resource_id: str, reason: str | None = None) -> Resource:
    return await transition(db, actor, resource_id, ResourceStatus.REJECTED, reason)


async def suspend(db: AsyncSession, actor: Actor, resource_id: str, reason: str | None = None) -> Resource:
    return await transition(db, actor, resource_id, ResourceStatus.SUSPENDED, reason)


async def withdraw_to_draft(db: AsyncSession, actor: Actor, resource_id: str) -> Resource:
    return await transition(db, actor, resource_id, ResourceStatus.DRAFT)
