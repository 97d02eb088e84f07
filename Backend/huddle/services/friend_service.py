import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from huddle.errors import Forbidden, NotFound
from huddle.models.friendship import FriendshipStatus
from huddle.models.profile import Profile
from huddle.services import friendship_store
from huddle.services.friendship_resolver import (
    FriendshipView,
    Relation,
    find_edge,
    relation_for_edge,
    resolve,
)

logger = logging.getLogger(__name__)


async def get_friendships(db: AsyncSession, viewer_id: uuid.UUID) -> FriendshipView:
    """Fetch every other profile and the viewer's edges, then classify."""
    profiles = await friendship_store.list_profiles(db, excluding=viewer_id)
    edges = await friendship_store.list_edges(db, involving=viewer_id)
    return resolve(viewer_id, profiles, edges)


async def get_relation(
    db: AsyncSession, viewer_id: uuid.UUID, other_id: uuid.UUID
) -> tuple[Relation, uuid.UUID | None]:
    """Relation of a single profile to the viewer, with the edge id to act on."""
    edges = await friendship_store.list_edges(db, involving=viewer_id)
    edge = find_edge(edges, viewer_id, other_id)
    relation = relation_for_edge(edge, viewer_id)
    return relation, edge.id if edge is not None and relation is not Relation.NONE else None


async def send_request(
    db: AsyncSession, viewer_id: uuid.UUID, target_id: uuid.UUID
) -> FriendshipView:
    """Send a friend request. Fails if any edge already joins the pair."""
    if target_id == viewer_id:
        raise ValueError("Cannot send a friend request to yourself")

    target = await db.get(Profile, target_id)
    if target is None:
        raise NotFound("User not found")

    edge = await friendship_store.insert_edge(db, viewer_id, target_id)
    logger.info("Friend request %s sent: %s -> %s", edge.id, viewer_id, target_id)
    return await get_friendships(db, viewer_id)


async def accept_request(
    db: AsyncSession, viewer_id: uuid.UUID, edge_id: uuid.UUID
) -> FriendshipView:
    """Accept a pending request. Only its recipient may do this."""
    await friendship_store.update_edge_status(
        db, edge_id, FriendshipStatus.ACCEPTED, acting_user_id=viewer_id
    )
    logger.info("Friend request %s accepted by %s", edge_id, viewer_id)
    return await get_friendships(db, viewer_id)


async def reject_request(
    db: AsyncSession, viewer_id: uuid.UUID, edge_id: uuid.UUID
) -> FriendshipView:
    """Turn down a pending request by deleting it.

    Nothing records the rejection, so the initiator may ask again later.
    A request that is already gone counts as rejected.
    """
    edge = await friendship_store.get_edge(db, edge_id)
    if edge is not None:
        if not edge.involves(viewer_id):
            raise Forbidden("Not a party to this friendship")
        if edge.status == FriendshipStatus.ACCEPTED:
            raise ValueError("Already friends; remove the friend instead")
        await friendship_store.delete_edge(db, edge_id, acting_user_id=viewer_id)
        logger.info("Friend request %s rejected by %s", edge_id, viewer_id)
    return await get_friendships(db, viewer_id)


async def cancel_request(
    db: AsyncSession, viewer_id: uuid.UUID, edge_id: uuid.UUID
) -> FriendshipView:
    """Withdraw a request the viewer sent."""
    edge = await friendship_store.get_edge(db, edge_id)
    if edge is not None:
        if edge.user_id != viewer_id:
            raise Forbidden("Only the sender can cancel a friend request")
        if edge.status != FriendshipStatus.PENDING:
            raise ValueError("Friend request is no longer pending")
        await friendship_store.delete_edge(db, edge_id, acting_user_id=viewer_id)
        logger.info("Friend request %s cancelled by %s", edge_id, viewer_id)
    return await get_friendships(db, viewer_id)


async def remove_friend(
    db: AsyncSession, viewer_id: uuid.UUID, edge_id: uuid.UUID, confirm: bool = False
) -> FriendshipView:
    """Unfriend. Irreversible, so the caller must pass confirm=True."""
    if not confirm:
        raise ValueError("Removing a friend must be confirmed")

    edge = await friendship_store.get_edge(db, edge_id)
    if edge is not None:
        if not edge.involves(viewer_id):
            raise Forbidden("Not a party to this friendship")
        if edge.status != FriendshipStatus.ACCEPTED:
            raise ValueError("Not friends yet; reject or cancel the request instead")
        await friendship_store.delete_edge(db, edge_id, acting_user_id=viewer_id)
        logger.info("Friendship %s removed by %s", edge_id, viewer_id)
    return await get_friendships(db, viewer_id)
