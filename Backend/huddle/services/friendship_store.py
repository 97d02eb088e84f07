import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.errors import ConstraintViolation, Forbidden, NotFound, TransientIOError
from huddle.models.friendship import Friendship, FriendshipStatus, ordered_pair
from huddle.models.profile import Profile

logger = logging.getLogger(__name__)


@contextmanager
def _storage_errors(action: str):
    try:
        yield
    except (OperationalError, InterfaceError) as e:
        logger.exception("Database unavailable while trying to %s", action)
        raise TransientIOError(f"Could not {action}, try again later") from e


async def list_profiles(db: AsyncSession, excluding: uuid.UUID) -> list[Profile]:
    """Every profile except the viewer's own, by username."""
    with _storage_errors("list profiles"):
        result = await db.execute(
            select(Profile).where(Profile.id != excluding).order_by(Profile.username)
        )
        return list(result.scalars().all())


async def list_edges(db: AsyncSession, involving: uuid.UUID) -> list[Friendship]:
    """All edges where the profile is either endpoint, oldest first."""
    with _storage_errors("list friendships"):
        result = await db.execute(
            select(Friendship)
            .where(
                or_(
                    Friendship.user_id == involving,
                    Friendship.friend_id == involving,
                )
            )
            .order_by(Friendship.created_at, Friendship.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())


async def get_edge(db: AsyncSession, edge_id: uuid.UUID) -> Friendship | None:
    with _storage_errors("load friendship"):
        return await db.get(Friendship, edge_id, populate_existing=True)


async def find_pair(
    db: AsyncSession, a: uuid.UUID, b: uuid.UUID
) -> Friendship | None:
    """The edge for the unordered pair {a, b}, if any."""
    low, high = ordered_pair(a, b)
    with _storage_errors("load friendship"):
        result = await db.execute(
            select(Friendship).where(
                Friendship.pair_low == low,
                Friendship.pair_high == high,
            )
        )
        return result.scalar_one_or_none()


async def insert_edge(
    db: AsyncSession,
    user_id: uuid.UUID,
    friend_id: uuid.UUID,
    status: str = FriendshipStatus.PENDING,
) -> Friendship:
    """Create an edge from user_id to friend_id.

    The pair lookup gives a readable error for the common case; the unique
    constraint on (pair_low, pair_high) is what settles two requests racing
    each other, and its violation is reported the same way.
    """
    if user_id == friend_id:
        raise ConstraintViolation("Cannot befriend yourself")
    if status == FriendshipStatus.REJECTED:
        raise ValueError("Rejected friendships are deleted, not stored")

    existing = await find_pair(db, user_id, friend_id)
    if existing is not None:
        if existing.status != FriendshipStatus.REJECTED:
            raise ConstraintViolation("Friendship already exists or pending")
        # Left behind by another writer; it must not block a new request
        with _storage_errors("clear rejected friendship"):
            await db.execute(
                delete(Friendship)
                .where(Friendship.id == existing.id)
                .execution_options(synchronize_session=False)
            )
        db.expunge(existing)
        logger.info("Cleared rejected friendship %s before new request", existing.id)

    edge = Friendship.request(user_id, friend_id, status)
    db.add(edge)
    with _storage_errors("create friendship"):
        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            logger.info(
                "Duplicate friendship insert rejected by database: %s -> %s",
                user_id, friend_id,
            )
            raise ConstraintViolation("Friendship already exists or pending") from e
    return edge


async def update_edge_status(
    db: AsyncSession,
    edge_id: uuid.UUID,
    status: str,
    acting_user_id: uuid.UUID,
) -> Friendship:
    """Apply a status transition allowed by the access policy.

    The only stored transition is pending -> accepted, and only the recipient
    may make it. The UPDATE carries the whole policy in its WHERE clause, so
    a concurrent change shows up as zero affected rows and is explained by
    re-reading the edge.
    """
    if status != FriendshipStatus.ACCEPTED:
        raise ValueError(f"Unsupported friendship status transition to {status!r}")

    with _storage_errors("update friendship"):
        result = await db.execute(
            update(Friendship)
            .where(
                Friendship.id == edge_id,
                Friendship.friend_id == acting_user_id,
                Friendship.status == FriendshipStatus.PENDING,
            )
            .values(status=status, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )

    edge = await get_edge(db, edge_id)
    if result.rowcount == 0:
        if edge is None:
            raise NotFound("Friend request not found")
        if edge.friend_id != acting_user_id:
            raise Forbidden("Only the recipient can accept a friend request")
        raise ValueError("Friend request is no longer pending")
    return edge


async def delete_edge(
    db: AsyncSession, edge_id: uuid.UUID, acting_user_id: uuid.UUID
) -> None:
    """Delete an edge on behalf of one of its endpoints.

    Deleting an edge that is already gone succeeds.
    """
    edge = await get_edge(db, edge_id)
    if edge is None:
        logger.info("Friendship %s already gone, nothing to delete", edge_id)
        return
    if not edge.involves(acting_user_id):
        raise Forbidden("Not a party to this friendship")

    with _storage_errors("delete friendship"):
        result = await db.execute(
            delete(Friendship)
            .where(
                Friendship.id == edge_id,
                or_(
                    Friendship.user_id == acting_user_id,
                    Friendship.friend_id == acting_user_id,
                ),
            )
            .execution_options(synchronize_session=False)
        )
    db.expunge(edge)
    if result.rowcount == 0:
        logger.info("Friendship %s removed concurrently", edge_id)
