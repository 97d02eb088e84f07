import uuid

import pytest
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.errors import ConstraintViolation, Forbidden, NotFound, TransientIOError
from huddle.models.friendship import Friendship, FriendshipStatus
from huddle.services import friendship_store


@pytest.mark.asyncio
async def test_insert_edge(db_session: AsyncSession, alice, bob):
    edge = await friendship_store.insert_edge(db_session, alice.id, bob.id)

    assert edge.user_id == alice.id
    assert edge.friend_id == bob.id
    assert edge.status == FriendshipStatus.PENDING
    assert (edge.pair_low, edge.pair_high) == (min(alice.id, bob.id), max(alice.id, bob.id))


@pytest.mark.asyncio
async def test_insert_edge_duplicate_either_direction(db_session: AsyncSession, alice, bob):
    await friendship_store.insert_edge(db_session, alice.id, bob.id)

    with pytest.raises(ConstraintViolation):
        await friendship_store.insert_edge(db_session, alice.id, bob.id)
    with pytest.raises(ConstraintViolation):
        await friendship_store.insert_edge(db_session, bob.id, alice.id)


@pytest.mark.asyncio
async def test_insert_edge_database_enforces_pair(db_session: AsyncSession, alice, bob, monkeypatch):
    alice_id, bob_id = alice.id, bob.id
    await friendship_store.insert_edge(db_session, alice_id, bob_id)
    await db_session.commit()

    # Simulate the other side's request landing between our check and insert
    async def no_existing_pair(db, a, b):
        return None

    monkeypatch.setattr(friendship_store, "find_pair", no_existing_pair)

    with pytest.raises(ConstraintViolation):
        await friendship_store.insert_edge(db_session, bob_id, alice_id)

    edges = await friendship_store.list_edges(db_session, involving=alice_id)
    assert len(edges) == 1
    assert edges[0].user_id == alice_id


@pytest.mark.asyncio
async def test_unique_pair_constraint_on_raw_rows(db_session: AsyncSession, alice, bob):
    db_session.add(Friendship.request(alice.id, bob.id))
    db_session.add(Friendship.request(bob.id, alice.id))

    with pytest.raises(IntegrityError):
        await db_session.flush()
    await db_session.rollback()


@pytest.mark.asyncio
async def test_insert_edge_to_self(db_session: AsyncSession, alice):
    with pytest.raises(ConstraintViolation):
        await friendship_store.insert_edge(db_session, alice.id, alice.id)


@pytest.mark.asyncio
async def test_insert_edge_refuses_rejected_status(db_session: AsyncSession, alice, bob):
    with pytest.raises(ValueError):
        await friendship_store.insert_edge(
            db_session, alice.id, bob.id, status=FriendshipStatus.REJECTED
        )


@pytest.mark.asyncio
async def test_update_edge_status_by_recipient(db_session: AsyncSession, alice, bob):
    edge = await friendship_store.insert_edge(db_session, alice.id, bob.id)

    updated = await friendship_store.update_edge_status(
        db_session, edge.id, FriendshipStatus.ACCEPTED, acting_user_id=bob.id
    )

    assert updated.id == edge.id
    assert updated.status == FriendshipStatus.ACCEPTED
    assert updated.updated_at is not None


@pytest.mark.asyncio
async def test_update_edge_status_by_initiator_forbidden(db_session: AsyncSession, alice, bob):
    edge = await friendship_store.insert_edge(db_session, alice.id, bob.id)

    with pytest.raises(Forbidden):
        await friendship_store.update_edge_status(
            db_session, edge.id, FriendshipStatus.ACCEPTED, acting_user_id=alice.id
        )

    reloaded = await friendship_store.get_edge(db_session, edge.id)
    assert reloaded.status == FriendshipStatus.PENDING


@pytest.mark.asyncio
async def test_update_edge_status_by_stranger_forbidden(db_session: AsyncSession, alice, bob, carol):
    edge = await friendship_store.insert_edge(db_session, alice.id, bob.id)

    with pytest.raises(Forbidden):
        await friendship_store.update_edge_status(
            db_session, edge.id, FriendshipStatus.ACCEPTED, acting_user_id=carol.id
        )


@pytest.mark.asyncio
async def test_update_edge_status_missing_edge(db_session: AsyncSession, bob):
    with pytest.raises(NotFound):
        await friendship_store.update_edge_status(
            db_session, uuid.uuid4(), FriendshipStatus.ACCEPTED, acting_user_id=bob.id
        )


@pytest.mark.asyncio
async def test_update_edge_status_already_accepted(db_session: AsyncSession, alice, bob):
    edge = await friendship_store.insert_edge(db_session, alice.id, bob.id)
    await friendship_store.update_edge_status(
        db_session, edge.id, FriendshipStatus.ACCEPTED, acting_user_id=bob.id
    )

    with pytest.raises(ValueError):
        await friendship_store.update_edge_status(
            db_session, edge.id, FriendshipStatus.ACCEPTED, acting_user_id=bob.id
        )


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [FriendshipStatus.REJECTED, FriendshipStatus.PENDING])
async def test_update_edge_status_unsupported_transition(db_session: AsyncSession, alice, bob, status):
    edge = await friendship_store.insert_edge(db_session, alice.id, bob.id)

    with pytest.raises(ValueError):
        await friendship_store.update_edge_status(
            db_session, edge.id, status, acting_user_id=bob.id
        )


@pytest.mark.asyncio
async def test_delete_edge_is_idempotent(db_session: AsyncSession, alice, bob):
    edge = await friendship_store.insert_edge(db_session, alice.id, bob.id)
    edge_id = edge.id

    await friendship_store.delete_edge(db_session, edge_id, acting_user_id=bob.id)
    await friendship_store.delete_edge(db_session, edge_id, acting_user_id=bob.id)

    assert await friendship_store.get_edge(db_session, edge_id) is None
    assert await friendship_store.list_edges(db_session, involving=alice.id) == []


@pytest.mark.asyncio
async def test_delete_unknown_edge(db_session: AsyncSession, alice):
    await friendship_store.delete_edge(db_session, uuid.uuid4(), acting_user_id=alice.id)


@pytest.mark.asyncio
async def test_delete_edge_by_stranger_forbidden(db_session: AsyncSession, alice, bob, carol):
    edge = await friendship_store.insert_edge(db_session, alice.id, bob.id)

    with pytest.raises(Forbidden):
        await friendship_store.delete_edge(db_session, edge.id, acting_user_id=carol.id)

    assert await friendship_store.get_edge(db_session, edge.id) is not None


@pytest.mark.asyncio
async def test_list_edges_only_involving_profile(db_session: AsyncSession, alice, bob, carol):
    ab = await friendship_store.insert_edge(db_session, alice.id, bob.id)
    ca = await friendship_store.insert_edge(db_session, carol.id, alice.id)
    await friendship_store.insert_edge(db_session, bob.id, carol.id)

    edges = await friendship_store.list_edges(db_session, involving=alice.id)

    assert {e.id for e in edges} == {ab.id, ca.id}


@pytest.mark.asyncio
async def test_list_profiles_excludes_self(db_session: AsyncSession, alice, bob, carol):
    profiles = await friendship_store.list_profiles(db_session, excluding=bob.id)

    assert [p.username for p in profiles] == ["alice", "carol"]


@pytest.mark.asyncio
async def test_unreachable_database_is_transient(db_session: AsyncSession, alice, monkeypatch):
    alice_id = alice.id

    async def broken_execute(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(db_session, "execute", broken_execute)

    with pytest.raises(TransientIOError):
        await friendship_store.list_edges(db_session, involving=alice_id)


@pytest.mark.asyncio
async def test_insert_edge_replaces_stray_rejected_row(db_session: AsyncSession, alice, bob):
    stray = Friendship.request(bob.id, alice.id, FriendshipStatus.REJECTED)
    db_session.add(stray)
    await db_session.flush()
    stray_id = stray.id

    edge = await friendship_store.insert_edge(db_session, alice.id, bob.id)

    assert edge.id != stray_id
    assert await friendship_store.get_edge(db_session, stray_id) is None
    edges = await friendship_store.list_edges(db_session, involving=alice.id)
    assert [(e.user_id, e.status) for e in edges] == [(alice.id, FriendshipStatus.PENDING)]


@pytest.mark.asyncio
async def test_delete_edge_removed_concurrently(db_session: AsyncSession, alice, bob, monkeypatch):
    edge = await friendship_store.insert_edge(db_session, alice.id, bob.id)
    edge_id = edge.id

    # The other endpoint's delete lands after ours has loaded the edge
    real_get_edge = friendship_store.get_edge

    async def stale_get_edge(db, requested_id):
        found = await real_get_edge(db, requested_id)
        await db.execute(
            delete(Friendship)
            .where(Friendship.id == requested_id)
            .execution_options(synchronize_session=False)
        )
        return found

    monkeypatch.setattr(friendship_store, "get_edge", stale_get_edge)

    await friendship_store.delete_edge(db_session, edge_id, acting_user_id=alice.id)

    assert await real_get_edge(db_session, edge_id) is None
