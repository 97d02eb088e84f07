"""Per-viewer classification of other profiles.

Friendships are stored directed (initiator -> recipient) but read as an
undirected relation, so every lookup here matches the pair in both orders.
Nothing in this module touches the database: callers fetch the viewer's
edges and the other profiles, and the views are derived from those alone.
"""
import enum
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field

from huddle.models.friendship import Friendship, FriendshipStatus
from huddle.models.profile import Profile


class Relation(str, enum.Enum):
    NONE = "none"
    INCOMING_PENDING = "incoming_pending"
    OUTGOING_PENDING = "outgoing_pending"
    ACCEPTED = "accepted"


@dataclass
class RelatedProfile:
    profile: Profile
    relation: Relation
    edge: Friendship | None = None


@dataclass
class FriendshipView:
    viewer_id: uuid.UUID
    incoming: list[RelatedProfile] = field(default_factory=list)
    outgoing: list[RelatedProfile] = field(default_factory=list)
    friends: list[RelatedProfile] = field(default_factory=list)
    suggestions: list[RelatedProfile] = field(default_factory=list)

    def relation_of(self, profile_id: uuid.UUID) -> Relation:
        for bucket in (self.incoming, self.outgoing, self.friends):
            for entry in bucket:
                if entry.profile.id == profile_id:
                    return entry.relation
        return Relation.NONE


def find_edge(
    edges: Iterable[Friendship], viewer_id: uuid.UUID, other_id: uuid.UUID
) -> Friendship | None:
    """Return the edge joining viewer and other, whichever side initiated it."""
    for edge in edges:
        if (edge.user_id == viewer_id and edge.friend_id == other_id) or (
            edge.friend_id == viewer_id and edge.user_id == other_id
        ):
            return edge
    return None


def relation_for_edge(edge: Friendship | None, viewer_id: uuid.UUID) -> Relation:
    if edge is None:
        return Relation.NONE
    if edge.status == FriendshipStatus.ACCEPTED:
        return Relation.ACCEPTED
    if edge.status == FriendshipStatus.PENDING:
        if edge.friend_id == viewer_id:
            return Relation.INCOMING_PENDING
        if edge.user_id == viewer_id:
            return Relation.OUTGOING_PENDING
    # A stray "rejected" row blocks nothing
    return Relation.NONE


def classify(
    profile_id: uuid.UUID, edges: Iterable[Friendship], viewer_id: uuid.UUID
) -> Relation:
    return relation_for_edge(find_edge(edges, viewer_id, profile_id), viewer_id)


def resolve(
    viewer_id: uuid.UUID,
    profiles: Iterable[Profile],
    edges: Iterable[Friendship],
) -> FriendshipView:
    """Sort every other profile into exactly one bucket, keeping input order."""
    edges = list(edges)
    view = FriendshipView(viewer_id=viewer_id)
    buckets = {
        Relation.INCOMING_PENDING: view.incoming,
        Relation.OUTGOING_PENDING: view.outgoing,
        Relation.ACCEPTED: view.friends,
        Relation.NONE: view.suggestions,
    }

    for profile in profiles:
        if profile.id == viewer_id:
            continue
        edge = find_edge(edges, viewer_id, profile.id)
        relation = relation_for_edge(edge, viewer_id)
        # Only live edges are handed back for the caller to act on
        buckets[relation].append(
            RelatedProfile(
                profile=profile,
                relation=relation,
                edge=edge if relation is not Relation.NONE else None,
            )
        )
    return view
