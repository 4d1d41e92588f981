"""User and permission deltas between two desired states."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Set

from topic_resource.domain.models.topic_info import Permission, TopicInfo, User


@dataclass
class UserDiff:
    """Changes needed to move the user bindings from *old* to *new*.

    ``added_users`` and ``deleted_users`` hold the ``User`` objects of the
    new and old ``TopicInfo`` respectively; they are not copies.
    """

    added_users: List[User] = field(default_factory=list)
    deleted_users: List[User] = field(default_factory=list)
    added_permissions: Dict[str, Set[Permission]] = field(default_factory=dict)
    deleted_permissions: Dict[str, Set[Permission]] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (
            self.added_users
            or self.deleted_users
            or self.added_permissions
            or self.deleted_permissions
        )


def diff_users(old: TopicInfo, new: TopicInfo) -> UserDiff:
    diff = UserDiff()
    old_index = {u.username: u for u in old.users}
    new_index = {u.username: u for u in new.users}

    for o in old.users:
        n = new_index.get(o.username)
        if n is None:
            diff.deleted_users.append(o)
            continue
        # A secret created for an ARN carries a policy that MSK also edits on
        # association, so an ARN change is applied as delete + create.
        if o.arn != n.arn:
            diff.added_users.append(n)
            diff.deleted_users.append(o)
            continue
        removed = set(o.permissions) - set(n.permissions)
        added = set(n.permissions) - set(o.permissions)
        if removed:
            diff.deleted_permissions[o.username] = removed
        if added:
            diff.added_permissions[o.username] = added

    for n in new.users:
        if n.username not in old_index:
            diff.added_users.append(n)

    return diff
