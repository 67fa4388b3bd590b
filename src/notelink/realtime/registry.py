"""Presence registry: which live connections belong to which user.

The registry is the only shared mutable state of the realtime layer. It maps
a user identity to the set of connection ids of that user's open sessions
(tabs, devices) and keeps a reverse index so a connection can be removed
knowing only its id.

Locking uses stripes: user ids hash onto one pool of ``threading.Lock``
objects and connection ids onto another, so unrelated users rarely contend.
Locks guard plain dict/set operations and are never held across an ``await``.

Lock order is always connection stripe first, then user stripe(s) in
ascending index. Readers only take a user stripe.
"""

import logging
import threading
from contextlib import ExitStack
from typing import Dict, FrozenSet, List, Optional, Set


logger = logging.getLogger(__name__)


class _UserStripe:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users: Dict[str, Set[str]] = {}


class _ConnectionStripe:
    __slots__ = ("lock", "owners")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.owners: Dict[str, str] = {}


class ConnectionRegistry:
    """Thread-safe ``user -> {connection ids}`` map with no empty entries."""

    def __init__(self, stripes: int = 32):
        if stripes < 1:
            raise ValueError("stripes must be >= 1")
        self._user_stripes: List[_UserStripe] = [_UserStripe() for _ in range(stripes)]
        self._conn_stripes: List[_ConnectionStripe] = [
            _ConnectionStripe() for _ in range(stripes)
        ]

    def _user_index(self, user: str) -> int:
        return hash(user) % len(self._user_stripes)

    def _conn_stripe(self, connection: str) -> _ConnectionStripe:
        return self._conn_stripes[hash(connection) % len(self._conn_stripes)]

    def register(self, user: str, connection: str) -> None:
        """File ``connection`` under ``user``.

        Idempotent. A connection already filed under another user is moved,
        so a connection id never appears under two users.
        """
        conn_stripe = self._conn_stripe(connection)
        with conn_stripe.lock:
            previous = conn_stripe.owners.get(connection)
            if previous == user:
                return

            indexes = {self._user_index(user)}
            if previous is not None:
                indexes.add(self._user_index(previous))

            with ExitStack() as stack:
                for idx in sorted(indexes):
                    stack.enter_context(self._user_stripes[idx].lock)
                if previous is not None:
                    self._discard(previous, connection)
                users = self._user_stripes[self._user_index(user)].users
                users.setdefault(user, set()).add(connection)
                conn_stripe.owners[connection] = user

        if previous is not None:
            logger.debug("Connection %s moved from user %s to %s", connection, previous, user)

    def deregister(self, connection: str) -> Optional[str]:
        """Remove ``connection`` wherever it is filed.

        Returns the user it belonged to, or None if it was not registered.
        """
        conn_stripe = self._conn_stripe(connection)
        with conn_stripe.lock:
            user = conn_stripe.owners.pop(connection, None)
            if user is None:
                return None
            with self._user_stripes[self._user_index(user)].lock:
                self._discard(user, connection)
        return user

    def _discard(self, user: str, connection: str) -> None:
        # caller holds the user's stripe lock
        users = self._user_stripes[self._user_index(user)].users
        connections = users.get(user)
        if connections is None:
            return
        connections.discard(connection)
        if not connections:
            del users[user]

    def connections_for(self, user: str) -> FrozenSet[str]:
        """Snapshot of the user's connection ids; empty when offline."""
        stripe = self._user_stripes[self._user_index(user)]
        with stripe.lock:
            return frozenset(stripe.users.get(user, ()))

    def is_online(self, user: str) -> bool:
        stripe = self._user_stripes[self._user_index(user)]
        with stripe.lock:
            return user in stripe.users

    def user_for(self, connection: str) -> Optional[str]:
        stripe = self._conn_stripe(connection)
        with stripe.lock:
            return stripe.owners.get(connection)

    def online_users(self) -> FrozenSet[str]:
        online: Set[str] = set()
        for stripe in self._user_stripes:
            with stripe.lock:
                online.update(stripe.users)
        return frozenset(online)

    def connection_count(self) -> int:
        total = 0
        for stripe in self._conn_stripes:
            with stripe.lock:
                total += len(stripe.owners)
        return total

    def clear(self) -> None:
        """Forget every registration (process shutdown)."""
        for conn_stripe in self._conn_stripes:
            with conn_stripe.lock:
                conn_stripe.owners.clear()
        for user_stripe in self._user_stripes:
            with user_stripe.lock:
                user_stripe.users.clear()

    def __len__(self) -> int:
        total = 0
        for stripe in self._user_stripes:
            with stripe.lock:
                total += len(stripe.users)
        return total
