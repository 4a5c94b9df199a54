# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Resource subscription bookkeeping.

Subscriptions are a many-to-many relation between client ids and resource
URIs, stored as two mirrored indices so both "who watches this URI" and "what
does this client watch" are direct lookups.  A pair is in one index iff it is
in the other, and an entry whose set becomes empty is removed at once.

The indices use dicts as ordered sets so listings come back in subscription
order.  All operations are synchronous and never suspend.
"""

from __future__ import annotations

from collections.abc import Mapping


class SubscriptionManager:
    """Track which clients watch which resource URIs."""

    def __init__(self) -> None:
        self._by_uri: dict[str, dict[str, None]] = {}
        self._by_client: dict[str, dict[str, None]] = {}

    def subscribe(self, client_id: str, uri: str) -> bool:
        """Record ``client_id`` as a subscriber of ``uri``.

        Returns ``False`` when the subscription already existed.
        """
        subscribers = self._by_uri.setdefault(uri, {})
        if client_id in subscribers:
            return False
        subscribers[client_id] = None
        self._by_client.setdefault(client_id, {})[uri] = None
        return True

    def unsubscribe(self, client_id: str, uri: str) -> bool:
        """Drop one subscription.  Returns ``False`` when it did not exist."""
        subscribers = self._by_uri.get(uri)
        if subscribers is None or client_id not in subscribers:
            return False
        _discard(self._by_uri, uri, client_id)
        _discard(self._by_client, client_id, uri)
        return True

    def clear_client(self, client_id: str) -> list[str]:
        """Remove every subscription held by ``client_id``; returns the URIs it held."""
        uris = list(self._by_client.pop(client_id, {}))
        for uri in uris:
            _discard(self._by_uri, uri, client_id)
        return uris

    def get_subscribers(self, uri: str) -> list[str]:
        return list(self._by_uri.get(uri, ()))

    def get_client_subscriptions(self, client_id: str) -> list[str]:
        return list(self._by_client.get(client_id, ()))

    def is_subscribed(self, client_id: str, uri: str) -> bool:
        return client_id in self._by_uri.get(uri, ())

    def has_subscribers(self, uri: str) -> bool:
        return uri in self._by_uri

    def snapshot(self) -> tuple[dict[str, list[str]], dict[str, list[str]]]:
        """Return copies of both indices as ``(by_uri, by_client)``."""
        return _copy(self._by_uri), _copy(self._by_client)

    def all_subscriptions(self) -> list[tuple[str, str]]:
        """Return every ``(client_id, uri)`` pair in subscription order per client."""
        return [(client_id, uri) for client_id, uris in self._by_client.items() for uri in uris]

    def __len__(self) -> int:
        return sum(len(uris) for uris in self._by_client.values())


def _discard(index: dict[str, dict[str, None]], key: str, member: str) -> None:
    members = index.get(key)
    if members is None:
        return
    members.pop(member, None)
    if not members:
        del index[key]


def _copy(index: Mapping[str, Mapping[str, None]]) -> dict[str, list[str]]:
    return {key: list(members) for key, members in index.items()}


__all__ = ["SubscriptionManager"]
