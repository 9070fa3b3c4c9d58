"""Host connectivity signal: current state plus online/offline transition events."""

from __future__ import annotations

import logging
from typing import Callable

from services.errors import NoConnectivity

logger = logging.getLogger(__name__)

ConnectivityListener = Callable[[str], None]


class ConnectivityMonitor:
    def __init__(self, *, online: bool = True) -> None:
        self._online = online
        self._listeners: list[ConnectivityListener] = []

    @property
    def is_online(self) -> bool:
        return self._online

    def set_online(self, online: bool) -> None:
        """Record a host transition; listeners only hear about actual changes."""
        if online == self._online:
            return
        self._online = online
        event = "online" if online else "offline"
        logger.info("[connectivity] Host reported %s", event)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:  # noqa: BLE001
                logger.warning("[connectivity] Listener %r failed on %s", listener, event, exc_info=True)

    def subscribe(self, listener: ConnectivityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def require_online(self, operation: str = "") -> None:
        if not self._online:
            logger.info("[connectivity] Refusing %s while offline", operation or "network call")
            raise NoConnectivity(operation)
