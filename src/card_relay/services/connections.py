"""Registry of live notification streams, one per end user."""

import asyncio
import logging
import threading
from dataclasses import dataclass
from enum import StrEnum

from card_relay.domain.results import IssuerResult

logger = logging.getLogger(__name__)


class PushOutcome(StrEnum):
    """Result of a best-effort push."""

    DELIVERED = "delivered"
    NO_CONNECTION = "no_connection"
    DROPPED = "dropped"


class DeliveryStatus(StrEnum):
    """Why a waiting stream woke up."""

    RESULT = "result"
    CLOSED = "closed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class Delivery:
    """What a waiting stream received."""

    status: DeliveryStatus
    result: IssuerResult | None = None


class ConnectionHandle:
    """Single-slot, one-shot channel owned by one stream.

    Handles belong to the event loop serving the stream; producers push from
    request handlers running on the same loop.
    """

    def __init__(self, identity: str) -> None:
        self.identity = identity
        self._slot: asyncio.Queue[IssuerResult] = asyncio.Queue(maxsize=1)
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def offer(self, result: IssuerResult) -> PushOutcome:
        """Place a result in the slot without blocking."""
        if self.closed:
            return PushOutcome.NO_CONNECTION
        try:
            self._slot.put_nowait(result)
        except asyncio.QueueFull:
            return PushOutcome.DROPPED
        return PushOutcome.DELIVERED

    def close(self) -> None:
        """Close the channel; an undelivered result is discarded."""
        self._closed.set()

    def _consume(self, result: IssuerResult) -> Delivery:
        # one result per channel; later offers report NO_CONNECTION
        self.close()
        return Delivery(DeliveryStatus.RESULT, result)

    async def receive(self, timeout: float | None = None) -> Delivery:
        """Wait for a result, the channel closing, or ``timeout`` seconds."""
        if self.closed:
            return Delivery(DeliveryStatus.CLOSED)
        if not self._slot.empty():
            return self._consume(self._slot.get_nowait())
        get_task = asyncio.ensure_future(self._slot.get())
        closed_task = asyncio.ensure_future(self._closed.wait())
        try:
            done, _ = await asyncio.wait(
                {get_task, closed_task},
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in (get_task, closed_task):
                if not task.done():
                    task.cancel()
        if get_task in done:
            return self._consume(get_task.result())
        if closed_task in done:
            return Delivery(DeliveryStatus.CLOSED)
        return Delivery(DeliveryStatus.TIMED_OUT)


class LiveConnectionRegistry:
    """Maps end-user identity to at most one live channel.

    Opening a second channel for an identity closes the first ("latest
    connection wins"). All map access goes through one lock that is never
    held across an await or any I/O.
    """

    def __init__(self) -> None:
        self._connections: dict[str, ConnectionHandle] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def open(self, identity: str) -> ConnectionHandle:
        """Register a fresh channel, closing any prior one for the identity."""
        handle = ConnectionHandle(identity)
        with self._lock:
            prior = self._connections.get(identity)
            if prior is not None:
                prior.close()
            self._connections[identity] = handle
        if prior is not None:
            logger.info("Replaced live connection for user: %s", identity)
        else:
            logger.info("Connection added for user: %s", identity)
        return handle

    def push(
        self,
        identity: str,
        result: IssuerResult,
        handle: ConnectionHandle | None = None,
    ) -> PushOutcome:
        """Offer a result to the identity's channel without blocking.

        When ``handle`` is given the push only lands if that handle is still
        the identity's current channel.
        """
        with self._lock:
            current = self._connections.get(identity)
            if current is None or (handle is not None and handle is not current):
                outcome = PushOutcome.NO_CONNECTION
            else:
                outcome = current.offer(result)
                if outcome is PushOutcome.NO_CONNECTION:
                    del self._connections[identity]
        if outcome is PushOutcome.DELIVERED:
            logger.info("Notification sent to user: %s", identity)
        elif outcome is PushOutcome.DROPPED:
            logger.info("Notification dropped for user: %s (slot full)", identity)
        else:
            logger.info("No active connection found for user: %s", identity)
        return outcome

    def close(self, identity: str, handle: ConnectionHandle | None = None) -> bool:
        """Remove and close the identity's channel.

        With ``handle`` the entry is only removed while it is still that
        handle, so a replaced stream cannot evict its successor.
        """
        with self._lock:
            current = self._connections.get(identity)
            if current is None or (handle is not None and handle is not current):
                removed = None
            else:
                removed = self._connections.pop(identity)
                removed.close()
        if handle is not None and not handle.closed:
            handle.close()
        if removed is None:
            return False
        logger.info("Connection removed for user: %s", identity)
        return True

    def is_connected(self, identity: str) -> bool:
        """Return true when the identity has an open channel."""
        with self._lock:
            handle = self._connections.get(identity)
            return handle is not None and not handle.closed

    def shutdown(self) -> None:
        """Close every channel so waiting streams unblock."""
        with self._lock:
            handles = list(self._connections.values())
            self._connections.clear()
        for handle in handles:
            handle.close()
        if handles:
            logger.info("Closed %d live connections on shutdown", len(handles))
