"""Queue of requests parked while a token refresh is in flight.

Requests that fail authorization while another caller is already
refreshing credentials are parked here. Once the refresh finishes the
queue is either drained, replaying every entry in arrival order, or
cancelled, rejecting every entry with the refresh failure.

Each entry is settled exactly once. An entry that has been removed
from the queue is never seen again.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Optional

import httpx

from ..exceptions import RequestCancelledError
from .transport import Transport

logger = logging.getLogger(__name__)

REPLAY_CANCELLED_REASON = "Replay cancelled"


class CancelHandle:
    """Cancellation handle for one queued request.

    While the request is being replayed the handle tracks the task
    sending it, so cancelling the handle aborts the transport call.
    A request whose handle is cancelled before replay is never sent.
    """

    def __init__(self):
        self.reason: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def cancelled(self) -> bool:
        return self.reason is not None

    def attach(self, task: asyncio.Task) -> None:
        self._task = task

    def cancel(self, reason: str) -> None:
        if self.cancelled:
            return
        self.reason = reason
        if self._task is not None and not self._task.done():
            self._task.cancel()


@dataclass
class QueuedRequest:
    """A parked request together with the future its caller awaits."""

    request: httpx.Request
    future: asyncio.Future
    handle: CancelHandle = field(default_factory=CancelHandle)


class RequestQueue:
    """FIFO queue of requests waiting for a token refresh.

    :param transport: Transport used to replay queued requests
    :type transport: Transport
    """

    def __init__(self, transport: Transport):
        self._transport = transport
        self._queue: Deque[QueuedRequest] = deque()
        self._active: Optional[QueuedRequest] = None

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def pending(self) -> int:
        """Number of requests waiting, excluding one being replayed."""
        return len(self._queue)

    def enqueue(self, request: httpx.Request) -> "asyncio.Future[httpx.Response]":
        """Append a request to the tail of the queue.

        :param request: Request to replay after the refresh
        :type request: httpx.Request
        :return: Future resolved with the replayed response, or rejected
            with the replay failure or a cancellation error
        :rtype: asyncio.Future
        """
        loop = asyncio.get_running_loop()
        entry = QueuedRequest(request=request, future=loop.create_future())
        self._queue.append(entry)
        logger.debug(
            f"Queued {request.method} {request.url.path} ({len(self._queue)} waiting)"
        )
        return entry.future

    async def drain_and_replay(self) -> None:
        """Replay every queued request, one at a time, in arrival order.

        Each entry's future receives the transport response or the
        exception the transport raised. Requests queued while draining
        are replayed too; the call returns once the queue is empty.
        If the draining task is cancelled, every entry not yet replayed
        is rejected with :class:`RequestCancelledError`.
        """
        if self._queue:
            logger.info(f"Replaying {len(self._queue)} queued request(s)")
        while self._queue:
            entry = self._queue.popleft()
            if entry.future.done():
                # Caller stopped waiting
                continue
            if entry.handle.cancelled:
                self._settle(entry, error=RequestCancelledError(entry.handle.reason))
                continue

            self._active = entry
            task = asyncio.ensure_future(self._transport.send(entry.request))
            entry.handle.attach(task)
            try:
                response = await task
            except asyncio.CancelledError:
                if not entry.handle.cancelled:
                    # The draining task itself was cancelled; nobody is
                    # left to replay the rest
                    self._settle(
                        entry, error=RequestCancelledError(REPLAY_CANCELLED_REASON)
                    )
                    self.cancel_all(REPLAY_CANCELLED_REASON)
                    raise
                self._settle(entry, error=RequestCancelledError(entry.handle.reason))
            except Exception as e:
                logger.debug(
                    f"Replay of {entry.request.method} {entry.request.url.path} failed: {e}"
                )
                self._settle(entry, error=e)
            else:
                self._settle(entry, response=response)
            finally:
                self._active = None

    # The name used by callers that think of draining as "processing".
    process_queue = drain_and_replay

    def cancel_all(self, reason: str) -> int:
        """Reject every queued request with a cancellation error.

        A request currently being replayed is aborted as well.

        :param reason: Reason carried by each cancellation error
        :type reason: str
        :return: Number of queued entries that were cancelled
        :rtype: int
        """
        cancelled = 0
        if self._active is not None:
            self._active.handle.cancel(reason)
        while self._queue:
            entry = self._queue.popleft()
            entry.handle.cancel(reason)
            self._settle(entry, error=RequestCancelledError(reason))
            cancelled += 1
        if cancelled:
            logger.warning(f"Cancelled {cancelled} queued request(s): {reason}")
        return cancelled

    @staticmethod
    def _settle(
        entry: QueuedRequest,
        response: Optional[httpx.Response] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        if entry.future.done():
            return
        if error is not None:
            entry.future.set_exception(error)
        else:
            entry.future.set_result(response)
