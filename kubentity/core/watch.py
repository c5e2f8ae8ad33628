"""
Watch streams.

A watch request returns a chunked response where every line is a JSON envelope
`{"type": "ADDED", "object": {...}}`. The watchers in this module turn such a response
into a sequence of `WatchEvent`, consumed either by iterating the watcher or through
callbacks (`on_event`, `on_error`, `on_close`).

Exactly one of `on_close` or `on_error` is called as the last step of a stream.
"""
import asyncio
import json
import logging
import socket
import threading
from typing import AsyncIterator, Callable, Iterator, Optional

import httpx

from ..models import meta_v1
from ..types import WatchEvent, WatchEventType, WatchState, OnEventHandler, OnErrorHandler, OnCloseHandler
from .exceptions import DeserializationError, StreamError, TransportError, api_error

logger = logging.getLogger(__name__)



def shutdown_stream(resp: httpx.Response) -> bool:
    """Shut down the socket of a streamed response so that a read blocked on it returns.

    Returns `False` when the response is not backed by a socket (e.g. mocked transports).
    """
    stream = resp.extensions.get("network_stream")
    sock = stream.get_extra_info("socket") if stream is not None else None
    if sock is None:
        return False
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError as e:
        # already closed by the peer
        logger.debug("socket shutdown failed: %s", e)
    return True


class WatchDriver:
    def __init__(self, convert: Callable[[dict], object]):
        self._convert = convert

    def process_one_line(self, line) -> WatchEvent:
        try:
            envelope = json.loads(line)
            tp = WatchEventType(envelope["type"])
            obj = envelope["object"]
            if not isinstance(obj, dict):
                raise TypeError(f"object should be a mapping, got {type(obj).__name__}")
            if tp is WatchEventType.ERROR:
                obj = meta_v1.Status.from_dict(obj, lazy=False)
            else:
                obj = self._convert(obj)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise DeserializationError(f"Invalid watch event: {e}") from e
        return WatchEvent(tp, obj)


class BaseWatcher:
    def __init__(self, driver: WatchDriver, on_event: OnEventHandler = None,
                 on_error: OnErrorHandler = None, on_close: OnCloseHandler = None, name: str = "watch"):
        self.name = name
        self.state = WatchState.OPENING
        self._driver = driver
        self._on_event = on_event
        self._on_error = on_error
        self._on_close = on_close
        self._cancelled = False
        self._consumed = False
        self._response = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _claim(self):
        if self._consumed:
            raise RuntimeError(f"{self.name} can only be consumed once")
        self._consumed = True

    def _decode(self, line) -> Optional[WatchEvent]:
        try:
            return self._driver.process_one_line(line)
        except DeserializationError as e:
            if self._on_error is not None:
                self._on_error(e)
            else:
                logger.warning("%s: skipping event: %s", self.name, e)
            return None

    def _finish(self, state: WatchState, error: Exception = None):
        if self.state.terminal:
            return
        self.state = state
        logger.debug("%s: %s", self.name, state.value)
        if state is WatchState.ERRORED:
            if self._on_error is not None:
                self._on_error(error)
            else:
                logger.error("%s failed: %s", self.name, error)
        elif self._on_close is not None:
            self._on_close()

    def _stream_error(self, resp: httpx.Response) -> StreamError:
        err = api_error(resp.request, resp)
        stream_err = StreamError(f"Watch request failed with status {resp.status_code}: {err}")
        stream_err.__cause__ = err
        return stream_err


class Watcher(BaseWatcher):
    """Watch stream over a synchronous connection.

    Iterate the watcher to receive events (pull style), or use `start()` to dispatch them to `on_event`
    from a background thread. `cancel()` stops the stream from any thread.
    """

    def __init__(self, send: Callable[[], httpx.Response], driver: WatchDriver, **kwargs):
        super().__init__(driver, **kwargs)
        self._send = send
        self._lock = threading.Lock()
        self._thread = None

    def _events(self) -> Iterator[WatchEvent]:
        try:
            resp = self._send()
        except TransportError as e:
            raise StreamError(str(e)) from e
        with self._lock:
            self._response = resp
        try:
            if self._cancelled:
                return
            if resp.is_error:
                resp.read()
                raise self._stream_error(resp)
            self.state = WatchState.STREAMING
            for line in resp.iter_lines():
                if self._cancelled:
                    return
                if not line.strip():
                    continue
                event = self._decode(line)
                if event is not None:
                    yield event
                if self._cancelled:
                    return
        except (httpx.HTTPError, httpx.StreamError) as e:
            if self._cancelled:
                return
            raise StreamError(f"Watch connection failed: {e}") from e
        finally:
            resp.close()

    def __iter__(self) -> Iterator[WatchEvent]:
        self._claim()
        try:
            yield from self._events()
        except StreamError as e:
            self._finish(WatchState.ERRORED, e)
            raise
        except GeneratorExit:
            # the consumer stopped iterating
            self._cancelled = True
            self._finish(WatchState.CANCELLED)
            raise
        self._finish(WatchState.CANCELLED if self._cancelled else WatchState.CLOSED)

    def run(self):
        """Read the stream in the current thread dispatching each event to `on_event`"""
        try:
            for event in self:
                try:
                    self._on_event(event)
                except Exception as e:
                    self._finish(WatchState.ERRORED, e)
                    break
        except StreamError:
            pass    # already reported by _finish

    def start(self) -> "Watcher":
        """Run the watch in a background thread"""
        if self._thread is not None:
            raise RuntimeError(f"{self.name} already started")
        self._thread = threading.Thread(target=self.run, name=self.name, daemon=True)
        self._thread.start()
        return self

    def join(self, timeout: float = None) -> bool:
        """Wait for the background thread to end. Returns `True` if the stream is over."""
        if self._thread is not None:
            self._thread.join(timeout)
        return self.state.terminal

    def cancel(self):
        """Stop the stream. A read blocked in another thread is interrupted by shutting down the connection."""
        self._cancelled = True
        with self._lock:
            resp = self._response
        if resp is not None and not shutdown_stream(resp) and threading.current_thread() is not self._thread:
            resp.close()
        if self._thread is None and not self._consumed:
            self._finish(WatchState.CANCELLED)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cancel()
        self.join()


class AsyncWatcher(BaseWatcher):
    """Watch stream over an asynchronous connection.

    Iterate the watcher with `async for` (pull style), or use `start()` to dispatch events to `on_event`
    from a background task. `cancel()` cancels the task reading the stream.
    """

    def __init__(self, send: Callable, driver: WatchDriver, **kwargs):
        super().__init__(driver, **kwargs)
        self._send = send
        self._task: Optional[asyncio.Task] = None

    async def _events(self) -> AsyncIterator[WatchEvent]:
        try:
            resp = await self._send()
        except TransportError as e:
            raise StreamError(str(e)) from e
        self._response = resp
        try:
            if self._cancelled:
                return
            if resp.is_error:
                await resp.aread()
                raise self._stream_error(resp)
            self.state = WatchState.STREAMING
            async for line in resp.aiter_lines():
                if self._cancelled:
                    return
                if not line.strip():
                    continue
                event = self._decode(line)
                if event is not None:
                    yield event
                if self._cancelled:
                    return
        except (httpx.HTTPError, httpx.StreamError) as e:
            if self._cancelled:
                return
            raise StreamError(f"Watch connection failed: {e}") from e
        finally:
            await resp.aclose()

    async def __aiter__(self) -> AsyncIterator[WatchEvent]:
        self._claim()
        events = self._events()
        try:
            async for event in events:
                yield event
        except StreamError as e:
            self._finish(WatchState.ERRORED, e)
            raise
        except (asyncio.CancelledError, GeneratorExit):
            self._cancelled = True
            self._finish(WatchState.CANCELLED)
            raise
        finally:
            await events.aclose()
        self._finish(WatchState.CANCELLED if self._cancelled else WatchState.CLOSED)

    async def run(self):
        """Read the stream in the current task dispatching each event to `on_event`"""
        try:
            async for event in self:
                try:
                    self._on_event(event)
                except Exception as e:
                    self._finish(WatchState.ERRORED, e)
                    break
        except StreamError:
            pass    # already reported by _finish

    def start(self) -> "AsyncWatcher":
        """Run the watch in a background task"""
        if self._task is not None:
            raise RuntimeError(f"{self.name} already started")
        self._task = asyncio.get_running_loop().create_task(self.run(), name=self.name)
        return self

    async def wait(self):
        """Wait for the background task to end"""
        if self._task is not None:
            await asyncio.wait([self._task])

    def cancel(self):
        """Stop the stream. A read waiting for data is interrupted by shutting down the connection."""
        self._cancelled = True
        if self._response is not None:
            shutdown_stream(self._response)
        if self._task is not None:
            self._task.cancel()
        elif not self._consumed:
            self._finish(WatchState.CANCELLED)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.cancel()
        await self.wait()
