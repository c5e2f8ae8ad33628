import enum
import typing


class WatchEventType(enum.Enum):
    ADDED = 'ADDED'
    MODIFIED = 'MODIFIED'
    DELETED = 'DELETED'
    ERROR = 'ERROR'
    BOOKMARK = 'BOOKMARK'


class WatchState(enum.Enum):
    OPENING = 'Opening'
    STREAMING = 'Streaming'
    CLOSED = 'Closed'          # the server ended the stream
    ERRORED = 'Errored'
    CANCELLED = 'Cancelled'    # cancelled by the caller

    @property
    def terminal(self) -> bool:
        return self in (WatchState.CLOSED, WatchState.ERRORED, WatchState.CANCELLED)


class WatchEvent(typing.NamedTuple):
    type: WatchEventType
    object: typing.Any


OnEventHandler = typing.Callable[[WatchEvent], None]
OnErrorHandler = typing.Callable[[Exception], None]
OnCloseHandler = typing.Callable[[], None]
