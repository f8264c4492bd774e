"""
Streaming Reply Aggregator
==========================
Turns a lazy sequence of generated text fragments into growing snapshots of
a single reply, with exactly one terminal snapshot.
"""
from typing import Callable, Iterable, Iterator, Optional

from nyay_sahayak.models.messages import AggregatedReply, ReplySnapshot
from nyay_sahayak.utils.logging import get_logger, debug_print


DEFAULT_ERROR_MESSAGE = "Sorry, I encountered an error. Please try again."


class ReplyAggregator:
    """
    Accumulates fragments for one in-flight generation request.

    A new request always gets a new aggregator; failed streams are not retried.
    """

    def __init__(self, reply_id: str, error_message: str = DEFAULT_ERROR_MESSAGE):
        self.reply = AggregatedReply(id=reply_id)
        self.error_message = error_message
        self.logger = get_logger().chat_logger

    def _snapshot(self, is_loading: bool) -> ReplySnapshot:
        return ReplySnapshot(
            id=self.reply.id,
            text=self.reply.accumulated_text,
            is_loading=is_loading
        )

    def _user_safe_error(self, error: Exception) -> str:
        message = getattr(error, 'user_message', None)
        if isinstance(message, str) and message.strip():
            return message
        return self.error_message

    def stream(self, fragments: Iterable[str]) -> Iterator[ReplySnapshot]:
        """
        Consume fragments and yield reply snapshots.

        Every non-empty fragment yields a loading snapshot with the running
        text. The stream always ends with exactly one snapshot whose
        is_loading is False: the full text on success, or a user-safe error
        text if the fragments raised at any point. Closing this generator
        early closes the fragment source and emits nothing further.
        """
        iterator = None
        try:
            iterator = iter(fragments)
            for fragment in iterator:
                if not fragment:
                    continue
                self.reply.accumulated_text += fragment
                yield self._snapshot(is_loading=True)
        except GeneratorExit:
            self.reply.is_complete = True
            debug_print(f"[STREAM] Reply {self.reply.id} abandoned", 'DEBUG', 'STREAM')
            raise
        except Exception as e:
            self.logger.error(f"Generation failed for reply {self.reply.id}: {e}")
            self.reply.failed = True
            self.reply.is_complete = True
            yield ReplySnapshot(
                id=self.reply.id,
                text=self._user_safe_error(e),
                is_loading=False,
                is_error=True
            )
            return
        finally:
            _close_quietly(iterator)

        self.reply.is_complete = True
        debug_print(
            f"[STREAM] Reply {self.reply.id} complete ({len(self.reply.accumulated_text)} chars)",
            'DEBUG', 'STREAM'
        )
        yield self._snapshot(is_loading=False)


def _close_quietly(iterator):
    close = getattr(iterator, 'close', None)
    if close is None:
        return
    try:
        close()
    except Exception as e:
        get_logger().chat_logger.warning(f"Error closing fragment stream: {e}")


class GenerationHandle:
    """
    Handle on a started generation.

    Either iterate it (SSE endpoints) or call subscribe() with a callback.
    The on_close callback runs exactly once, when the snapshots are exhausted
    or the handle is closed early.
    """

    def __init__(
        self,
        reply_id: str,
        snapshots: Iterator[ReplySnapshot],
        on_close: Callable[[Optional[ReplySnapshot]], None] = None
    ):
        self.reply_id = reply_id
        self._snapshots = snapshots
        self._on_close = on_close
        self._started = False
        self._closed = False
        self.last_snapshot: Optional[ReplySnapshot] = None

    @property
    def is_closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[ReplySnapshot]:
        if self._started:
            raise RuntimeError(f"Generation {self.reply_id} is already being consumed")
        self._started = True
        try:
            for snapshot in self._snapshots:
                self.last_snapshot = snapshot
                yield snapshot
        finally:
            self.close()

    def subscribe(self, on_snapshot: Callable[[ReplySnapshot], None]) -> Optional[ReplySnapshot]:
        """Drive the stream, calling on_snapshot for each snapshot in order.

        Returns the terminal snapshot.
        """
        for snapshot in self:
            on_snapshot(snapshot)
        return self.last_snapshot

    def wait(self) -> Optional[ReplySnapshot]:
        """Drive the stream to the end and return the terminal snapshot."""
        return self.subscribe(lambda snapshot: None)

    def close(self):
        if self._closed:
            return
        self._closed = True
        _close_quietly(self._snapshots)
        if self._on_close is not None:
            self._on_close(self.last_snapshot)

    def __enter__(self) -> 'GenerationHandle':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
