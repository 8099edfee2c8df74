"""Serialized conversation mutations with coalesced notifications.

Every change to the conversation goes through `ConversationStore.apply`,
which swaps in a complete new message list in one step, so subscribers
never observe a half-applied change. Rapid streaming updates can be
coalesced: the state changes immediately but subscribers are notified at
most once per debounce window.
"""

import asyncio
from collections.abc import Callable

from ..errors import InternalInvariantViolation
from ..llm.models import Message
from .state import ChatEvent, MessagesChanged

Subscriber = Callable[[ChatEvent], None]
Mutation = Callable[[list[Message]], list[Message]]


class ConversationStore:
    """Owns the ordered message list and its subscribers."""

    def __init__(self, messages: list[Message] | None = None, debounce: float = 0.0):
        """Initialize the store.

        Args:
            messages: Seed messages, e.g. a system prompt
            debounce: Seconds over which coalesced updates are batched
        """
        initial = list(messages or [])
        _check_invariants(initial)
        self._messages = initial
        self._debounce = debounce
        self._subscribers: list[Subscriber] = []
        self._pending: asyncio.TimerHandle | None = None

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def has_pending_notification(self) -> bool:
        return self._pending is not None

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for conversation events.

        Returns:
            A function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def emit(self, event: ChatEvent) -> None:
        for callback in list(self._subscribers):
            callback(event)

    def apply(self, mutation: Mutation, coalesce: bool = False) -> None:
        """Apply a mutation atomically.

        Args:
            mutation: Receives a copy of the current list, returns the new list
            coalesce: Defer the notification to the end of the debounce window

        Raises:
            InternalInvariantViolation: The result would hold more than one
                receiving placeholder; the conversation is left unchanged
        """
        updated = mutation(list(self._messages))
        _check_invariants(updated)
        self._messages = updated

        if coalesce and self._debounce > 0:
            if self._pending is None:
                loop = asyncio.get_running_loop()
                self._pending = loop.call_later(self._debounce, self._notify)
            return

        self._cancel_pending()
        self._notify()

    def flush(self) -> None:
        """Deliver a deferred notification now, if one is pending."""
        if self._pending is not None:
            self._cancel_pending()
            self._notify()

    def append(self, *messages: Message) -> None:
        self.apply(lambda current: current + list(messages))

    def replace(self, message_id: str, *replacements: Message, coalesce: bool = False) -> None:
        """Replace the message with `message_id` by zero or more messages in place.

        Raises:
            InternalInvariantViolation: No message has that id
        """
        def mutation(current: list[Message]) -> list[Message]:
            index = _index_of(current, message_id)
            return current[:index] + list(replacements) + current[index + 1:]

        self.apply(mutation, coalesce=coalesce)

    def remove_where(self, predicate: Callable[[Message], bool]) -> None:
        self.apply(lambda current: [m for m in current if not predicate(m)])

    def replace_all(self, messages: list[Message]) -> None:
        self.apply(lambda current: list(messages))

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _notify(self) -> None:
        self._pending = None
        self.emit(MessagesChanged(messages=tuple(self._messages)))


def _index_of(messages: list[Message], message_id: str) -> int:
    for index, message in enumerate(messages):
        if message.id == message_id:
            return index
    raise InternalInvariantViolation(f"no message with id {message_id} in the conversation")


def _check_invariants(messages: list[Message]) -> None:
    receiving = sum(1 for m in messages if m.is_receiving)
    if receiving > 1:
        raise InternalInvariantViolation(
            f"{receiving} messages are receiving; at most one is allowed"
        )
