"""Chat turn orchestrator.

Turns the conversation plus a new user message into provider calls,
merges streamed deltas into the placeholder slot, loops through tool-call
rounds until a final assistant message arrives, and exposes retry, reset
and cancel to a presentation layer.
"""

import asyncio
import time
from collections.abc import Callable, Iterable

import structlog

from ..config import ERROR_PREFIX, ChatConfig
from ..errors import (
    Cancelled,
    ChatViewError,
    StreamFailed,
    ToolLoopExceeded,
)
from ..llm.base import ChatProvider
from ..llm.models import (
    ErrorTurn,
    Message,
    MessageRole,
    StreamAccumulator,
    TextTurn,
    ToolCall,
    ToolCallTurn,
    TurnResult,
    interpret_response,
)
from ..tools.base import BaseTool
from ..tools.executor import ToolExecutor
from .observer import ChatObserver, StructlogChatObserver
from .state import ChatEvent, ChatState, ErrorChanged, StateChanged
from .triggers import ResponseTrigger
from .updates import ConversationStore

log = structlog.get_logger(__name__)


class ChatOrchestrator:
    """Owns one conversation and drives it against a chat provider.

    Hidden design decisions:
    - Placeholder lifecycle while a response is pending
    - Tool-call continuation loop and its bound
    - Streaming delta merging and notification coalescing
    - Cancellation and stale-turn handling

    Entry points are synchronous: they check and set the in-flight state
    before anything is awaited, then schedule the turn on the running event
    loop and return its task. Overlapping calls are rejected, returning None.

    Usage:
        chat = ChatOrchestrator(provider, messages=[Message.system("You are X")])
        chat.subscribe(print)
        task = chat.send("hi")
        result = await task  # TextTurn, ErrorTurn or ...
    """

    def __init__(
        self,
        provider: ChatProvider,
        messages: Iterable[Message] | None = None,
        tools: ToolExecutor | list[BaseTool] | None = None,
        config: ChatConfig | None = None,
        observer: ChatObserver | None = None,
        triggers: Iterable[ResponseTrigger] | None = None
    ):
        """Initialize the orchestrator.

        Args:
            provider: Chat provider answering the conversation
            messages: Seed messages, e.g. a system prompt
            tools: Tool executor, or tools to build one from
            config: Behaviour options (streaming, tool loop bound, ...)
            observer: Receiver of turn events (default: structlog)
            triggers: Response triggers checked against final assistant messages
        """
        self._config = config or ChatConfig()
        self._provider = provider
        if isinstance(tools, ToolExecutor):
            self._executor = tools
        else:
            self._executor = ToolExecutor(tools, hide_results=self._config.hide_tool_results)
        self._store = ConversationStore(messages, debounce=self._config.stream_debounce)
        self._observer: ChatObserver = observer or StructlogChatObserver()
        self._triggers = list(triggers or [])

        self._state = ChatState.IDLE
        self._error_message: str | None = None
        self._chat_started = False
        self._task: asyncio.Task[TurnResult] | None = None
        self._generation = 0

    # Presentation-facing state

    @property
    def messages(self) -> tuple[Message, ...]:
        """The full conversation, in display order."""
        return self._store.messages

    @property
    def visible_messages(self) -> tuple[Message, ...]:
        """The conversation without hidden messages."""
        return tuple(m for m in self._store.messages if not m.is_hidden)

    @property
    def error_message(self) -> str | None:
        return self._error_message

    @property
    def state(self) -> ChatState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._state.in_flight

    @property
    def chat_started(self) -> bool:
        return self._chat_started

    @property
    def config(self) -> ChatConfig:
        return self._config

    @property
    def tools(self) -> ToolExecutor:
        return self._executor

    def subscribe(self, callback: Callable[[ChatEvent], None]) -> Callable[[], None]:
        """Receive MessagesChanged, StateChanged and ErrorChanged events.

        Returns:
            A function that removes the subscription
        """
        return self._store.subscribe(callback)

    # Operations

    def start(self) -> "asyncio.Task[TurnResult] | None":
        """Issue the first provider call with the current conversation."""
        if self.is_busy:
            return None
        self._chat_started = True
        return self._begin_turn()

    def send(self, text: str) -> "asyncio.Task[TurnResult] | None":
        """Append a user message and run the call loop.

        Empty or whitespace-only text is ignored.
        """
        if not text or not text.strip():
            return None
        return self.add(Message.user(text))

    def add(self, message: Message) -> "asyncio.Task[TurnResult] | None":
        """Append a pre-built message and run the call loop."""
        if self.is_busy:
            return None
        self._chat_started = True
        self._store.append(message)
        return self._begin_turn()

    def retry(self) -> "asyncio.Task[TurnResult] | None":
        """Remove the most recent error message and run the call loop again.

        Does nothing when the last turn did not fail.
        """
        if self.is_busy:
            return None
        failed = next((m for m in reversed(self._store.messages) if m.is_error), None)
        if failed is None and self._state != ChatState.ERROR:
            return None
        if failed is not None:
            self._store.replace(failed.id)
        return self._begin_turn()

    def reset(self, messages: Iterable[Message] | None = None) -> bool:
        """Replace the conversation, or strip it down to its system messages.

        Does not start a new turn.

        Returns:
            False if a turn is in flight and nothing was changed
        """
        if self.is_busy:
            return False
        self._chat_started = False
        if messages is not None:
            self._store.replace_all(list(messages))
        else:
            self._store.remove_where(lambda m: m.role != MessageRole.SYSTEM)
        self._set_error(None)
        self._set_state(ChatState.IDLE)
        return True

    def cancel(self) -> bool:
        """Abort the in-flight turn and remove its placeholder.

        Returns:
            False if nothing was in flight
        """
        if not self.is_busy:
            return False

        task = self._task
        self._abort()
        if task is not None and not task.done():
            task.cancel()
        return True

    async def wait(self) -> TurnResult | None:
        """Wait for the current or most recent turn to finish."""
        task = self._task
        if task is None:
            return None
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if not task.cancelled():
                # The caller was cancelled; the turn itself keeps running
                raise
            return ErrorTurn(Cancelled())

    # Turn machinery

    def _begin_turn(self) -> "asyncio.Task[TurnResult]":
        loop = asyncio.get_running_loop()
        self._generation += 1
        generation = self._generation
        self._set_state(ChatState.STREAMING if self._config.stream else ChatState.SENDING)
        self._task = loop.create_task(self._run_turn(generation))
        return self._task

    async def _run_turn(self, generation: int) -> TurnResult:
        mode = "stream" if self._config.stream else "chat"
        started = time.monotonic()
        committed = self._store.messages
        self._observer.turn_started(mode, len(committed))

        try:
            if self._config.stream:
                final, rounds = await self._stream_loop(generation)
            else:
                final, rounds = await self._chat_loop(generation)
        except asyncio.CancelledError:
            if generation == self._generation:
                # Cancelled from outside, e.g. a timeout around the task
                self._abort()
                raise
            return ErrorTurn(Cancelled())
        except Exception as e:
            if generation != self._generation:
                return ErrorTurn(Cancelled())
            error = e if isinstance(e, ChatViewError) else None
            self._fail(e, committed)
            return ErrorTurn(error or ChatViewError(_describe(e)))

        self._set_error(None)
        self._set_state(ChatState.IDLE)
        self._observer.turn_completed(
            message_count=len(self._store.messages),
            tool_rounds=rounds,
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        self._fire_triggers(final)
        return TextTurn(final)

    async def _chat_loop(self, generation: int) -> tuple[Message, int]:
        """Call the provider until it returns a non-tool message."""
        placeholder = self._append_placeholder()
        rounds = 0

        while True:
            outbound = self._outbound()
            self._observer.provider_called("chat", len(outbound), rounds)
            response = await self._provider.perform_chat(outbound)
            self._guard(generation)

            if response.role == MessageRole.TOOL:
                # Already executed by the provider
                self._check_rounds(rounds)
                results = [response.copy_with(is_hidden=self._config.hide_tool_results)]
            else:
                turn = interpret_response(response)
                if isinstance(turn, ErrorTurn):
                    raise turn.error
                if isinstance(turn, TextTurn):
                    final = turn.message.copy_with(id=placeholder.id, is_receiving=False)
                    self._store.replace(placeholder.id, final)
                    return final, rounds
                self._check_rounds(rounds)
                results = self._lead_in(turn) + await self._execute_tools(generation, turn.calls)

            rounds += 1
            previous, placeholder = placeholder, Message.placeholder()
            self._store.replace(previous.id, *results, placeholder)
            self._set_state(ChatState.SENDING)

    async def _stream_loop(self, generation: int) -> tuple[Message, int]:
        """Stream responses until one completes without tool calls."""
        placeholder = self._append_placeholder()
        rounds = 0

        while True:
            self._set_state(ChatState.STREAMING)
            accumulator = StreamAccumulator(placeholder.id)
            outbound = self._outbound()
            self._observer.provider_called("stream", len(outbound), rounds)

            try:
                async for event in self._provider.perform_stream_chat(outbound):
                    self._guard(generation)
                    if accumulator.feed(event):
                        self._store.replace(placeholder.id, accumulator.message(), coalesce=True)
            except ChatViewError:
                raise
            except Exception as e:
                raise StreamFailed(_describe(e)) from e
            self._guard(generation)

            turn = accumulator.result()
            if isinstance(turn, ErrorTurn):
                raise turn.error
            if isinstance(turn, TextTurn):
                self._store.replace(placeholder.id, turn.message)
                return turn.message, rounds

            self._check_rounds(rounds)
            lead_in = []
            if turn.text:
                lead_in = [accumulator.message(is_receiving=False)]
            # Commit any streamed text and keep a fresh slot while tools run
            waiting = Message.placeholder()
            self._store.replace(placeholder.id, *lead_in, waiting)
            results = await self._execute_tools(generation, turn.calls)

            rounds += 1
            placeholder = Message.placeholder()
            self._store.replace(waiting.id, *results, placeholder)

    async def _execute_tools(self, generation: int, calls: list[ToolCall]) -> list[Message]:
        self._set_state(ChatState.AWAITING_TOOL_RESULT)
        results = []
        for call in calls:
            result = await self._executor.execute(call)
            results.append(result.copy_with(is_hidden=self._config.hide_tool_results))
            self._guard(generation)
            self._observer.tool_executed(call.name, call.id)
        return results

    def _lead_in(self, turn: ToolCallTurn) -> list[Message]:
        """Assistant text that accompanied a tool request, if any."""
        return [Message.assistant(turn.text)] if turn.text else []

    def _check_rounds(self, rounds: int) -> None:
        if rounds >= self._config.max_tool_iterations:
            raise ToolLoopExceeded(self._config.max_tool_iterations)

    def _append_placeholder(self) -> Message:
        placeholder = Message.placeholder()
        self._store.append(placeholder)
        return placeholder

    def _outbound(self) -> list[Message]:
        """Messages to send: no receiving placeholder and no display-only errors."""
        return [m for m in self._store.messages if not m.is_receiving and not m.is_error]

    def _abort(self) -> None:
        """Invalidate the running turn and drop its placeholder."""
        self._generation += 1
        self._store.flush()
        self._store.remove_where(lambda m: m.is_receiving)
        self._set_state(ChatState.IDLE)
        self._observer.turn_cancelled()

    def _guard(self, generation: int) -> None:
        if generation != self._generation:
            raise asyncio.CancelledError()

    def _fail(self, error: Exception, committed: tuple[Message, ...]) -> None:
        """Roll the conversation back to where the turn began and report the error.

        Tool results and lead-in text from the failed turn are discarded with
        the placeholder.
        """
        description = _describe(error)
        self._store.flush()

        restored = list(committed)
        if self._config.append_error_message:
            restored.append(Message.error(description))
        self._store.replace_all(restored)
        self._set_error(f"{ERROR_PREFIX}{description}")
        self._set_state(ChatState.ERROR)
        self._observer.turn_failed(description)

    def _fire_triggers(self, message: Message) -> None:
        for trigger in self._triggers:
            try:
                if trigger.should_activate(message.text):
                    trigger.activate()
            except Exception as e:
                log.error(
                    "chat.trigger_failed",
                    trigger=trigger.__class__.__name__,
                    error=str(e),
                )

    def _set_state(self, state: ChatState) -> None:
        if state == self._state:
            return
        previous, self._state = self._state, state
        self._store.emit(StateChanged(previous=previous, current=state))

    def _set_error(self, error_message: str | None) -> None:
        if error_message == self._error_message:
            return
        self._error_message = error_message
        self._store.emit(ErrorChanged(error_message=error_message))


def _describe(error: BaseException) -> str:
    return str(error) or error.__class__.__name__
