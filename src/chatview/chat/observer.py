"""Observer port for chat turn events, and its structlog implementation."""

from typing import Protocol

import structlog


class ChatObserver(Protocol):
    """Receives domain events from a chat orchestrator."""

    def turn_started(self, mode: str, message_count: int) -> None: ...

    def provider_called(self, mode: str, message_count: int, round_idx: int) -> None: ...

    def tool_executed(self, tool_name: str, call_id: str) -> None: ...

    def turn_completed(self, message_count: int, tool_rounds: int, duration_ms: int) -> None: ...

    def turn_failed(self, reason: str) -> None: ...

    def turn_cancelled(self) -> None: ...


class StructlogChatObserver:
    """Delegates chat domain events to structlog.

    Satisfies the ChatObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def turn_started(self, mode: str, message_count: int) -> None:
        self._log.info("chat.turn_started", mode=mode, message_count=message_count)

    def provider_called(self, mode: str, message_count: int, round_idx: int) -> None:
        self._log.debug(
            "chat.provider_called",
            mode=mode,
            message_count=message_count,
            round_idx=round_idx,
        )

    def tool_executed(self, tool_name: str, call_id: str) -> None:
        self._log.info("chat.tool_executed", tool_name=tool_name, call_id=call_id)

    def turn_completed(self, message_count: int, tool_rounds: int, duration_ms: int) -> None:
        self._log.info(
            "chat.turn_completed",
            message_count=message_count,
            tool_rounds=tool_rounds,
            duration_ms=duration_ms,
        )

    def turn_failed(self, reason: str) -> None:
        self._log.error("chat.turn_failed", reason=reason)

    def turn_cancelled(self) -> None:
        self._log.info("chat.turn_cancelled")


def configure_logging(log_format: str = "console", level: int = 20) -> None:
    """Configure structlog output.

    Args:
        log_format: 'console' for human-readable lines, 'json' for JSON lines
        level: Minimum level to emit (standard logging numbers)

    Raises:
        ValueError: Unknown log format
    """
    if log_format == "console":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
    elif log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        raise ValueError(f"Invalid log format: {log_format!r}. Must be 'console' or 'json'.")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )
