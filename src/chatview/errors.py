"""Error taxonomy for chat turns.

Provider-level errors abort the current turn and are surfaced to the
presentation layer as a single error string. Tool errors are normally
encoded as a tool-result message and fed back to the provider instead.
"""


class ChatViewError(Exception):
    """Base class for all chatview errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ProviderInvalidResponse(ChatViewError):
    """The provider returned a response with no usable choice."""

    def __init__(self, detail: str | None = None) -> None:
        message = "Invalid response from API."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)


class MaxTokensExceeded(ChatViewError):
    """Generation stopped because the requested token limit was reached."""

    def __init__(self) -> None:
        super().__init__("The maximum number of tokens specified in the request was reached.")


class ContentFiltered(ChatViewError):
    """Generation stopped because of the provider's content filter."""

    def __init__(self) -> None:
        super().__init__("Content was omitted due to a flag from API content filters.")


class NoResponseContent(ChatViewError):
    """The provider's message carried neither text nor a tool call."""

    def __init__(self) -> None:
        super().__init__("No content was received in the message returned from the API.")


class ToolNotFound(ChatViewError):
    """The provider asked for a tool that is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"The API tried to call an unmatched function called {name}.")
        self.name = name


class ToolMissingRequiredParameters(ChatViewError):
    """A tool call did not supply every parameter the tool requires."""

    def __init__(self, name: str, missing: list[str]) -> None:
        super().__init__(
            f"Required parameters not supplied for {name}: {', '.join(missing)}"
        )
        self.name = name
        self.missing = missing


class ToolExecutionFailed(ChatViewError):
    """The tool itself raised while executing."""

    def __init__(self, description: str) -> None:
        super().__init__(description)
        self.description = description


class StreamFailed(ChatViewError):
    """The streamed response terminated with a transport failure."""

    def __init__(self, description: str) -> None:
        super().__init__(f"Stream failed: {description}")
        self.description = description


class Cancelled(ChatViewError):
    """The in-flight turn was cancelled by the caller."""

    def __init__(self) -> None:
        super().__init__("The request was cancelled.")


class InternalInvariantViolation(ChatViewError):
    """The conversation reached a state that should not be possible."""

    def __init__(self, description: str) -> None:
        super().__init__(f"Internal error: {description}")
        self.description = description


class ToolLoopExceeded(ChatViewError):
    """The provider kept requesting tools past the configured round limit."""

    def __init__(self, limit: int) -> None:
        super().__init__(
            f"The API requested more than {limit} consecutive tool calls."
        )
        self.limit = limit
