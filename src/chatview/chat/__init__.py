"""Chat turn orchestration."""

from .observer import ChatObserver, StructlogChatObserver, configure_logging
from .orchestrator import ChatOrchestrator
from .state import ChatEvent, ChatState, ErrorChanged, MessagesChanged, StateChanged
from .triggers import KeywordTrigger, ResponseTrigger
from .updates import ConversationStore

__all__ = [
    "ChatObserver",
    "StructlogChatObserver",
    "configure_logging",
    "ChatOrchestrator",
    "ChatEvent",
    "ChatState",
    "ErrorChanged",
    "MessagesChanged",
    "StateChanged",
    "KeywordTrigger",
    "ResponseTrigger",
    "ConversationStore",
]
