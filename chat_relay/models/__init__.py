from .message import ChatMessage
from .attachment import Attachment
from .envelope import RelayEvent

__all__ = ["Attachment", "ChatMessage", "RelayEvent"]
