# routine_bot/enums.py
from enum import Enum


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class FailureKind(str, Enum):
    TRANSPORT = "transport"    # network error, timeout, non-2xx status
    MALFORMED = "malformed"    # 2xx but no reply at choices[0].message.content
    BUSY = "busy"              # another completion is still in flight
    NO_SESSION = "no_session"  # no routine session yet, nothing to send


class SelectionAction(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    CLEARED = "cleared"
    RESTORED = "restored"
