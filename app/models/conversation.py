"""
Registry of live realtime sessions.

The SessionRegistry tracks every RealtimeSession that currently has a browser
socket attached, keyed by session id, so the health endpoint can report them and
the socket manager can tear them down.
"""

from typing import TYPE_CHECKING, Dict, List, Optional

if TYPE_CHECKING:
    from app.session.realtime_session import RealtimeSession


class SessionRegistry:
    """
    Tracks active sessions for the lifetime of their sockets.
    """

    def __init__(self):
        self.active_sessions: Dict[str, "RealtimeSession"] = {}

    def __len__(self) -> int:
        return len(self.active_sessions)

    def add_session(self, session: "RealtimeSession"):
        """
        Register a session under its id.

        Args:
            session: The session to track
        """
        self.active_sessions[session.session_id] = session

    def get_session(self, session_id: str) -> Optional["RealtimeSession"]:
        return self.active_sessions.get(session_id)

    def remove_session(self, session_id: str):
        """Forget a session; unknown ids are ignored."""
        self.active_sessions.pop(session_id, None)

    def get_all_sessions(self) -> List["RealtimeSession"]:
        return list(self.active_sessions.values())

    def agents_in_use(self) -> Dict[str, int]:
        """Count of live sessions per active agent name."""
        counts: Dict[str, int] = {}
        for session in self.active_sessions.values():
            name = session.active_agent.name
            counts[name] = counts.get(name, 0) + 1
        return counts
