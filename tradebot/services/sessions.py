import logging
from pathlib import Path
from typing import Dict, List, Optional
from pydantic import TypeAdapter, ValidationError
from tradebot.config.settings import SESSIONS_PATH
from tradebot.models.chat import ChatMessage, ChatSession

logger = logging.getLogger(__name__)

GREETING = (
    "Hello! I'm your AI trading agent. I can help you with market analysis, portfolio management, "
    "risk assessment, and executing trades. What would you like to know?"
)
TITLE_MAX_LENGTH = 50

_sessions_adapter = TypeAdapter(List[ChatSession])

def truncate_title(content: str, max_length: int = TITLE_MAX_LENGTH) -> str:
    if len(content) <= max_length:
        return content
    return content[:max_length] + "..."

class SessionStore:
    """Chat sessions persisted to a local JSON file, most recent first.

    The whole list is rewritten after every change. There is no locking, so two
    processes sharing a file will overwrite each other.
    """

    def __init__(self, path: str = SESSIONS_PATH):
        self.path = Path(path)
        self._sessions: Dict[str, ChatSession] = {}

    def __enter__(self) -> "SessionStore":
        self.load()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def load(self) -> List[ChatSession]:
        self._sessions = {}
        if not self.path.exists():
            return []
        try:
            sessions = _sessions_adapter.validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as e:
            logger.error(f"Error loading sessions from {self.path}: {e}")
            return []
        self._sessions = {s.id: s for s in sessions}
        logger.info(f"Loaded {len(sessions)} chat sessions")
        return self.list()

    def save(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(_sessions_adapter.dump_json(self.list(), indent=2))

    def close(self):
        self.save()
        self._sessions = {}

    def list(self) -> List[ChatSession]:
        return sorted(self._sessions.values(), key=lambda s: s.updated_at, reverse=True)

    def get(self, session_id: str) -> Optional[ChatSession]:
        return self._sessions.get(session_id)

    def create(self, greeting: Optional[str] = GREETING) -> ChatSession:
        session = ChatSession()
        if greeting:
            session.messages.append(ChatMessage(role="agent", content=greeting, timestamp=session.created_at))
        self._sessions[session.id] = session
        self.save()
        return session

    def append(self, session_id: str, role: str, content: str) -> ChatMessage:
        session = self._sessions.get(session_id)
        if session is None:
            raise KeyError(f"Unknown session: {session_id}")

        message = ChatMessage(role=role, content=content)
        is_first_user_message = role == "user" and not any(m.role == "user" for m in session.messages)
        session.messages.append(message)
        session.updated_at = message.timestamp
        if is_first_user_message and not session.custom_title:
            session.title = truncate_title(content)
        self.save()
        return message

    def rename(self, session_id: str, title: str) -> ChatSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise KeyError(f"Unknown session: {session_id}")
        session.title = title
        session.custom_title = True
        self.save()
        return session

    def delete(self, session_id: str) -> bool:
        if self._sessions.pop(session_id, None) is None:
            return False
        self.save()
        return True
