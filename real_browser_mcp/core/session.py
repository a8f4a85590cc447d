"""Session transport binding HTTP exchanges to logical MCP sessions."""
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from real_browser_mcp.constants import MessageKind
from real_browser_mcp.core.dispatcher import RequestDispatcher
from real_browser_mcp.exceptions import MessageDecodeError, SessionNotFoundError, SessionRequiredError
from real_browser_mcp.utils import get_logger

logger = get_logger("real_browser_mcp.session")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Session:
    """A logical client connection spanning several HTTP exchanges."""
    session_id: str
    created_at: datetime = field(default_factory=_utcnow)
    last_seen_at: datetime = field(default_factory=_utcnow)
    exchange_count: int = 0


@dataclass
class ExchangeResult:
    """Outcome of one HTTP exchange.

    `payload` is None when the exchange carried only notifications.
    """
    session_id: str
    payload: Optional[Any]


class SessionTransport:
    """Resolves or creates sessions and forwards messages to the dispatcher.

    Sessions live until the client deletes them or the process exits.
    """

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        session_id_generator: Optional[Callable[[], str]] = None,
        on_session_initialized: Optional[Callable[[Session], None]] = None,
    ):
        self.dispatcher = dispatcher
        self._generate_id = session_id_generator or (lambda: str(uuid.uuid4()))
        self._on_session_initialized = on_session_initialized
        self._sessions: Dict[str, Session] = {}

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def initialize_session(self) -> str:
        """Create a session with a fresh random identifier."""
        session_id = self._generate_id()
        while session_id in self._sessions:
            session_id = self._generate_id()
        session = Session(session_id=session_id)
        self._sessions[session_id] = session
        logger.info(f"Session initialized: {session_id}", emoji_key="session")
        if self._on_session_initialized:
            self._on_session_initialized(session)
        return session_id

    def get_session(self, session_id: str) -> Session:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def terminate_session(self, session_id: str) -> None:
        """Forget a session. Other sessions are unaffected."""
        self.get_session(session_id)
        del self._sessions[session_id]
        logger.info(f"Session terminated: {session_id}", emoji_key="session")

    @staticmethod
    def decode(body: bytes) -> Any:
        """Decode an HTTP body into a protocol message or batch.

        Raises:
            MessageDecodeError: If the body is not a JSON object or a non-empty array
        """
        try:
            message = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MessageDecodeError(f"Parse error: {e}") from e
        if isinstance(message, list) and not message:
            raise MessageDecodeError("Parse error: empty batch")
        if not isinstance(message, (dict, list)):
            raise MessageDecodeError("Parse error: expected a JSON object or array")
        return message

    async def handle_exchange(self, message: Any, session_id: Optional[str] = None) -> ExchangeResult:
        """Bind a decoded message to a session and dispatch it.

        Args:
            message: A JSON-RPC message, or a list of them
            session_id: Value of the session header, if the client sent one

        Returns:
            The session the exchange belongs to and the dispatcher's answer

        Raises:
            SessionRequiredError: A non-initialize message arrived without a session id
            SessionNotFoundError: The session id was never issued or was terminated
        """
        messages: List[Any] = message if isinstance(message, list) else [message]
        session = self._resolve_session(messages, session_id)
        session.exchange_count += 1
        session.last_seen_at = _utcnow()

        responses = []
        for item in messages:
            response = await self.dispatcher.dispatch(item)
            if response is not None:
                responses.append(response)

        if not responses:
            payload = None
        elif isinstance(message, list):
            payload = responses
        else:
            payload = responses[0]
        return ExchangeResult(session_id=session.session_id, payload=payload)

    def _resolve_session(self, messages: List[Any], session_id: Optional[str]) -> Session:
        if session_id:
            return self.get_session(session_id)
        if any(isinstance(m, dict) and m.get("method") == MessageKind.INITIALIZE.value for m in messages):
            return self.get_session(self.initialize_session())
        raise SessionRequiredError()
