"""Session context: the current identity and identity-change notifications."""
import json
import logging
import os
import uuid
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

Listener = Callable[[str, Optional["Identity"]], None]


@dataclass(frozen=True)
class Identity:
    """An authenticated user."""
    user_id: str
    email: str

    @classmethod
    def for_email(cls, email: str) -> "Identity":
        """Identity with a stable user id derived from the email address."""
        normalized = email.strip().lower()
        if not normalized:
            raise ValueError("Email must not be empty")
        return cls(user_id=str(uuid.uuid5(uuid.NAMESPACE_URL, f"mailto:{normalized}")), email=normalized)


class Subscription:
    """Handle returned by Session.subscribe."""

    def __init__(self, session: "Session", listener: Listener):
        self._session = session
        self._listener = listener

    def unsubscribe(self):
        self._session._remove_listener(self._listener)


class Session:
    """
    In-process session context.

    Holds the current identity and pushes (event, identity) to subscribers
    whenever it changes. Passed explicitly to the repository and the view
    controllers.
    """

    def __init__(self, identity: Optional[Identity] = None):
        self._identity = identity
        self._listeners: List[Listener] = []

    def current_identity(self) -> Optional[Identity]:
        return self._identity

    def subscribe(self, listener: Listener) -> Subscription:
        self._listeners.append(listener)
        return Subscription(self, listener)

    def _remove_listener(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def sign_in(self, identity: Identity):
        self._identity = identity
        logger.info(f"Signed in as {identity.email}")
        self._notify(SIGNED_IN, identity)

    def sign_out(self):
        self._identity = None
        logger.info("Signed out")
        self._notify(SIGNED_OUT, None)

    def _notify(self, event: str, identity: Optional[Identity]):
        # Copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            listener(event, identity)


class FileSession(Session):
    """Session whose identity survives between CLI invocations in a JSON file."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(self._load())

    def _load(self) -> Optional[Identity]:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            return Identity(user_id=data["user_id"], email=data["email"])
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return None

    def sign_in(self, identity: Identity):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"user_id": identity.user_id, "email": identity.email}, f, indent=2)
        super().sign_in(identity)

    def sign_out(self):
        if os.path.exists(self.path):
            os.remove(self.path)
        super().sign_out()
