"""
OAuth session management.

Owns the token lifecycle against a CHARMe node:

    LOGGED_OUT -> login() -> AUTHENTICATING -> (redirect) -> LOGGED_IN
    LOGGED_IN -> logout() -> LOGGED_OUT

LOGGED_IN is also entered straight away by check_cached_token() when a
valid token was cached, which covers the page reloaded after the
provider's redirect.
"""

import logging
import secrets
import time
import webbrowser
from typing import Callable, Optional
from urllib.parse import parse_qs, urlsplit

from .client import CharmeNodeClient
from .collaborators import TokenStore
from .errors import AuthenticationError, CharmeError
from .events import AnnotationEvent, EventEmitter, EventType
from .state import SessionState, Token, UserDetails

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Token and identity state of one user against one node.

    Emits LOGIN (with user details), LOGOUT and USER_INFO_FAILED through
    ``self.events``.
    """

    def __init__(
        self,
        client: CharmeNodeClient,
        token_store: TokenStore,
        client_id: str,
        redirect_uri: str,
        open_url: Optional[Callable[[str], object]] = None,
    ):
        """
        Initialize session manager.

        Args:
            client: Node client used for the user-info lookup
            token_store: Persisted token cache
            client_id: OAuth client registered on the node
            redirect_uri: Redirect URI registered for that client
            open_url: Called with the authorization URL on login
                (default: open it in a web browser)
        """
        self.client = client
        self.token_store = token_store
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.open_url = open_url or webbrowser.open

        self.state = SessionState.LOGGED_OUT
        self.token: Optional[str] = None
        self.user: Optional[UserDetails] = None
        self.events = EventEmitter()

        self._pending_state: Optional[str] = None

    @property
    def is_logged_in(self) -> bool:
        return self.state == SessionState.LOGGED_IN

    def require_token(self) -> str:
        """
        Current token for an authenticated request.

        Raises:
            AuthenticationError: If there is no token
        """
        if not self.token:
            raise AuthenticationError("Not logged in to the CHARMe node")
        return self.token

    def login(self) -> str:
        """
        Start the provider's authorization redirect.

        Does not reach LOGGED_IN by itself: the redirect comes back through
        handle_redirect() and check_cached_token().

        Returns:
            The authorization URL that was opened
        """
        self._pending_state = secrets.token_urlsafe(16)
        url = self.client.authorization_url(
            self.client_id, self.redirect_uri, self._pending_state
        )
        self.state = SessionState.AUTHENTICATING
        logger.debug("Opening authorization page %s", url)
        self.open_url(url)
        return url

    def handle_redirect(self, url: str, now: Optional[float] = None) -> Token:
        """
        Accept the provider's redirect and cache the token it carries.

        Parameters are read from the URL fragment (implicit grant), falling
        back to the query string.

        Raises:
            AuthenticationError: If the provider reported an error, the
                state does not match the pending login, or no token is present
        """
        parts = urlsplit(url)
        params = parse_qs(parts.fragment) or parse_qs(parts.query)

        def first(key):
            values = params.get(key)
            return values[0] if values else None

        if first("error"):
            self._fail_authentication()
            raise AuthenticationError(
                f"Authorization refused: {first('error_description') or first('error')}"
            )
        if self._pending_state is not None and first("state") != self._pending_state:
            self._fail_authentication()
            raise AuthenticationError("OAuth state mismatch")
        access_token = first("access_token")
        if not access_token:
            self._fail_authentication()
            raise AuthenticationError("No access token in redirect")

        expires_at = None
        if first("expires_in"):
            if now is None:
                now = time.time()
            expires_at = now + int(first("expires_in"))

        token = Token(access_token=access_token, expires_at=expires_at, scope=first("scope"))
        self.token_store.save(token)
        self._pending_state = None
        return token

    def _fail_authentication(self):
        self._pending_state = None
        if self.state == SessionState.AUTHENTICATING:
            self.state = SessionState.LOGGED_OUT

    async def check_cached_token(self, now: Optional[float] = None) -> bool:
        """
        Enter LOGGED_IN if a valid token is cached, then look the user up.

        LOGIN is emitted once the user details arrive. When the lookup fails
        the token is kept, the user stays unknown and USER_INFO_FAILED is
        emitted instead.

        Returns:
            True if a valid token was found
        """
        token = self.token_store.load()
        if token is None:
            return False
        if token.is_expired(now):
            logger.info("Cached token has expired, discarding it")
            self.token_store.wipe()
            return False

        self.token = token.access_token
        self.state = SessionState.LOGGED_IN
        logger.debug("Found cached token, logged in")

        try:
            user = await self.client.user_info(self.token)
        except CharmeError as e:
            logger.error("Could not fetch user details: %s", e)
            if self.token != token.access_token:
                return True
            self.events.emit(AnnotationEvent(EventType.USER_INFO_FAILED, {"error": e}))
            return True

        if self.token != token.access_token:
            # Logged out (or in again) while the lookup was in flight
            return True
        self.user = user
        self.events.emit(AnnotationEvent(EventType.LOGIN, {"user": user}))
        return True

    def logout(self):
        """Wipe the token and emit LOGOUT."""
        self.token_store.wipe()
        self.token = None
        self.user = None
        self._pending_state = None
        self.state = SessionState.LOGGED_OUT
        self.events.emit(AnnotationEvent(EventType.LOGOUT))
