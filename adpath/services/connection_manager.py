"""Connection Manager - Resolves a server and binds with retry logic."""

import logging
import time
from enum import Enum
from typing import List, Optional

from ldap3 import NONE, Connection, Server
from ldap3.core.exceptions import LDAPException

from ..constants import MESSAGES, ConnectionSettings, DirectoryErrorKind
from ..exceptions import DirectoryError
from .config_service import ADConfig
from .ldap_service import error_from_exception

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection state enumeration."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    FAILED = "failed"


def _port(use_ssl: bool) -> int:
    return ConnectionSettings.LDAPS_PORT if use_ssl else ConnectionSettings.LDAP_PORT


def resolve_server(domain_hint: str, configured: Optional[str] = None, use_ssl: bool = False,
                   connect_timeout: int = ConnectionSettings.CONNECT_TIMEOUT) -> str:
    """Pick a reachable directory server.

    The configured server is tried first. The DNS domain name comes next,
    since AD publishes its domain controllers under it.

    Args:
        domain_hint: DNS domain like "corp.example.com"
        configured: Server from configuration or the command line
        use_ssl: Probe the LDAPS port instead of LDAP
        connect_timeout: Seconds to wait for each probe

    Returns:
        Host name of the first server that answers

    Raises:
        DirectoryError: UNREACHABLE if no candidate answers
    """
    candidates: List[str] = []
    for host in (configured, domain_hint):
        if host and host not in candidates:
            candidates.append(host)

    for host in candidates:
        server = Server(host, port=_port(use_ssl), use_ssl=use_ssl,
                        get_info=NONE, connect_timeout=connect_timeout)
        logger.info(f"Probing {host}:{_port(use_ssl)}")
        if server.check_availability():
            return host
        logger.warning(f"Server {host} is not reachable")

    raise DirectoryError(DirectoryErrorKind.UNREACHABLE,
                         MESSAGES['NO_SERVER'].format(domain=domain_hint or configured or '?'))


class ConnectionManager:
    """Manages a single LDAP connection with retry on connect."""

    def __init__(self, ad_config: ADConfig, username: str, password: str,
                 max_retries: int = ConnectionSettings.MAX_RETRIES,
                 initial_retry_delay: float = ConnectionSettings.INITIAL_RETRY_DELAY,
                 max_retry_delay: float = ConnectionSettings.MAX_RETRY_DELAY):
        """Initialize connection manager.

        Args:
            ad_config: AD configuration object
            username: AD username
            password: AD password
            max_retries: Maximum number of reconnection attempts
            initial_retry_delay: Initial delay between retries (seconds)
            max_retry_delay: Maximum delay between retries (seconds)
        """
        self.ad_config = ad_config
        self.username = username
        self.password = password
        self.max_retries = max_retries
        self.initial_retry_delay = initial_retry_delay
        self.max_retry_delay = max_retry_delay

        self._connection: Optional[Connection] = None
        self._state = ConnectionState.DISCONNECTED
        self._last_error: Optional[str] = None
        self._retry_count = 0
        self.server_host: Optional[str] = None

    def _set_state(self, new_state: ConnectionState, error: Optional[str] = None):
        old_state = self._state
        self._state = new_state
        self._last_error = error
        logger.info(f"Connection state changed: {old_state.value} -> {new_state.value}" +
                    (f" (Error: {error})" if error else ""))

    def get_state(self) -> ConnectionState:
        return self._state

    def get_last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def bind_user(self) -> str:
        """UPN used to bind; usernames already carrying a domain are kept."""
        if '@' in self.username or '\\' in self.username:
            return self.username
        return f"{self.username}@{self.ad_config.dns_domain}"

    def _create_connection(self, host: str) -> Connection:
        """Create a new bound LDAP connection.

        Raises:
            LDAPException: If connection or bind fails
        """
        port = _port(self.ad_config.use_ssl)
        server = Server(host, port=port, use_ssl=self.ad_config.use_ssl, get_info=NONE,
                        connect_timeout=self.ad_config.connect_timeout)

        logger.info(f"Creating connection to {host}:{port} as {self.bind_user}")

        conn = Connection(server, user=self.bind_user, password=self.password,
                          auto_bind=True, receive_timeout=self.ad_config.receive_timeout)

        if not self.ad_config.use_ssl:
            logger.warning("Connected without SSL. Credentials are sent in clear text.")

        return conn

    def _is_authentication_error(self, error_message: str) -> bool:
        """Check if error is related to authentication."""
        if not error_message:
            return False

        error_lower = error_message.lower()
        auth_indicators = [
            'invalid credentials',
            'invalidcredentials',
            'automatic bind not successful - invalidcredentials',
            'authentication failed',
            'bind failed',
            'access denied',
            'unauthorized',
        ]

        for indicator in auth_indicators:
            if indicator in error_lower:
                return True

        # LDAP error code 49 (invalid credentials)
        return 'code 49' in error_lower

    def _retry_delay(self) -> float:
        return min(self.initial_retry_delay * (2 ** self._retry_count), self.max_retry_delay)

    def connect(self) -> Connection:
        """Resolve a server and bind, retrying with exponential backoff.

        Authentication errors are never retried.

        Returns:
            Bound LDAP connection

        Raises:
            DirectoryError: If no server is reachable, the bind is refused, or
                retries are exhausted
        """
        if self._connection is not None:
            return self._connection

        self.server_host = resolve_server(
            self.ad_config.dns_domain,
            configured=self.ad_config.server,
            use_ssl=self.ad_config.use_ssl,
            connect_timeout=self.ad_config.connect_timeout,
        )
        self._set_state(ConnectionState.CONNECTING)

        while True:
            try:
                self._connection = self._create_connection(self.server_host)
            except LDAPException as e:
                error_msg = f"Failed to connect: {e}"
                logger.error(error_msg)

                if self._is_authentication_error(error_msg):
                    self._set_state(ConnectionState.FAILED, error_msg)
                    raise DirectoryError(DirectoryErrorKind.PERMISSION_DENIED,
                                         MESSAGES['AUTH_FAILED'].format(error=e)) from e

                if self._retry_count >= self.max_retries:
                    self._set_state(ConnectionState.FAILED,
                                    f"Max retries ({self.max_retries}) exceeded")
                    raise error_from_exception(e, f"Connection to {self.server_host}") from e

                delay = self._retry_delay()
                self._retry_count += 1
                self._set_state(ConnectionState.RECONNECTING,
                                f"Reconnecting in {delay:.1f}s (attempt {self._retry_count}/{self.max_retries})")
                time.sleep(delay)
            else:
                self._set_state(ConnectionState.CONNECTED)
                self._retry_count = 0
                return self._connection

    def close(self):
        """Unbind and forget the connection."""
        if self._connection is not None:
            try:
                self._connection.unbind()
            except LDAPException as e:
                logger.warning(f"Error while unbinding: {e}")
            self._connection = None
            self._set_state(ConnectionState.DISCONNECTED)

    def __enter__(self) -> Connection:
        return self.connect()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
