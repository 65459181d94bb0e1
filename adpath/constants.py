"""Constants and enumerations for adpath."""

from enum import Enum


class SegmentKind(str, Enum):
    """Kinds of hierarchy segments found in a DN."""
    CONTAINER = "container"
    NON_CONTAINER = "non_container"


class ActionKind(str, Enum):
    """Outcome recorded for each segment during materialization."""
    EXISTS = "exists"
    CREATED = "created"
    UNSUPPORTED_SKIP = "unsupported_skip"
    FAILED = "failed"


class DirectoryErrorKind(str, Enum):
    """Failure categories reported by the directory client."""
    UNREACHABLE = "unreachable"
    PERMISSION_DENIED = "permission_denied"
    TIMEOUT = "timeout"
    ALREADY_EXISTS = "already_exists"
    OTHER = "other"


# RDN type prefixes. Matching is case-sensitive.
CONTAINER_PREFIX = "OU"
NON_CONTAINER_PREFIX = "CN"
HIERARCHY_PREFIXES = (CONTAINER_PREFIX, NON_CONTAINER_PREFIX)
ROOT_PREFIX = "DC"


class ObjectClass:
    """objectClass values written when creating containers."""
    TOP = "top"
    OU = "organizationalUnit"


class LDAPResultCode:
    """LDAP result codes the directory client cares about."""
    SUCCESS = 0
    TIME_LIMIT_EXCEEDED = 3
    NO_SUCH_OBJECT = 32
    INVALID_CREDENTIALS = 49
    INSUFFICIENT_ACCESS_RIGHTS = 50
    BUSY = 51
    UNAVAILABLE = 52
    ENTRY_ALREADY_EXISTS = 68
    SERVER_DOWN = 81
    TIMEOUT = 85


class ConnectionSettings:
    """Connection defaults."""
    LDAP_PORT = 389
    LDAPS_PORT = 636
    CONNECT_TIMEOUT = 10
    RECEIVE_TIMEOUT = 30
    MAX_RETRIES = 3
    INITIAL_RETRY_DELAY = 1.0
    MAX_RETRY_DELAY = 10.0


class ExitCode:
    """Process exit codes for the CLI."""
    OK = 0
    FAILURE = 1
    USAGE = 2


# Report labels printed by the CLI, keyed by action kind
ACTION_LABELS = {
    ActionKind.EXISTS: 'exists',
    ActionKind.CREATED: 'created',
    ActionKind.UNSUPPORTED_SKIP: 'skipped',
    ActionKind.FAILED: 'failed',
}


# Default messages
MESSAGES = {
    'EXISTS': "Already exists",
    'CREATED': "Created container",
    'WOULD_CREATE': "would create",
    'UNSUPPORTED': "Creation of non-container objects is not supported",
    'PARENT_NOT_PLACED': "Parent {parent} was not placed",
    'EXISTS_FAILED': "Existence check failed: {error}",
    'CREATE_FAILED': "Failed to create container: {error}",
    'SEGMENT_FAILED': "Failed at {segment} under {prefix}: {error}",
    'NO_SERVER': "No reachable directory server for {domain}",
    'NO_CONFIG': "No configuration file found and no --server/--domain given",
    'LOGIN_CANCELLED': "Login cancelled",
    'AUTH_FAILED': "Authentication failed: {error}",
}


# Environment variables
ENV_PASSWORD = 'ADPATH_PASSWORD'


# File names
PATHS = {
    'CONFIG_FILE': 'config.ini',
    'LAST_USER_FILE': 'last_user.txt',
}
