"""LDAP Service - Existence checks and container creation against Active Directory."""

import logging
import string
from typing import Dict

from ldap3 import BASE, Connection
from ldap3.core.exceptions import (
    LDAPBindError,
    LDAPCommunicationError,
    LDAPException,
    LDAPResponseTimeoutError,
)

from ..constants import CONTAINER_PREFIX, DirectoryErrorKind, LDAPResultCode, ObjectClass
from ..exceptions import DirectoryError

logger = logging.getLogger(__name__)

_RESULT_KINDS = {
    LDAPResultCode.TIME_LIMIT_EXCEEDED: DirectoryErrorKind.TIMEOUT,
    LDAPResultCode.TIMEOUT: DirectoryErrorKind.TIMEOUT,
    LDAPResultCode.INVALID_CREDENTIALS: DirectoryErrorKind.PERMISSION_DENIED,
    LDAPResultCode.INSUFFICIENT_ACCESS_RIGHTS: DirectoryErrorKind.PERMISSION_DENIED,
    LDAPResultCode.BUSY: DirectoryErrorKind.UNREACHABLE,
    LDAPResultCode.UNAVAILABLE: DirectoryErrorKind.UNREACHABLE,
    LDAPResultCode.SERVER_DOWN: DirectoryErrorKind.UNREACHABLE,
    LDAPResultCode.ENTRY_ALREADY_EXISTS: DirectoryErrorKind.ALREADY_EXISTS,
}


def error_from_result(result: Dict, action: str) -> DirectoryError:
    """Build a DirectoryError from an ldap3 result dictionary.

    Args:
        result: ``connection.result`` after a failed operation
        action: Short description of what was attempted
    """
    code = result.get('result')
    message = result.get('message') or result.get('description') or 'Unknown error'
    kind = _RESULT_KINDS.get(code, DirectoryErrorKind.OTHER)
    return DirectoryError(kind, f"{action} failed (result {code}): {message}")


def error_from_exception(error: LDAPException, action: str) -> DirectoryError:
    """Translate an ldap3 exception into a DirectoryError."""
    if isinstance(error, LDAPResponseTimeoutError):
        kind = DirectoryErrorKind.TIMEOUT
    elif isinstance(error, LDAPCommunicationError):
        kind = DirectoryErrorKind.UNREACHABLE
    elif isinstance(error, LDAPBindError):
        kind = DirectoryErrorKind.PERMISSION_DENIED
    else:
        kind = DirectoryErrorKind.OTHER
    return DirectoryError(kind, f"{action} failed: {error}")


def unescape_value(value: str) -> str:
    """Remove DN escaping from an attribute value.

    Handles both "\\," style escapes and "\\XX" hex pairs, which encode
    UTF-8 bytes.

    Examples:
        >>> unescape_value("Sales\\, EMEA")
        "Sales, EMEA"
        >>> unescape_value("Caf\\C3\\A9")
        "Café"
    """
    decoded = bytearray()
    i = 0
    while i < len(value):
        char = value[i]
        if char == "\\" and i + 1 < len(value):
            pair = value[i + 1:i + 3]
            if len(pair) == 2 and all(c in string.hexdigits for c in pair):
                decoded.append(int(pair, 16))
                i += 3
                continue
            char = value[i + 1]
            i += 1
        decoded.extend(char.encode("utf-8"))
        i += 1
    return decoded.decode("utf-8", errors="replace")



class LDAPService:
    """Directory client backed by an ldap3 connection."""

    def __init__(self, connection: Connection):
        """Initialize LDAP service.

        Args:
            connection: Bound LDAP connection
        """
        self.conn = connection

    def exists(self, dn: str) -> bool:
        """Check if an object exists.

        Args:
            dn: Distinguished Name to look up

        Returns:
            True if the object exists, False if the directory reports noSuchObject

        Raises:
            DirectoryError: If the lookup itself fails
        """
        try:
            found = self.conn.search(
                dn,
                '(objectClass=*)',
                search_scope=BASE,
                attributes=['objectClass']
            )
        except LDAPException as e:
            raise error_from_exception(e, f"Lookup of {dn}") from e

        if found:
            return len(self.conn.entries) > 0

        if self.conn.result.get('result') in (LDAPResultCode.SUCCESS, LDAPResultCode.NO_SUCH_OBJECT):
            return False

        raise error_from_result(self.conn.result, f"Lookup of {dn}")

    def create_container(self, name: str, parent_dn: str) -> None:
        """Create an Organizational Unit.

        The OU is created without protection from accidental deletion.

        Args:
            name: OU name, DN-escaped
            parent_dn: Parent DN where the OU will be created

        Raises:
            DirectoryError: If the directory rejects the creation
        """
        ou_dn = f"{CONTAINER_PREFIX}={name},{parent_dn}"
        attributes = {
            'objectClass': [ObjectClass.TOP, ObjectClass.OU],
            'ou': unescape_value(name)
        }

        try:
            result = self.conn.add(ou_dn, attributes=attributes)
        except LDAPException as e:
            raise error_from_exception(e, f"Creation of {ou_dn}") from e

        if not result:
            raise error_from_result(self.conn.result, f"Creation of {ou_dn}")

        logger.debug(f"Added {ou_dn}")
