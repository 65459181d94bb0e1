"""Services module for adpath."""

from .path_service import PathService, PathSegment, ParsedPath
from .materializer import PathMaterializer, ActionRecord, MaterializeResult, materialize
from .ldap_service import LDAPService
from .connection_manager import ConnectionManager, ConnectionState, resolve_server
from .config_service import ConfigService, ADConfig

__all__ = [
    'PathService', 'PathSegment', 'ParsedPath',
    'PathMaterializer', 'ActionRecord', 'MaterializeResult', 'materialize',
    'LDAPService',
    'ConnectionManager', 'ConnectionState', 'resolve_server',
    'ConfigService', 'ADConfig',
]
