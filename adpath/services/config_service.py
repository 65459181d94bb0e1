"""Configuration Service - Handles multi-AD configuration loading."""

import configparser
import os
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..constants import PATHS, ConnectionSettings
from ..exceptions import ConfigError
from .path_service import PathService
from .platform_service import PlatformService


class ADConfig:
    """Represents a single AD configuration."""

    def __init__(self, domain: str, server: str, base_dn: str, use_ssl: bool = False,
                 username: str = "",
                 connect_timeout: int = ConnectionSettings.CONNECT_TIMEOUT,
                 receive_timeout: int = ConnectionSettings.RECEIVE_TIMEOUT):
        self.domain = domain
        self.server = server
        self.base_dn = base_dn
        self.use_ssl = use_ssl
        self.username = username
        self.connect_timeout = connect_timeout
        self.receive_timeout = receive_timeout

    @property
    def dns_domain(self) -> str:
        """DNS name of the domain, derived from base_dn."""
        return PathService.domain_from_root(self.base_dn) or self.domain

    def __str__(self) -> str:
        return f"{self.domain} ({self.server or 'auto'})"


def find_config_file(explicit: Optional[str] = None) -> Optional[Path]:
    """Locate the configuration file.

    Args:
        explicit: Path given on the command line

    Returns:
        The first existing candidate: explicit path, ./config.ini, then the
        per-user config directory. None if nothing exists.

    Raises:
        ConfigError: If an explicit path was given but does not exist
    """
    if explicit:
        path = Path(explicit)
        if not path.exists():
            raise ConfigError(f"Configuration file '{explicit}' not found")
        return path

    candidates = [
        Path(PATHS['CONFIG_FILE']),
        PlatformService.get_config_dir() / PATHS['CONFIG_FILE'],
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


class ConfigService:
    """Service for loading and managing AD configurations."""

    def __init__(self, config_file: str = PATHS['CONFIG_FILE']):
        self.config_file = config_file
        self.config = configparser.ConfigParser()
        self.ad_configs: Dict[str, ADConfig] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file."""
        if not os.path.exists(self.config_file):
            raise ConfigError(f"Configuration file '{self.config_file}' not found")

        try:
            self.config.read(self.config_file)
        except configparser.Error as e:
            raise ConfigError(f"Cannot parse '{self.config_file}': {e}") from e

        # Try to load multi-AD configuration first
        if self._has_multi_ad_config():
            self._load_multi_ad_config()
        else:
            # Fall back to legacy single AD configuration
            self._load_legacy_config()

    def _has_multi_ad_config(self) -> bool:
        """Check if config file has multi-AD configuration."""
        return 'ad_domains' in self.config and 'domains' in self.config['ad_domains']

    def _build_config(self, domain: str, section: configparser.SectionProxy) -> ADConfig:
        try:
            return ADConfig(
                domain=domain,
                server=section.get('server', ''),
                base_dn=section.get('base_dn', ''),
                use_ssl=section.getboolean('use_ssl', fallback=False),
                username=section.get('username', ''),
                connect_timeout=section.getint('connect_timeout',
                                               fallback=ConnectionSettings.CONNECT_TIMEOUT),
                receive_timeout=section.getint('receive_timeout',
                                               fallback=ConnectionSettings.RECEIVE_TIMEOUT),
            )
        except ValueError as e:
            raise ConfigError(f"Domain {domain}: {e}") from e

    def _load_multi_ad_config(self) -> None:
        """Load multi-AD configuration."""
        domains_str = self.config['ad_domains']['domains']
        domains = [d.strip() for d in domains_str.split(',') if d.strip()]

        for domain in domains:
            section_name = f'ad_{domain}'
            if section_name in self.config:
                self.ad_configs[domain] = self._build_config(domain, self.config[section_name])

    def _load_legacy_config(self) -> None:
        """Load legacy single AD configuration."""
        if 'ldap' in self.config:
            ldap_config = self.config['ldap']
            domain = ldap_config.get('domain', 'DEFAULT')
            self.ad_configs[domain] = self._build_config(domain, ldap_config)

    def get_available_domains(self) -> List[str]:
        """Get list of available AD domains."""
        return list(self.ad_configs.keys())

    def get_config(self, domain: str) -> Optional[ADConfig]:
        """Get AD configuration for specified domain."""
        return self.ad_configs.get(domain)

    def has_multiple_domains(self) -> bool:
        """Check if multiple AD domains are configured."""
        return len(self.ad_configs) > 1

    def get_default_domain(self) -> Optional[str]:
        """Get the default domain (first in list)."""
        domains = self.get_available_domains()
        return domains[0] if domains else None

    def find_domain_for_root(self, root: str) -> Optional[str]:
        """Find the configured domain whose base_dn is closest above root.

        Args:
            root: Root portion of a parsed path, e.g. "DC=corp,DC=example,DC=com"

        Returns:
            Domain name, or None when no base_dn matches
        """
        matches = [
            domain for domain, config in self.ad_configs.items()
            if config.base_dn and PathService.is_under(root, config.base_dn)
        ]
        if not matches:
            return None
        # Nested domains: the deepest base_dn is the closest one
        return max(matches, key=lambda d: len(self.ad_configs[d].base_dn.split(",")))

    def validate_config(self) -> Tuple[bool, List[str]]:
        """Validate configuration and return any issues."""
        issues = []

        if not self.ad_configs:
            issues.append("No AD configurations found")
            return False, issues

        # Server may be empty: it is then resolved from the domain name
        for domain, config in self.ad_configs.items():
            if not config.base_dn:
                issues.append(f"Domain {domain}: Missing base_dn")
            if config.connect_timeout <= 0 or config.receive_timeout <= 0:
                issues.append(f"Domain {domain}: Timeouts must be positive")

        return len(issues) == 0, issues
