"""Command line entry point: adpath OU=a,OU=b,DC=example,DC=com"""

import argparse
import logging
import os
import sys
from typing import List, Optional, Tuple

from . import __version__
from .constants import ACTION_LABELS, ENV_PASSWORD, MESSAGES, ActionKind, ExitCode
from .exceptions import ConfigError, DirectoryError, FormatError, MaterializationError
from .services import (
    ADConfig,
    ConfigService,
    ConnectionManager,
    LDAPService,
    PathMaterializer,
    PathService,
)
from .services.config_service import find_config_file
from .services.materializer import ActionRecord
from .services.platform_service import PlatformService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="adpath",
        description="Create the missing organizational units of a distinguished name"
    )
    parser.add_argument("path", help="Distinguished name, e.g. OU=IT,OU=Departments,DC=example,DC=com")
    parser.add_argument("--config", help="Path to config.ini")
    parser.add_argument("--domain", help="Configured domain to use")
    parser.add_argument("--server", help="Directory server (overrides configuration)")
    parser.add_argument("--user", help="Username to bind with")
    parser.add_argument("--ssl", action="store_true", help="Connect with LDAPS")
    parser.add_argument("--dry-run", action="store_true",
                        help="Report what would be created without creating anything")
    parser.add_argument("-q", "--quiet", action="store_true",
                        help="Only print the final path, or the failure")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def format_action(action: ActionRecord) -> str:
    label = ACTION_LABELS[action.kind]
    if action.kind == ActionKind.CREATED and action.simulated:
        label = MESSAGES['WOULD_CREATE']
    line = f"[{label}] {action.dn}"
    if action.kind in (ActionKind.UNSUPPORTED_SKIP, ActionKind.FAILED):
        line += f" - {action.detail}"
    return line


def print_report(actions: List[ActionRecord]) -> None:
    for action in actions:
        print(format_action(action))


def _apply_overrides(ad_config: ADConfig, args: argparse.Namespace) -> ADConfig:
    if args.server:
        ad_config.server = args.server
    if args.ssl:
        ad_config.use_ssl = True
    return ad_config


def select_config(args: argparse.Namespace, root: str) -> Tuple[Optional[ConfigService], Optional[ADConfig]]:
    """Load configuration and pick the domain for root.

    Returns:
        (config_service, ad_config). config_service is None when running
        from command line options alone; ad_config is None when the domain
        is ambiguous and has to be chosen interactively.

    Raises:
        ConfigError: If configuration is missing or invalid
    """
    config_path = find_config_file(args.config)

    if config_path is None:
        if not (args.server or args.domain):
            raise ConfigError(MESSAGES['NO_CONFIG'])
        ad_config = ADConfig(
            domain=args.domain or PathService.domain_from_root(root),
            server=args.server or "",
            base_dn=root,
            use_ssl=args.ssl,
        )
        return None, ad_config

    config_service = ConfigService(str(config_path))
    is_valid, issues = config_service.validate_config()
    if not is_valid:
        raise ConfigError("Configuration errors:\n" + "\n".join(f"  - {issue}" for issue in issues))

    if args.domain:
        domain = args.domain
        if config_service.get_config(domain) is None:
            raise ConfigError(f"Domain {domain} is not configured")
    else:
        domain = config_service.find_domain_for_root(root)
        if domain is None and not config_service.has_multiple_domains():
            domain = config_service.get_default_domain()

    if domain is None:
        return config_service, None

    ad_config = config_service.get_config(domain)
    if not PathService.is_under(root, ad_config.base_dn):
        logger.warning(f"{root} is not under the base DN of {domain} ({ad_config.base_dn})")
    return config_service, _apply_overrides(ad_config, args)


def resolve_credentials(args: argparse.Namespace, config_service: Optional[ConfigService],
                        ad_config: Optional[ADConfig]) -> Optional[Tuple[ADConfig, str, str]]:
    """Work out who to bind as, asking interactively only for what is missing.

    Returns:
        (ad_config, username, password), or None if the login was cancelled
    """
    username = args.user or (ad_config.username if ad_config else "") or PlatformService.read_last_user()
    password = os.environ.get(ENV_PASSWORD)

    if ad_config is not None and username and password:
        return ad_config, username, password

    from .ui import prompt_credentials

    domains = config_service.get_available_domains() if config_service else [ad_config.domain]
    selected = ad_config.domain if ad_config else None
    result = prompt_credentials(domains, selected, username or "")
    if not result:
        return None

    domain, username, password = result
    if config_service is not None and (ad_config is None or domain != ad_config.domain):
        ad_config = _apply_overrides(config_service.get_config(domain), args)

    PlatformService.save_last_user(username)
    return ad_config, username, password


def run(argv: Optional[List[str]] = None) -> int:
    """Run the command line tool and return the exit code."""
    args = build_parser().parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        parsed = PathService.parse(args.path)
    except FormatError as e:
        print(f"Error: {e}", file=sys.stderr)
        return ExitCode.USAGE

    plan = PathService.plan(parsed)
    if not plan:
        print(parsed.root)
        return ExitCode.OK

    try:
        config_service, ad_config = select_config(args, parsed.root)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return ExitCode.USAGE

    credentials = resolve_credentials(args, config_service, ad_config)
    if credentials is None:
        print(MESSAGES['LOGIN_CANCELLED'], file=sys.stderr)
        return ExitCode.FAILURE
    ad_config, username, password = credentials

    try:
        with ConnectionManager(ad_config, username, password) as conn:
            materializer = PathMaterializer(LDAPService(conn), quiet=args.quiet, dry_run=args.dry_run)
            result = materializer.materialize(plan, parsed.root)
    except MaterializationError as e:
        if not args.quiet:
            print_report(e.actions)
        print(MESSAGES['SEGMENT_FAILED'].format(segment=e.segment.raw, prefix=e.prefix, error=e.error),
              file=sys.stderr)
        return ExitCode.FAILURE
    except DirectoryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return ExitCode.FAILURE

    if not args.quiet:
        print_report(result.actions)
    print(result.final_path)
    return ExitCode.OK


def main():
    """Main entry point for application."""
    sys.exit(run())


if __name__ == "__main__":
    main()
