import textwrap

import pytest

from adpath.exceptions import ConfigError
from adpath.services.config_service import ConfigService, find_config_file
from adpath.services.platform_service import PlatformService

LEGACY = """
[ldap]
domain = EXAMPLE
server = dc01.example.com
base_dn = DC=example,DC=com
use_ssl = true
username = admin
"""

MULTI = """
[ad_domains]
domains = EXAMPLE, LAB

[ad_EXAMPLE]
server = dc01.example.com
base_dn = DC=example,DC=com

[ad_LAB]
server =
base_dn = DC=lab,DC=example,DC=com
receive_timeout = 5
"""


def write_config(tmp_path, content, name="config.ini"):
    path = tmp_path / name
    path.write_text(textwrap.dedent(content))
    return path


def test_legacy_config(tmp_path):
    service = ConfigService(str(write_config(tmp_path, LEGACY)))

    config = service.get_config("EXAMPLE")
    assert config.server == "dc01.example.com"
    assert config.base_dn == "DC=example,DC=com"
    assert config.use_ssl is True
    assert config.username == "admin"
    assert config.dns_domain == "example.com"
    assert not service.has_multiple_domains()
    assert service.validate_config() == (True, [])


def test_multi_domain_config(tmp_path):
    service = ConfigService(str(write_config(tmp_path, MULTI)))

    assert service.get_available_domains() == ["EXAMPLE", "LAB"]
    assert service.has_multiple_domains()
    assert service.get_default_domain() == "EXAMPLE"
    lab = service.get_config("LAB")
    assert lab.server == ""
    assert lab.receive_timeout == 5
    assert lab.use_ssl is False


def test_find_domain_for_root_picks_matching_base_dn(tmp_path):
    service = ConfigService(str(write_config(tmp_path, MULTI)))

    assert service.find_domain_for_root("DC=lab,DC=example,DC=com") == "LAB"
    assert service.find_domain_for_root("dc=example,dc=com") == "EXAMPLE"
    assert service.find_domain_for_root("DC=other,DC=org") is None


def test_find_domain_for_root_prefers_child_listed_after_parent(tmp_path):
    service = ConfigService(str(write_config(tmp_path, MULTI)))

    assert service.get_available_domains()[0] == "EXAMPLE"
    assert service.find_domain_for_root("DC=corp,DC=lab,DC=example,DC=com") == "LAB"
    assert service.find_domain_for_root("DC=corp,DC=example,DC=com") == "EXAMPLE"


def test_missing_file_raises(tmp_path):
    with pytest.raises(ConfigError):
        ConfigService(str(tmp_path / "nope.ini"))


def test_validate_reports_issues(tmp_path):
    service = ConfigService(str(write_config(tmp_path, """
        [ldap]
        server = dc01
        connect_timeout = 0
    """)))

    is_valid, issues = service.validate_config()
    assert not is_valid
    assert "Domain DEFAULT: Missing base_dn" in issues
    assert "Domain DEFAULT: Timeouts must be positive" in issues


def test_validate_empty_config(tmp_path):
    service = ConfigService(str(write_config(tmp_path, "[other]\nkey = value\n")))

    assert service.validate_config() == (False, ["No AD configurations found"])


def test_bad_integer_raises_config_error(tmp_path):
    with pytest.raises(ConfigError):
        ConfigService(str(write_config(tmp_path, LEGACY + "receive_timeout = soon\n")))


def test_find_config_file_explicit_missing(tmp_path):
    with pytest.raises(ConfigError):
        find_config_file(str(tmp_path / "missing.ini"))


def test_find_config_file_prefers_working_directory(tmp_path, monkeypatch):
    user_dir = tmp_path / "xdg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(user_dir))
    monkeypatch.setattr(PlatformService, "is_windows", staticmethod(lambda: False))
    (user_dir / "adpath").mkdir(parents=True)
    write_config(user_dir / "adpath", LEGACY)
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)

    assert find_config_file() == user_dir / "adpath" / "config.ini"

    write_config(work, LEGACY)
    assert find_config_file().resolve() == (work / "config.ini").resolve()


def test_find_config_file_none(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setattr(PlatformService, "is_windows", staticmethod(lambda: False))
    monkeypatch.chdir(tmp_path)

    assert find_config_file() is None


def test_last_user_round_trip(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.setattr(PlatformService, "is_windows", staticmethod(lambda: False))

    assert PlatformService.read_last_user() is None
    PlatformService.save_last_user("admin")
    assert PlatformService.read_last_user() == "admin"
