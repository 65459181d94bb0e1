import pytest

from adpath.constants import DirectoryErrorKind
from adpath.exceptions import DirectoryError

ROOT = "DC=x,DC=y"


def normalize(dn):
    return ",".join(part.strip().lower() for part in dn.split(","))


class FakeDirectoryClient:
    """In-memory directory whose state changes as containers are created."""

    def __init__(self, existing=(), fail_create=(), fail_exists=()):
        self.entries = {normalize(ROOT)} | {normalize(dn) for dn in existing}
        self.fail_create = set(fail_create)
        self.fail_exists = {normalize(dn) for dn in fail_exists}
        self.exists_calls = []
        self.create_calls = []

    def exists(self, dn):
        self.exists_calls.append(dn)
        if normalize(dn) in self.fail_exists:
            raise DirectoryError(DirectoryErrorKind.TIMEOUT, f"Lookup of {dn} timed out")
        return normalize(dn) in self.entries

    def create_container(self, name, parent_dn):
        self.create_calls.append((name, parent_dn))
        if name in self.fail_create:
            raise DirectoryError(DirectoryErrorKind.PERMISSION_DENIED, "insufficientAccessRights")
        dn = f"OU={name},{parent_dn}"
        if normalize(dn) in self.entries:
            raise DirectoryError(DirectoryErrorKind.ALREADY_EXISTS, "entryAlreadyExists")
        self.entries.add(normalize(dn))


@pytest.fixture
def directory():
    return FakeDirectoryClient()
