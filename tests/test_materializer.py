import logging

import pytest

from adpath.constants import ActionKind, DirectoryErrorKind
from adpath.exceptions import DirectoryError, MaterializationError, UnsupportedOperation
from adpath.services.materializer import PathMaterializer, materialize
from adpath.services.path_service import PathService

from .conftest import ROOT, FakeDirectoryClient

PATH = "OU=a,OU=b,DC=x,DC=y"


def run(path, client, **kwargs):
    parsed = PathService.parse(path)
    return PathMaterializer(client, **kwargs).materialize(PathService.plan(parsed), parsed.root)


def summary(result):
    return [(action.kind, action.segment.name) for action in result.actions]


def test_creates_missing_containers_root_first(directory):
    result = run(PATH, directory)

    assert summary(result) == [(ActionKind.CREATED, "b"), (ActionKind.CREATED, "a")]
    assert result.final_path == PATH
    assert directory.create_calls == [("b", ROOT), ("a", "OU=b,DC=x,DC=y")]


def test_second_run_only_reports_existing(directory):
    run(PATH, directory)
    directory.create_calls.clear()

    result = run(PATH, directory)

    assert summary(result) == [(ActionKind.EXISTS, "b"), (ActionKind.EXISTS, "a")]
    assert result.final_path == PATH
    assert directory.create_calls == []


def test_partial_existence_creates_only_missing():
    client = FakeDirectoryClient(existing=["OU=b,DC=x,DC=y"])

    result = run(PATH, client)

    assert summary(result) == [(ActionKind.EXISTS, "b"), (ActionKind.CREATED, "a")]
    assert client.create_calls == [("a", "OU=b,DC=x,DC=y")]
    assert client.exists_calls == ["OU=b,DC=x,DC=y", PATH]


def test_records_parent_for_each_action(directory):
    result = run(PATH, directory)

    assert [action.parent for action in result.actions] == [ROOT, "OU=b,DC=x,DC=y"]
    assert [action.dn for action in result.actions] == ["OU=b,DC=x,DC=y", PATH]


def test_missing_non_container_is_skipped():
    client = FakeDirectoryClient(existing=["OU=b,DC=x,DC=y"])

    result = run("CN=svc,OU=b,DC=x,DC=y", client)

    assert summary(result) == [(ActionKind.EXISTS, "b"), (ActionKind.UNSUPPORTED_SKIP, "svc")]
    assert result.final_path == "OU=b,DC=x,DC=y"
    assert isinstance(result.actions[-1].error, UnsupportedOperation)
    assert client.create_calls == []


def test_existing_non_container_advances_path():
    client = FakeDirectoryClient(existing=["CN=Users,DC=x,DC=y"])

    result = run("OU=svc,CN=Users,DC=x,DC=y", client)

    assert summary(result) == [(ActionKind.EXISTS, "Users"), (ActionKind.CREATED, "svc")]
    assert result.final_path == "OU=svc,CN=Users,DC=x,DC=y"
    assert client.create_calls == [("svc", "CN=Users,DC=x,DC=y")]


def test_descent_halts_below_skipped_non_container(directory):
    result = run("OU=a,CN=svc,OU=b,DC=x,DC=y", directory)

    assert summary(result) == [
        (ActionKind.CREATED, "b"),
        (ActionKind.UNSUPPORTED_SKIP, "svc"),
        (ActionKind.UNSUPPORTED_SKIP, "a"),
    ]
    assert result.final_path == "OU=b,DC=x,DC=y"
    assert "CN=svc,OU=b,DC=x,DC=y" in result.actions[-1].detail
    # Nothing beneath the missing node is queried or created
    assert directory.exists_calls == ["OU=b,DC=x,DC=y", "CN=svc,OU=b,DC=x,DC=y"]
    assert directory.create_calls == [("b", ROOT)]


def test_creation_failure_stops_immediately():
    client = FakeDirectoryClient(fail_create=["b"])

    with pytest.raises(MaterializationError) as excinfo:
        run(PATH, client)

    error = excinfo.value
    assert error.segment.name == "b"
    assert error.prefix == ROOT
    assert isinstance(error.__cause__, DirectoryError)
    assert error.error.kind == DirectoryErrorKind.PERMISSION_DENIED
    assert [(a.kind, a.segment.name) for a in error.actions] == [(ActionKind.FAILED, "b")]
    assert client.exists_calls == ["OU=b,DC=x,DC=y"]
    assert client.create_calls == [("b", ROOT)]


def test_creation_failure_deeper_reports_prefix():
    client = FakeDirectoryClient(fail_create=["a"])

    with pytest.raises(MaterializationError) as excinfo:
        run("OU=c,OU=a,OU=b,DC=x,DC=y", client)

    assert excinfo.value.prefix == "OU=b,DC=x,DC=y"
    assert [a.kind for a in excinfo.value.actions] == [ActionKind.CREATED, ActionKind.FAILED]
    # Work done before the failure stays in place
    assert client.exists("OU=b,DC=x,DC=y")


def test_existence_failure_is_fatal():
    client = FakeDirectoryClient(existing=["OU=b,DC=x,DC=y"], fail_exists=[PATH])

    with pytest.raises(MaterializationError) as excinfo:
        run(PATH, client)

    assert excinfo.value.prefix == "OU=b,DC=x,DC=y"
    assert excinfo.value.error.kind == DirectoryErrorKind.TIMEOUT
    assert excinfo.value.actions[-1].kind == ActionKind.FAILED
    assert client.create_calls == []


def test_root_only_path_is_a_no_op(directory):
    result = run("DC=x,DC=y", directory)

    assert result.final_path == "DC=x,DC=y"
    assert result.actions == []
    assert directory.exists_calls == []


def test_same_answers_give_same_actions():
    first = run(PATH, FakeDirectoryClient(existing=["OU=b,DC=x,DC=y"]))
    second = run(PATH, FakeDirectoryClient(existing=["OU=b,DC=x,DC=y"]))

    assert summary(first) == summary(second)
    assert first.final_path == second.final_path


def test_dry_run_classifies_like_real_run_without_creating():
    client = FakeDirectoryClient(existing=["OU=b,DC=x,DC=y"])

    result = run("OU=c,OU=a,OU=b,DC=x,DC=y", client, dry_run=True)

    assert summary(result) == [
        (ActionKind.EXISTS, "b"),
        (ActionKind.CREATED, "a"),
        (ActionKind.CREATED, "c"),
    ]
    assert [a.simulated for a in result.actions] == [False, True, True]
    assert result.final_path == "OU=c,OU=a,OU=b,DC=x,DC=y"
    assert client.create_calls == []
    # Below a simulated creation nothing can exist, so it is not queried
    assert client.exists_calls == ["OU=b,DC=x,DC=y", "OU=a,OU=b,DC=x,DC=y"]


def test_dry_run_matches_real_run_classification():
    dry = run("CN=svc,OU=a,DC=x,DC=y", FakeDirectoryClient(), dry_run=True)
    real = run("CN=svc,OU=a,DC=x,DC=y", FakeDirectoryClient())

    assert summary(dry) == summary(real)
    assert dry.final_path == real.final_path


def test_quiet_mode_logs_outcomes_at_debug(directory, caplog):
    with caplog.at_level(logging.INFO, logger="adpath.services.materializer"):
        run(PATH, directory, quiet=True)

    assert caplog.records == []


def test_quiet_mode_logs_unsupported_segment_at_debug(caplog):
    client = FakeDirectoryClient(existing=["OU=b,DC=x,DC=y"])

    with caplog.at_level(logging.INFO, logger="adpath.services.materializer"):
        result = run("CN=svc,OU=b,DC=x,DC=y", client, quiet=True)

    assert result.final_path == "OU=b,DC=x,DC=y"
    assert caplog.records == []

def test_outcomes_logged_at_info(directory, caplog):
    with caplog.at_level(logging.INFO, logger="adpath.services.materializer"):
        run(PATH, directory)

    assert len(caplog.records) == 2
    assert "[created] OU=b,DC=x,DC=y" in caplog.records[0].getMessage()


def test_failure_logged_even_when_quiet(caplog):
    client = FakeDirectoryClient(fail_create=["b"])

    with caplog.at_level(logging.INFO, logger="adpath.services.materializer"):
        with pytest.raises(MaterializationError):
            run(PATH, client, quiet=True)

    assert [r.levelno for r in caplog.records] == [logging.ERROR]


def test_materialize_function(directory):
    parsed = PathService.parse(PATH)

    result = materialize(PathService.plan(parsed), parsed.root, directory)

    assert result.count(ActionKind.CREATED) == 2
    assert result.count(ActionKind.EXISTS) == 0
