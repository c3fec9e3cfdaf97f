import asyncio
import os

import pytest

from conftest import write_script
from dlwrap.backends import (
    LocalCopyBackend,
    ScriptBackend,
    get_backend,
    list_backends,
)
from dlwrap.config import FetchConfig
from dlwrap.exceptions import BackendError, UsageError

FAKE_BACKEND = """\
while getopts qo: opt; do
  case "$opt" in
    q) echo quiet > quiet.flag ;;
    o) out="$OPTARG" ;;
  esac
done
shift $((OPTIND - 1))
printf '%s\\n' "$@" > "$out"
pwd > cwd.txt
"""


@pytest.fixture
def workdir(tmp_path):
    path = tmp_path / "work"
    path.mkdir()
    return path


def test_list_backends():
    assert set(list_backends()) == {
        "bzr",
        "cp",
        "cvs",
        "file",
        "git",
        "hg",
        "scp",
        "sftp",
        "svn",
        "wget",
    }


def test_get_backend(tmp_path):
    config = FetchConfig(backend_dir=str(tmp_path))

    assert isinstance(get_backend("cp", config), LocalCopyBackend)
    git = get_backend("git", config)
    assert isinstance(git, ScriptBackend)
    assert git.program == os.path.join(str(tmp_path), "git")
    assert git.description


@pytest.mark.parametrize("name", ["", "rsync"])
def test_get_backend_rejects_unknown(name):
    with pytest.raises(UsageError):
        get_backend(name, FetchConfig())


def test_script_backend_command_line():
    backend = ScriptBackend("git", "/opt/dl")

    assert backend.build_command("/w/output", ["--depth", "1"], quiet=True) == [
        "/opt/dl/git",
        "-q",
        "-o",
        "/w/output",
        "--",
        "--depth",
        "1",
    ]


def test_script_backend_runs_in_workdir(tmp_path, workdir):
    write_script(tmp_path / "git", FAKE_BACKEND)
    backend = ScriptBackend("git", str(tmp_path))
    output = workdir / "output"

    asyncio.run(
        backend.fetch(str(output), ["-x", "a b", "https://example.org/r.git"], str(workdir), quiet=True)
    )

    assert output.read_text().split("\n")[:-1] == [
        "-x",
        "a b",
        "https://example.org/r.git",
    ]
    assert (workdir / "cwd.txt").read_text().strip() == os.path.realpath(workdir)
    assert (workdir / "quiet.flag").exists()


def test_script_backend_failure(tmp_path, workdir):
    write_script(tmp_path / "svn", "echo 'svn: E170013: unable to connect' >&2\nexit 1\n")
    backend = ScriptBackend("svn", str(tmp_path))

    with pytest.raises(BackendError) as excinfo:
        asyncio.run(backend.fetch(str(workdir / "output"), [], str(workdir)))

    assert excinfo.value.reported
    assert excinfo.value.context["returncode"] == 1


def test_script_backend_missing_program(tmp_path, workdir):
    backend = ScriptBackend("hg", str(tmp_path / "nowhere"))

    with pytest.raises(BackendError) as excinfo:
        asyncio.run(backend.fetch(str(workdir / "output"), [], str(workdir)))

    assert not excinfo.value.reported


def test_script_backend_success_without_output(tmp_path, workdir):
    write_script(tmp_path / "wget", "exit 0\n")
    backend = ScriptBackend("wget", str(tmp_path))

    with pytest.raises(BackendError):
        asyncio.run(backend.fetch(str(workdir / "output"), [], str(workdir)))


def test_local_copy_preserves_mode(source_file, workdir):
    source_file.chmod(0o755)
    output = workdir / "output"

    asyncio.run(LocalCopyBackend().fetch(str(output), [str(source_file)], str(workdir)))

    assert output.read_bytes() == source_file.read_bytes()
    assert os.access(output, os.X_OK)


@pytest.mark.parametrize("args", [[], ["a", "b"]])
def test_local_copy_argument_count(workdir, args):
    with pytest.raises(BackendError):
        asyncio.run(LocalCopyBackend().fetch(str(workdir / "output"), args, str(workdir)))


def test_local_copy_missing_source(tmp_path, workdir):
    with pytest.raises(BackendError):
        asyncio.run(
            LocalCopyBackend().fetch(
                str(workdir / "output"), [str(tmp_path / "missing")], str(workdir)
            )
        )
