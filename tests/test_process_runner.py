"""Tests for git discovery and command execution.

The runner is exercised against the Python interpreter, so git itself is not
needed.
"""

import shutil
import sys
from pathlib import Path

import pytest

from package_backup.core.errors import CommandError, CommandTimeoutError, ExecutableNotFoundError
from package_backup.core.process_runner import GitLocator, ProcessRunner, redact


def stub(path, body):
    path.write_text(f"#!/bin/sh\n{body}\n")
    path.chmod(0o755)
    return path


@pytest.fixture
def runner():
    return ProcessRunner(sys.executable, timeout=30)


class TestProcessRunner:
    def test_captures_stdout(self, runner, tmp_path):
        result = runner.run(tmp_path, ["-c", "import os; print(os.getcwd())"])

        assert result.exit_code == 0
        assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()

    def test_nonzero_exit_with_stderr_raises(self, runner, tmp_path):
        script = "import sys; sys.stderr.write('nothing to commit'); sys.exit(1)"

        with pytest.raises(CommandError) as excinfo:
            runner.run(tmp_path, ["-c", script])

        assert excinfo.value.exit_code == 1
        assert excinfo.value.stderr == "nothing to commit"
        assert "nothing to commit" in str(excinfo.value)

    def test_stderr_on_success_is_not_a_failure(self, runner, tmp_path):
        script = "import sys; sys.stderr.write('Switched to a new branch'); print('ok')"

        result = runner.run(tmp_path, ["-c", script])

        assert result.exit_code == 0
        assert result.stderr == "Switched to a new branch"

    def test_nonzero_exit_without_stderr_is_returned(self, runner, tmp_path):
        result = runner.run(tmp_path, ["-c", "import sys; sys.exit(3)"])

        assert result.exit_code == 3

    def test_timeout_is_its_own_error(self, tmp_path):
        runner = ProcessRunner(sys.executable, timeout=0.5)

        with pytest.raises(CommandTimeoutError):
            runner.run(tmp_path, ["-c", "import time; time.sleep(10)"])

    def test_credentials_are_redacted_from_errors(self, runner, tmp_path):
        url = "https://ghp_secret@github.com/octocat/foo-backup.git"
        script = f"import sys; sys.stderr.write('fatal: could not read {url}'); sys.exit(128)"

        with pytest.raises(CommandError) as excinfo:
            runner.run(tmp_path, ["-c", script, url])

        assert "ghp_secret" not in excinfo.value.stderr
        assert all("ghp_secret" not in arg for arg in excinfo.value.command_args)

    def test_undecodable_output_is_replaced(self, runner, tmp_path):
        script = "import sys; sys.stdout.buffer.write(b'caf\\xff'); sys.stderr.buffer.write(b'\\xff')"

        result = runner.run(tmp_path, ["-c", script])

        assert result.exit_code == 0
        assert result.stdout == "caf\ufffd"
        assert result.stderr == "\ufffd"

    @pytest.mark.skipif(sys.platform == "win32", reason="needs a shell script")
    def test_version_with_undecodable_output(self, tmp_path):
        fake_git = stub(tmp_path / "git", "printf 'git version 2.\\377\\n'")

        assert ProcessRunner(str(fake_git)).version() == "git version 2.\ufffd"

    def test_version(self, runner):
        assert runner.version().startswith("Python 3")

    def test_version_falls_back_to_unknown(self, tmp_path):
        assert ProcessRunner(str(tmp_path / "no-such-git")).version() == "unknown"


class TestGitLocator:
    def test_override_wins(self):
        assert GitLocator(override=sys.executable).locate() == sys.executable

    def test_path_lookup(self, monkeypatch):
        monkeypatch.setattr(shutil, "which", lambda name: sys.executable)

        assert GitLocator().candidates()[0] == sys.executable

    @pytest.mark.skipif(sys.platform == "win32", reason="needs a shell script")
    def test_broken_candidate_is_skipped(self, monkeypatch, tmp_path):
        broken = stub(tmp_path / "git", "exit 1")
        monkeypatch.setattr(shutil, "which", lambda name: sys.executable)

        assert GitLocator(override=str(broken)).locate() == sys.executable

    def test_windows_candidates_include_program_files(self, monkeypatch):
        monkeypatch.setattr(shutil, "which", lambda name: None)

        candidates = GitLocator(system="Windows").candidates()

        assert any("Program Files" in c and c.endswith("git.exe") for c in candidates)
        assert any("Programs" in c for c in candidates)

    def test_not_found_raises_with_instructions(self, monkeypatch, tmp_path):
        monkeypatch.setattr(shutil, "which", lambda name: None)
        monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ExecutableNotFoundError) as excinfo:
            GitLocator(system="Windows").locate()

        assert "git-scm.com" in str(excinfo.value)

    def test_result_is_cached(self, monkeypatch, tmp_path):
        monkeypatch.setattr(shutil, "which", lambda name: None)
        monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
        monkeypatch.chdir(tmp_path)
        fake_git = tmp_path / "git"
        shutil.copy(sys.executable, fake_git)
        locator = GitLocator(override=str(fake_git), system="Windows")

        assert locator.locate() == str(fake_git)
        fake_git.unlink()
        assert locator.locate() == str(fake_git)

        locator.reset()
        with pytest.raises(ExecutableNotFoundError):
            locator.locate()


def test_redact():
    assert redact("https://tok@github.com/a/b.git") == "https://***@github.com/a/b.git"
    assert redact("https://github.com/a/b.git") == "https://github.com/a/b.git"
