import subprocess

import pytest

from kidsgoodslab.services.deploy import DeployError, GitPublisher


class FakeRun:
    def __init__(self, outcomes):
        self.outcomes = outcomes
        self.commands = []

    def __call__(self, cmd, **kwargs):
        self.commands.append(cmd)
        returncode, stdout = self.outcomes.get(cmd[1], (0, ""))
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr="")


def test_publish_runs_add_commit_push(tmp_path, monkeypatch):
    run = FakeRun({})
    monkeypatch.setattr(subprocess, "run", run)

    assert GitPublisher(tmp_path).publish("記事3件追加（自動生成）") is True
    assert run.commands == [
        ["git", "add", "-A"],
        ["git", "commit", "-m", "記事3件追加（自動生成）"],
        ["git", "push"],
    ]


def test_publish_nothing_to_commit(tmp_path, monkeypatch):
    run = FakeRun({"commit": (1, "On branch main\nnothing to commit, working tree clean\n")})
    monkeypatch.setattr(subprocess, "run", run)

    assert GitPublisher(tmp_path).publish("update") is False
    assert ["git", "push"] not in run.commands


def test_publish_push_failure(tmp_path, monkeypatch):
    run = FakeRun({"push": (128, "fatal: could not read from remote repository")})
    monkeypatch.setattr(subprocess, "run", run)

    with pytest.raises(DeployError) as excinfo:
        GitPublisher(tmp_path).publish("update")
    assert "git push failed" in str(excinfo.value)
    assert "could not read" in excinfo.value.output
