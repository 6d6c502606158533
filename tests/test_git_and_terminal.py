from __future__ import annotations

import pytest

from mac_provisioner.lib.terminal import REQUIRED_TERMINAL, PreflightError, check_terminal
from mac_provisioner.pipeline import run_pipeline
from mac_provisioner.steps import ConfigureGitStep


def test_git_identity_from_state_skips_prompt(state, runner, home, monkeypatch):
    def no_prompt(_msg):
        raise AssertionError("should not prompt")

    monkeypatch.setattr("builtins.input", no_prompt)

    step = ConfigureGitStep()
    assert step.probe(state)
    step.run(state)

    assert runner.git.config == {
        "user.name": "Ada Lovelace",
        "user.email": "ada@example.com",
        "credential.helper": "osxkeychain",
        "init.defaultBranch": "main",
    }
    assert step.verify(state)
    git_envs = [e for c, e in zip(runner.calls, runner.envs) if c[:1] == ["git"]]
    assert {e["GIT_CONFIG_GLOBAL"] for e in git_envs} == {str(home / ".config" / "git" / "config")}


def test_git_prompts_once_for_name_and_email(state, runner, monkeypatch):
    state["config"]["git_name"] = None
    state["config"]["git_email"] = None
    answers = iter(["Grace Hopper", "grace@example.com"])
    prompts = []

    def fake_input(msg):
        prompts.append(msg)
        return next(answers)

    monkeypatch.setattr("builtins.input", fake_input)

    first = run_pipeline(state=state, steps=[ConfigureGitStep()])
    second = run_pipeline(state=state, steps=[ConfigureGitStep()])

    assert prompts == ["Enter your Git Name: ", "Enter your Git Email: "]
    assert first.ran_steps == ["50_configure_git"]
    assert second.skipped_steps == ["50_configure_git"]
    assert runner.git.config["user.name"] == "Grace Hopper"


def test_blank_git_name_fails_the_step(state, runner, monkeypatch):
    state["config"]["git_name"] = None
    monkeypatch.setattr("builtins.input", lambda _msg: "   ")

    result = run_pipeline(state=state, steps=[ConfigureGitStep()])

    assert result.failed_steps == ["50_configure_git"]
    assert "user.name" not in runner.git.config


def test_designated_terminal_is_accepted():
    check_terminal({"TERM_PROGRAM": REQUIRED_TERMINAL})


@pytest.mark.parametrize(
    "environ",
    [
        {},
        {"TERM_PROGRAM": ""},
        {"TERM_PROGRAM": "iTerm.app"},
        {"TERM_PROGRAM": "ghostty"},
        {"TERM_PROGRAM": "vscode"},
        {"TERM_PROGRAM": "WarpTerminal"},
        {"TERM_PROGRAM": "apple_terminal"},
        {"TERM_PROGRAM": "Apple_Terminal "},
        {"TERM": "xterm-256color"},
    ],
)
def test_every_other_environment_is_rejected(environ):
    with pytest.raises(PreflightError, match="Apple Terminal"):
        check_terminal(environ)


def test_check_reads_process_environment_by_default(monkeypatch):
    monkeypatch.setenv("TERM_PROGRAM", "tmux")
    with pytest.raises(PreflightError):
        check_terminal()
    monkeypatch.setenv("TERM_PROGRAM", REQUIRED_TERMINAL)
    check_terminal()
