from __future__ import annotations

import os
from pathlib import Path

from mac_provisioner.lib.manifests import read_template
from mac_provisioner.pipeline import run_pipeline
from mac_provisioner.steps import CreateDirectoriesStep, RelocateVSCodeStep, WriteConfigsStep


def _snapshot(root: Path) -> dict:
    out = {}
    for p in sorted(root.rglob("*")):
        rel = str(p.relative_to(root))
        if p.is_symlink():
            out[rel] = ("link", os.readlink(p))
        elif p.is_file():
            out[rel] = ("file", p.read_text(encoding="utf-8"))
    return out


def test_directories_are_created_once(state, home):
    step = CreateDirectoriesStep()
    assert step.probe(state)

    step.run(state)
    assert (home / "Developer").is_dir()
    assert (home / ".config").is_dir()
    assert not step.probe(state)


def test_create_mode_never_touches_an_existing_file(state, home):
    ghostty = home / ".config" / "ghostty" / "config"
    ghostty.parent.mkdir(parents=True)
    ghostty.write_text("# hand-tuned\n", encoding="utf-8")

    WriteConfigsStep().run(state)

    assert ghostty.read_text(encoding="utf-8") == "# hand-tuned\n"
    assert (home / ".config" / "starship" / "starship.toml").read_text(encoding="utf-8") == read_template(
        "starship.toml"
    )


def test_overwrite_mode_restores_template_contents(state, home):
    zprofile = home / ".config" / "zsh" / ".zprofile"
    zprofile.parent.mkdir(parents=True)
    zprofile.write_text("stale\n", encoding="utf-8")

    step = WriteConfigsStep()
    assert step.probe(state)
    step.run(state)

    assert zprofile.read_text(encoding="utf-8") == read_template("zprofile")


def test_zprofile_is_linked_into_home(state, home):
    (home / ".zprofile").write_text("old profile\n", encoding="utf-8")

    WriteConfigsStep().run(state)

    link = home / ".zprofile"
    assert link.is_symlink()
    assert link.resolve() == (home / ".config" / "zsh" / ".zprofile").resolve()


def test_existing_zshrc_is_backed_up_before_replacing(state, home):
    (home / ".zshrc").write_text("export OLD=1\n", encoding="utf-8")

    WriteConfigsStep().run(state)

    assert not (home / ".zshrc").exists()
    backups = list(home.glob(".zshrc.backup.*"))
    assert len(backups) == 1
    assert backups[0].read_text(encoding="utf-8") == "export OLD=1\n"
    assert (home / ".config" / "zsh" / ".zshrc").read_text(encoding="utf-8") == read_template("zshrc")


def test_running_twice_gives_the_same_files_as_running_once(state, home, runner):
    steps = [CreateDirectoriesStep(), WriteConfigsStep()]

    first = run_pipeline(state=state, steps=steps)
    after_first = _snapshot(home)
    second = run_pipeline(state=state, steps=steps)

    assert first.ran_steps == ["10_create_directories", "70_write_configs"]
    assert second.skipped_steps == ["10_create_directories", "70_write_configs"]
    assert _snapshot(home) == after_first


def test_vscode_settings_move_under_xdg(state, home, runner):
    user_dir = home / "Library" / "Application Support" / "Code" / "User"
    user_dir.mkdir(parents=True)
    (user_dir / "settings.json").write_text('{"editor.fontSize": 13}', encoding="utf-8")

    step = RelocateVSCodeStep()
    assert step.probe(state)
    step.run(state)

    xdg_user = home / ".config" / "Code" / "User"
    assert user_dir.is_symlink()
    assert user_dir.resolve() == xdg_user.resolve()
    assert (xdg_user / "settings.json").read_text(encoding="utf-8") == '{"editor.fontSize": 13}'
    assert runner.ran("pkill", "-f", "Visual Studio Code")
    assert step.verify(state)


def test_vscode_step_skips_when_not_installed(state, runner):
    assert not RelocateVSCodeStep().probe(state)
