import pytest

from stagerunner.context import environment_overlay, working_directory
from stagerunner.exceptions import TaskExecutionFailure
from stagerunner.models import Outcome
from stagerunner.shell import sh, script_action


def test_sh_runs_in_task_directory(root):
    with working_directory("phobos") as context:
        assert sh("pwd").strip() == str(context.cwd)


def test_sh_uses_overlaid_environment(root):
    with environment_overlay(["DMD=/ws/distribution/bin/dmd"]):
        assert sh('echo "$DMD"').strip() == "/ws/distribution/bin/dmd"
    assert sh('echo "${DMD:-unset}"').strip() == "unset"


def test_sh_raises_on_non_zero_exit(root):
    with pytest.raises(TaskExecutionFailure) as ei:
        sh("echo compiling; exit 3", label="dmd")

    assert ei.value.task_name == "dmd"
    assert "3" in ei.value.reason
    assert "compiling" in ei.value.logs


def test_script_action_stops_at_first_failure(root):
    action = script_action(["touch first", "false", "touch second"])

    with pytest.raises(TaskExecutionFailure):
        action("druntime")

    assert (root.cwd / "first").exists()
    assert not (root.cwd / "second").exists()


def test_script_action_success(root):
    assert script_action(["true", "true"])("tools") == Outcome.SUCCESS
