"""Test configuration for stagerunner."""
import sys
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from git import Actor, Repo

from stagerunner.context import bind_context, root_context


ACTOR = Actor("CI Bot", "ci@example.org")


@pytest.fixture
def workspace(tmp_path):
    """Workspace with a fixed, minimal environment."""
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def root(workspace):
    """Root task context bound for the duration of the test."""
    context = root_context(workspace, {"PATH": "/usr/bin:/bin", "KEEP": "1"})
    with bind_context(context):
        yield context


def commit_file(repo: Repo, relpath: str, content: str, message: str) -> str:
    target = Path(repo.working_tree_dir) / relpath
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content)
    repo.index.add([relpath])
    return repo.index.commit(message, author=ACTOR, committer=ACTOR).hexsha


@pytest.fixture
def remotes(tmp_path):
    """Local "remote" repositories: one per name, master + a feature branch on dmd."""
    base = tmp_path / "remotes"

    def make(name: str) -> Repo:
        repo = Repo.init(base / name)
        commit_file(repo, "README", f"{name} master\n", "init")
        repo.git.branch("-M", "master")
        return repo

    repos = {name: make(name) for name in ("dmd", "druntime", "phobos")}

    dmd = repos["dmd"]
    dmd.git.checkout("-b", "feature")
    feature_sha = commit_file(dmd, "FEATURE", "feature\n", "feature work")
    dmd.git.update_ref("refs/pull/42/head", feature_sha)
    dmd.git.checkout("master")

    yield str(base / "{name}"), repos

    for repo in repos.values():
        repo.close()
