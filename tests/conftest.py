"""Pytest fixtures for git-plugin-keeper tests"""
import tempfile
from collections import namedtuple
from pathlib import Path

import git
import pytest

from git_plugin_keeper.config import Config
from git_plugin_keeper.core import PluginKeeper
from git_plugin_keeper.services.console_log import ConsoleLog

PLUGIN_NAME = "awesome-plugin"
MANUAL_PLUGIN_NAME = "ManualPlugin"

Upstream = namedtuple("Upstream", ["path", "seed"])


def configure_identity(repo: git.Repo) -> None:
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")


def commit_file(repo: git.Repo, filename: str, content: str, message: str) -> git.Commit:
    """Write a file in the working tree and commit it."""
    path = Path(repo.working_dir) / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([filename])
    return repo.index.commit(message)


def push_upstream_commit(upstream: Upstream, filename: str, content: str, message: str,
                         branch: str = "main") -> git.Commit:
    """Create a commit on ``branch`` of the upstream repository."""
    seed = upstream.seed
    seed.git.checkout(branch)
    commit = commit_file(seed, filename, content, message)
    seed.git.push("origin", branch)
    seed.git.checkout("main")
    return commit


def init_repo(path: Path) -> git.Repo:
    path.mkdir(parents=True, exist_ok=True)
    repo = git.Repo.init(path)
    configure_identity(repo)
    return repo


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def upstream(temp_dir):
    """A bare repository with main and feature-x branches, plus the working repo that feeds it."""
    seed = init_repo(temp_dir / "seed")
    commit_file(seed, "README.md", "# Awesome Plugin\n", "Initial commit")
    seed.git.branch("-M", "main")
    commit_file(seed, "plugin.py", "VERSION = 1\n", "Add plugin code")

    seed.git.checkout("-b", "feature-x")
    commit_file(seed, "feature.py", "FEATURE = True\n", "Add feature x")
    seed.git.checkout("main")

    bare_path = temp_dir / "remotes" / f"{PLUGIN_NAME}.git"
    bare = git.Repo.init(bare_path, bare=True, mkdir=True)
    bare.git.symbolic_ref("HEAD", "refs/heads/main")
    bare.close()

    seed.create_remote("origin", str(bare_path))
    seed.git.push("origin", "main", "feature-x")

    yield Upstream(path=bare_path, seed=seed)

    seed.close()


@pytest.fixture
def plugin_root(temp_dir, upstream):
    """Plugin folder with one cloned plugin and one manually placed plugin."""
    root = temp_dir / "plugins"
    root.mkdir()

    clone = git.Repo.clone_from(str(upstream.path), root / PLUGIN_NAME)
    configure_identity(clone)
    clone.close()

    manual = root / MANUAL_PLUGIN_NAME
    manual.mkdir()
    (manual / "plugin.py").write_text("print('hello')\n")

    (root / "notes.txt").write_text("not a plugin\n")
    return root


@pytest.fixture
def plugin_repo(plugin_root):
    repo = git.Repo(plugin_root / PLUGIN_NAME)
    yield repo
    repo.close()


@pytest.fixture
def solo_repo(plugin_root):
    """A checkout with a single commit and no remote."""
    repo = init_repo(plugin_root / "solo")
    commit_file(repo, "solo.txt", "only commit\n", "Root commit")
    yield repo
    repo.close()


@pytest.fixture
def empty_root(temp_dir):
    root = temp_dir / "empty-plugins"
    root.mkdir()
    return root


@pytest.fixture
def config(plugin_root):
    return Config(plugin_root=str(plugin_root), workers=4, restart_timeout=5.0)


@pytest.fixture
def console_log():
    return ConsoleLog(echo=False)


@pytest.fixture
def keeper(config, console_log):
    keeper = PluginKeeper(config, console_log)
    yield keeper
    keeper.close()


@pytest.fixture
def empty_keeper(empty_root, console_log):
    keeper = PluginKeeper(Config(plugin_root=str(empty_root), workers=4), console_log)
    yield keeper
    keeper.close()
