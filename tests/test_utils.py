"""Tests for utility functions"""
import os
import stat
from unittest.mock import patch

from git_plugin_keeper.utils import clear_readonly, get_worker_count, remove_tree


class TestWorkerCount:
    """Test worker pool sizing."""

    def test_user_specified(self):
        assert get_worker_count(8) == 8

    def test_minimum_of_two(self):
        assert get_worker_count(1) == 2

    @patch("git_plugin_keeper.utils.threading.is_free_threading_enabled", return_value=False)
    @patch("git_plugin_keeper.utils.threading.os.cpu_count", return_value=4)
    def test_auto_detect(self, mock_cpu_count, mock_free_threading):
        assert get_worker_count() == 8

    @patch("git_plugin_keeper.utils.threading.is_free_threading_enabled", return_value=False)
    @patch("git_plugin_keeper.utils.threading.os.cpu_count", return_value=64)
    def test_auto_detect_is_capped(self, mock_cpu_count, mock_free_threading):
        assert get_worker_count() == 16

    @patch("git_plugin_keeper.utils.threading.is_free_threading_enabled", return_value=True)
    @patch("git_plugin_keeper.utils.threading.os.cpu_count", return_value=4)
    def test_free_threading(self, mock_cpu_count, mock_free_threading):
        assert get_worker_count() == 8


class TestFilesystem:
    """Test removal of trees with read-only entries."""

    def test_clear_readonly(self, temp_dir):
        target = temp_dir / "tree" / "objects"
        target.mkdir(parents=True)
        packed = target / "pack.idx"
        packed.write_text("data")
        packed.chmod(stat.S_IREAD)

        clear_readonly(str(temp_dir / "tree"))

        assert os.stat(packed).st_mode & stat.S_IWRITE

    def test_remove_tree(self, temp_dir):
        tree = temp_dir / "tree"
        (tree / "sub").mkdir(parents=True)
        locked = tree / "sub" / "locked"
        locked.write_text("x")
        locked.chmod(stat.S_IREAD)

        remove_tree(str(tree))

        assert not tree.exists()

    def test_symlinks_are_not_followed(self, temp_dir):
        outside = temp_dir / "outside.txt"
        outside.write_text("keep")
        outside.chmod(stat.S_IREAD)
        tree = temp_dir / "tree"
        tree.mkdir()
        (tree / "link").symlink_to(outside)

        remove_tree(str(tree))

        assert outside.exists()
        assert not os.stat(outside).st_mode & stat.S_IWRITE
