"""
Unit tests for file discovery and the parallel map helper.
"""

import os
import threading

import pytest

from dedupligator.cancellation import CancellationToken
from dedupligator.exceptions import InvalidInputError, ScanCancelledError
from dedupligator.scanner.file_discovery import find_image_files, is_image_file
from dedupligator.scanner.parallel import map_parallel


def touch(path, content=b"x"):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


class TestIsImageFile:
    """Extension filter."""

    @pytest.mark.parametrize("name", [
        "a.jpg", "a.jpeg", "a.png", "a.bmp", "a.gif", "a.webp", "A.JPG", "b.PnG",
    ])
    def test_image_extensions(self, name):
        assert is_image_file(name)

    @pytest.mark.parametrize("name", ["a.txt", "a.tiff", "a.heic", "jpg", "a.jpg.bak"])
    def test_other_extensions(self, name):
        assert not is_image_file(name)


class TestFindImageFiles:
    """Test image file discovery."""

    def test_finds_images_only(self, sample_images, temp_dir):
        files = find_image_files(str(temp_dir), max_workers=2)
        names = sorted(f.name for f in files)
        assert names == ["A.jpg", "B.jpg", "C.jpg"]

    def test_recursive(self, temp_dir):
        touch(temp_dir / "root.png")
        touch(temp_dir / "sub" / "one.jpg")
        touch(temp_dir / "sub" / "deeper" / "two.GIF")
        touch(temp_dir / "other" / "three.webp")
        touch(temp_dir / "other" / "readme.md")

        files = find_image_files(str(temp_dir), max_workers=4)
        names = {f.name for f in files}
        assert names == {"root.png", "one.jpg", "two.GIF", "three.webp"}

    def test_root_files_come_first(self, temp_dir):
        touch(temp_dir / "a_dir" / "inner.png")
        touch(temp_dir / "z_root.png")
        files = find_image_files(str(temp_dir), max_workers=2)
        assert [f.name for f in files] == ["z_root.png", "inner.png"]

    def test_order_is_deterministic(self, temp_dir):
        for d in ("b", "a", "c"):
            for n in ("2.png", "1.png"):
                touch(temp_dir / d / n)
        first = [f.path for f in find_image_files(str(temp_dir), max_workers=3)]
        second = [f.path for f in find_image_files(str(temp_dir), max_workers=1)]
        assert first == second

    def test_snapshot_metadata(self, temp_dir):
        path = touch(temp_dir / "img.png", b"12345678")
        (candidate,) = find_image_files(str(temp_dir))
        assert candidate.path == str(path)
        assert candidate.size == 8
        assert candidate.modified == os.stat(path).st_mtime

    def test_empty_directory(self, temp_dir):
        assert find_image_files(str(temp_dir)) == []

    def test_directory_named_like_image_is_skipped(self, temp_dir):
        (temp_dir / "folder.jpg").mkdir()
        touch(temp_dir / "real.jpg")
        assert [f.name for f in find_image_files(str(temp_dir))] == ["real.jpg"]

    def test_missing_root_raises(self, temp_dir):
        with pytest.raises(InvalidInputError):
            find_image_files(str(temp_dir / "missing"))

    def test_progress_counts_directories(self, temp_dir):
        touch(temp_dir / "a" / "1.png")
        touch(temp_dir / "b" / "2.png")
        calls = []
        find_image_files(str(temp_dir), max_workers=1,
                         progress_callback=lambda done, total: calls.append((done, total)))
        assert calls[0] == (1, 3)
        assert calls[-1] == (3, 3)

    def test_cancelled_token_raises(self, temp_dir):
        touch(temp_dir / "a.png")
        token = CancellationToken()
        token.cancel()
        with pytest.raises(ScanCancelledError):
            find_image_files(str(temp_dir), cancel_token=token)

    def test_inaccessible_directories_are_skipped(self, temp_dir, monkeypatch, caplog):
        touch(temp_dir / "a" / "1.png")
        touch(temp_dir / "b" / "2.png")
        touch(temp_dir / "b" / "locked" / "hidden.png")
        touch(temp_dir / "locked" / "top.png")
        touch(temp_dir / "c" / "3.png")

        real_scandir = os.scandir

        def scandir(path="."):
            if os.path.basename(os.fspath(path)) == "locked":
                raise PermissionError(13, "Permission denied", os.fspath(path))
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", scandir)
        with caplog.at_level("DEBUG"):
            files = find_image_files(str(temp_dir), max_workers=2)

        assert sorted(f.name for f in files) == ["1.png", "2.png", "3.png"]
        assert "Skipping inaccessible directory" in caplog.text


class TestMapParallel:
    """Bounded worker-pool map."""

    def test_preserves_order(self):
        assert map_parallel(lambda x: x * x, list(range(20)), max_workers=4) == [
            x * x for x in range(20)
        ]

    def test_empty(self):
        assert map_parallel(lambda x: x, []) == []

    def test_respects_worker_bound(self):
        active = 0
        peak = 0
        lock = threading.Lock()
        barrier = threading.Event()

        def work(_):
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            barrier.wait(0.01)
            with lock:
                active -= 1

        map_parallel(work, list(range(30)), max_workers=3)
        assert peak <= 3

    def test_exception_propagates(self):
        def work(x):
            if x == 5:
                raise RuntimeError("boom")
            return x

        with pytest.raises(RuntimeError, match="boom"):
            map_parallel(work, list(range(10)), max_workers=2)

    def test_cancelled_before_start(self):
        token = CancellationToken()
        token.cancel()
        calls = []
        with pytest.raises(ScanCancelledError):
            map_parallel(calls.append, [1, 2, 3], cancel_token=token)
        assert calls == []

    def test_progress_callback(self):
        seen = []
        map_parallel(lambda x: x, [1, 2, 3], max_workers=1,
                     progress_callback=lambda done, total: seen.append((done, total)))
        assert seen == [(1, 3), (2, 3), (3, 3)]
