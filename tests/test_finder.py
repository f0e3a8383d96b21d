"""
Tests for the duplicate finder pipeline.
"""

import threading
import time

import pytest

from dedupligator.cancellation import CancellationToken
from dedupligator.exceptions import InvalidInputError, ScanCancelledError
from dedupligator.finder import (
    DuplicateFinder,
    GROUPING_CONNECTED,
    GROUPING_REPRESENTATIVE,
    find_duplicates,
)
from dedupligator.strategies import ExactMatchStrategy
from dedupligator.scanner import file_discovery


class RelationStrategy:
    """
    Strategy driven by an explicit match relation over file names.

    ``key`` maps a file name to its grouping key (default: one shared key).
    ``failing`` names files whose comparisons raise OSError.
    """

    match_type = "relation"

    def __init__(self, pairs=(), key=None, pre_group=True, failing=(), match_all=False,
                 on_compare=None):
        self.pairs = {frozenset(p) for p in pairs}
        self.key = key or (lambda name: "all")
        self.requires_pre_grouping = pre_group
        self.failing = set(failing)
        self.match_all = match_all
        self.on_compare = on_compare
        self.compared = []

    def grouping_key(self, file):
        return self.key(file.name)

    def are_duplicates(self, file1, file2):
        self.compared.append((file1.name, file2.name))
        if self.on_compare:
            self.on_compare()
        if file1.name in self.failing or file2.name in self.failing:
            raise OSError("unreadable")
        return self.match_all or frozenset((file1.name, file2.name)) in self.pairs

    def clear_cache(self):
        pass


def make_files(directory, *names):
    for i, name in enumerate(names):
        (directory / name).write_bytes(f"content-{i}".encode())


def names_of(groups):
    return sorted(sorted(f.name for f in g.files) for g in groups)


class TestFinderValidation:
    """Argument and input validation."""

    def test_missing_directory(self, temp_dir):
        finder = DuplicateFinder(ExactMatchStrategy(), max_workers=2)
        with pytest.raises(InvalidInputError):
            finder.find_duplicates(str(temp_dir / "missing"))

    def test_path_is_a_file(self, sample_images):
        finder = DuplicateFinder(ExactMatchStrategy(), max_workers=2)
        with pytest.raises(InvalidInputError):
            finder.find_duplicates(sample_images['a'])

    def test_empty_path(self):
        finder = DuplicateFinder(ExactMatchStrategy(), max_workers=2)
        with pytest.raises(InvalidInputError):
            finder.find_duplicates("")

    @pytest.mark.parametrize("workers", [0, -1, 1000])
    def test_invalid_workers(self, workers):
        with pytest.raises(InvalidInputError):
            DuplicateFinder(ExactMatchStrategy(), max_workers=workers)

    def test_invalid_grouping(self):
        with pytest.raises(InvalidInputError):
            DuplicateFinder(ExactMatchStrategy(), grouping="clusters")

    def test_invalid_input_is_value_error(self, temp_dir):
        with pytest.raises(ValueError):
            find_duplicates(str(temp_dir / "missing"), ExactMatchStrategy())


class TestExactEndToEnd:
    """Full pipeline with the exact strategy on real files."""

    def test_identical_files_grouped(self, sample_images, temp_dir):
        finder = DuplicateFinder(ExactMatchStrategy(), max_workers=2)
        groups = finder.find_duplicates(str(temp_dir))
        assert names_of(groups) == [["A.jpg", "B.jpg"]]
        group = groups[0]
        assert group.match_type == "exact"
        assert group.representative.name == "A.jpg"
        assert finder.stats.files_scanned == 3
        assert finder.stats.duplicate_groups == 1

    def test_nested_copies(self, sample_images, temp_dir):
        nested = temp_dir / "nested" / "deeper"
        nested.mkdir(parents=True)
        (nested / "copy.png").write_bytes((temp_dir / "C.jpg").read_bytes())
        groups = find_duplicates(str(temp_dir), ExactMatchStrategy(), max_workers=3)
        assert names_of(groups) == [["A.jpg", "B.jpg"], ["C.jpg", "copy.png"]]

    def test_no_images(self, temp_dir):
        (temp_dir / "readme.txt").write_text("nothing here")
        assert find_duplicates(str(temp_dir), ExactMatchStrategy()) == []

    def test_single_image(self, temp_dir):
        make_files(temp_dir, "only.png")
        assert find_duplicates(str(temp_dir), ExactMatchStrategy()) == []

    def test_idempotent(self, sample_images, temp_dir):
        strategy = ExactMatchStrategy()
        first = find_duplicates(str(temp_dir), strategy, max_workers=2)
        second = find_duplicates(str(temp_dir), strategy, max_workers=4)
        assert names_of(first) == names_of(second)

    def test_groups_are_disjoint(self, temp_dir):
        for i in range(6):
            (temp_dir / f"{i}.png").write_bytes(b"same" if i % 2 else b"diff")
        groups = find_duplicates(str(temp_dir), ExactMatchStrategy(), max_workers=2)
        seen = set()
        for group in groups:
            assert len(group.files) >= 2
            assert seen.isdisjoint(group.paths)
            seen |= group.paths
        assert names_of(groups) == [["0.png", "2.png", "4.png"], ["1.png", "3.png", "5.png"]]


class TestGroupingModes:
    """Representative and connected grouping."""

    @pytest.fixture
    def chain(self, temp_dir):
        make_files(temp_dir, "a.png", "b.png", "c.png")
        return RelationStrategy(pairs=[("a.png", "b.png"), ("b.png", "c.png")])

    def test_representative_does_not_chain(self, temp_dir, chain):
        groups = find_duplicates(str(temp_dir), chain, grouping=GROUPING_REPRESENTATIVE)
        assert names_of(groups) == [["a.png", "b.png"]]
        assert groups[0].representative.name == "a.png"

    def test_connected_follows_chain(self, temp_dir, chain):
        groups = find_duplicates(str(temp_dir), chain, grouping=GROUPING_CONNECTED)
        assert names_of(groups) == [["a.png", "b.png", "c.png"]]
        assert groups[0].representative.name == "a.png"

    def test_claimed_files_are_not_compared_again(self, temp_dir):
        make_files(temp_dir, "a.png", "b.png", "c.png")
        strategy = RelationStrategy(match_all=True)
        groups = find_duplicates(str(temp_dir), strategy)
        assert names_of(groups) == [["a.png", "b.png", "c.png"]]
        assert strategy.compared == [("a.png", "b.png"), ("a.png", "c.png")]


class TestPreGrouping:
    """Files are only compared inside their grouping-key bucket."""

    def test_only_same_key_compared(self, temp_dir):
        make_files(temp_dir, "x1.png", "x2.png", "y1.png", "y2.png", "z1.png")
        strategy = RelationStrategy(match_all=True, key=lambda name: name[0])
        groups = find_duplicates(str(temp_dir), strategy, max_workers=3)
        assert names_of(groups) == [["x1.png", "x2.png"], ["y1.png", "y2.png"]]
        for first, second in strategy.compared:
            assert first[0] == second[0]

    def test_no_pre_grouping_uses_single_bucket(self, temp_dir):
        make_files(temp_dir, "x1.png", "y1.png", "z1.png")
        strategy = RelationStrategy(match_all=True, key=lambda name: name[0], pre_group=False)
        groups = find_duplicates(str(temp_dir), strategy)
        assert names_of(groups) == [["x1.png", "y1.png", "z1.png"]]

    def test_grouping_key_failure_is_bucketed(self, temp_dir):
        make_files(temp_dir, "bad1.png", "bad2.png", "ok.png")

        def key(name):
            if name.startswith("bad"):
                raise OSError("cannot decode")
            return name

        strategy = RelationStrategy(match_all=True, key=key)
        groups = find_duplicates(str(temp_dir), strategy)
        assert names_of(groups) == [["bad1.png", "bad2.png"]]


class TestFailureIsolation:
    """A failing comparison does not abort the run."""

    def test_failing_pair_treated_as_not_duplicate(self, temp_dir):
        make_files(temp_dir, "a.png", "b.png", "broken.png", "c.png")
        strategy = RelationStrategy(match_all=True, failing={"broken.png"})
        finder = DuplicateFinder(strategy, max_workers=2)
        groups = finder.find_duplicates(str(temp_dir))
        assert names_of(groups) == [["a.png", "b.png", "c.png"]]
        assert finder.stats.comparison_failures >= 1

    def test_failure_is_logged(self, temp_dir, caplog):
        make_files(temp_dir, "a.png", "broken.png")
        strategy = RelationStrategy(match_all=True, failing={"broken.png"})
        with caplog.at_level("WARNING"):
            assert find_duplicates(str(temp_dir), strategy) == []
        assert "Failed to compare" in caplog.text


class TestCancellation:
    """Cooperative cancellation."""

    def test_cancelled_before_start(self, sample_images, temp_dir):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(ScanCancelledError):
            find_duplicates(str(temp_dir), ExactMatchStrategy(), cancel_token=token)

    def test_cancelled_during_comparison(self, temp_dir):
        make_files(temp_dir, "a.png", "b.png", "c.png", "d.png")
        token = CancellationToken()
        strategy = RelationStrategy(on_compare=token.cancel)
        with pytest.raises(ScanCancelledError):
            find_duplicates(str(temp_dir), strategy, max_workers=1, cancel_token=token)
        assert len(strategy.compared) == 1

    def test_cancelled_during_scan(self, temp_dir, monkeypatch):
        for i in range(12):
            (temp_dir / f"dir{i:02d}").mkdir()
            (temp_dir / f"dir{i:02d}" / "img.png").write_bytes(f"sub-{i}".encode())

        token = CancellationToken()
        walked = []
        real_walk = file_discovery._walk_directory

        def walk_then_cancel(directory, cancel_token=None):
            walked.append(directory)
            if len(walked) == 3:
                token.cancel()
            return real_walk(directory, cancel_token)

        monkeypatch.setattr(file_discovery, "_walk_directory", walk_then_cancel)
        strategy = RelationStrategy(match_all=True)
        with pytest.raises(ScanCancelledError):
            find_duplicates(str(temp_dir), strategy, max_workers=1, cancel_token=token)
        assert len(walked) == 3
        assert strategy.compared == []


class TestProgress:
    """Progress values reported to the caller."""

    def test_monotonic_and_complete(self, sample_images, temp_dir):
        values = []
        finder = DuplicateFinder(ExactMatchStrategy(), max_workers=2)
        finder.find_duplicates(str(temp_dir), progress=values.append)
        assert finder.flush_progress(timeout=5)
        assert values
        assert values == sorted(values)
        assert all(0.0 <= v <= 100.0 for v in values)
        assert values[-1] == 100.0

    def test_complete_when_nothing_to_compare(self, temp_dir):
        values = []
        finder = DuplicateFinder(ExactMatchStrategy())
        finder.find_duplicates(str(temp_dir), progress=values.append)
        assert finder.flush_progress(timeout=5)
        assert values[-1] == 100.0

    def test_flush_before_any_run(self):
        assert DuplicateFinder(ExactMatchStrategy()).flush_progress(timeout=0)

    def test_slow_sink_does_not_delay_result(self, sample_images, temp_dir):
        release = threading.Event()
        values = []

        def slow_sink(value):
            release.wait(5)
            values.append(value)

        finder = DuplicateFinder(ExactMatchStrategy(), max_workers=2)
        start = time.monotonic()
        try:
            groups = finder.find_duplicates(str(temp_dir), progress=slow_sink)
            elapsed = time.monotonic() - start
        finally:
            release.set()
        assert elapsed < 1.0
        assert names_of(groups) == [["A.jpg", "B.jpg"]]
        assert finder.flush_progress(timeout=5)
        assert values[-1] == 100.0

    def test_failing_sink_does_not_abort(self, sample_images, temp_dir):
        def sink(_value):
            raise RuntimeError("display closed")

        groups = find_duplicates(str(temp_dir), ExactMatchStrategy(), progress=sink)
        assert names_of(groups) == [["A.jpg", "B.jpg"]]
