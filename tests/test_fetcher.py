"""Tests for BoundedFetcher."""

import threading
import time

import pytest

from sf_reference.fetcher import BoundedFetcher, chunk_list


def double_or_fail(item):
    if item % 4 == 3:
        raise RuntimeError(f"boom {item}")
    return item * 2


class TestChunkList:

    def test_chunks(self):
        assert chunk_list([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]

    def test_empty(self):
        assert chunk_list([], 3) == []


class TestBoundedFetcher:

    def test_partial_failure_does_not_abort_batch(self):
        # Items 3, 7 and 11 fail; batch size 10 splits into two batches.
        summary = BoundedFetcher(double_or_fail, concurrency=10).run(list(range(12)))
        assert summary.total == 12
        assert len(summary.failed) == 3
        assert len(summary.succeeded) == 9
        assert {f.ref for f in summary.failed} == {'3', '7', '11'}

    def test_later_batches_run_after_failures(self):
        summary = BoundedFetcher(double_or_fail, concurrency=4).run(list(range(10)))
        # Batch two and three still produced results.
        assert 16 in summary.succeeded
        assert 18 in summary.succeeded

    def test_results_keep_input_order(self):
        def slow_first(item):
            if item == 0:
                time.sleep(0.05)
            return item

        summary = BoundedFetcher(slow_first, concurrency=5).run([0, 1, 2, 3, 4])
        assert summary.succeeded == [0, 1, 2, 3, 4]

    def test_failure_reason(self):
        summary = BoundedFetcher(double_or_fail, concurrency=4).run([3])
        assert summary.failed[0].reason == 'boom 3'

    def test_failure_reason_falls_back_to_type_name(self):
        def fail(item):
            raise KeyError()

        summary = BoundedFetcher(fail).run(['x'])
        assert summary.failed[0].reason == 'KeyError'

    def test_describe_used_for_refs(self):
        summary = BoundedFetcher(double_or_fail, describe=lambda i: f"item-{i}").run([7])
        assert summary.failed[0].ref == 'item-7'

    def test_concurrency_ceiling(self):
        lock = threading.Lock()
        state = {'running': 0, 'peak': 0}

        def track(item):
            with lock:
                state['running'] += 1
                state['peak'] = max(state['peak'], state['running'])
            time.sleep(0.01)
            with lock:
                state['running'] -= 1
            return item

        summary = BoundedFetcher(track, concurrency=3).run(list(range(10)))
        assert len(summary.succeeded) == 10
        assert state['peak'] <= 3

    def test_overdue_item_recorded_as_timeout(self):
        release = threading.Event()

        def hang(item):
            if item == 'slow':
                release.wait(5)
            return item

        try:
            summary = BoundedFetcher(hang, concurrency=2, item_timeout=0.2).run(['fast', 'slow'])
        finally:
            release.set()
        assert summary.succeeded == ['fast']
        assert len(summary.failed) == 1
        assert summary.failed[0].ref == 'slow'
        assert summary.failed[0].reason == 'timeout'

    def test_empty_input(self):
        summary = BoundedFetcher(double_or_fail).run([])
        assert summary.total == 0

    def test_invalid_concurrency(self):
        with pytest.raises(ValueError):
            BoundedFetcher(double_or_fail, concurrency=0)


class TestFetchingPages:

    def test_ten_tasks_three_failing(self):
        from sf_reference.domain.models import RawPage

        failing = {2, 5, 8}

        def fetch(i):
            if i in failing:
                raise ConnectionError(f"page {i} unavailable")
            return RawPage(documentation_id='doc', reference=f'p{i}.htm', markup=f'<p>{i}</p>', title=f'T{i}')

        summary = BoundedFetcher(fetch, concurrency=10, describe=lambda i: f'p{i}.htm').run(list(range(12)))

        first_batch = [p for p in summary.succeeded if int(p.reference[1:-4]) < 10]
        assert len(first_batch) == 7
        assert all(p.markup and p.title for p in first_batch)
        assert [f.ref for f in summary.failed] == ['p2.htm', 'p5.htm', 'p8.htm']
        # The second batch still ran.
        assert [p.reference for p in summary.succeeded[-2:]] == ['p10.htm', 'p11.htm']
