import asyncio
import logging

import pytest

from aoi_zone.rendering.batch import process_all, run_batched


def double(x):
    return x * 2


class TestRunBatched:

    @pytest.mark.parametrize("count, batch_size", [
        (0, 50),
        (1, 50),
        (50, 50),
        (51, 50),
        (130, 50),
        (7, 1),
        (10, 100),
    ])
    def test_order_and_length_preserved(self, count, batch_size):
        items = list(range(count))
        results = asyncio.run(run_batched(items, double, batch_size=batch_size))
        assert results == [x * 2 for x in items]

    def test_on_batch_done_called_per_slice(self):
        sizes = []
        asyncio.run(run_batched(list(range(120)), double, batch_size=50,
                                on_batch_done=lambda batch: sizes.append(len(batch))))
        assert sizes == [50, 50, 20]

    def test_failing_item_isolated(self, caplog):
        def step(x):
            if x == 3:
                raise RuntimeError("boom")
            return x

        with caplog.at_level(logging.ERROR):
            results = asyncio.run(run_batched(list(range(6)), step, batch_size=2))

        assert results == [0, 1, 2, None, 4, 5]
        assert "render.item_failed" in caplog.text

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError):
            asyncio.run(run_batched([1, 2, 3], double, batch_size=0))

    def test_yields_between_slices(self):
        seen = []

        async def scenario():
            async def other():
                seen.append("other")

            task = asyncio.ensure_future(other())
            results = await run_batched(
                list(range(4)), lambda x: seen.append(x) or x, batch_size=2
            )
            await task
            return results

        assert asyncio.run(scenario()) == [0, 1, 2, 3]
        # The concurrent task ran at the first slice boundary
        assert seen == [0, 1, "other", 2, 3]


class TestProcessAll:

    def test_processes_synchronously(self):
        assert process_all([1, 2, 3], double) == [2, 4, 6]

    def test_failure_yields_none(self):
        assert process_all([1, 0, 2], lambda x: 10 // x) == [10, None, 5]
