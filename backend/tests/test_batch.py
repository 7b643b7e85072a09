import asyncio
from unittest.mock import AsyncMock

import pytest

from conftest import RecordingSleep, make_assessment
from floodrisk.models.assessment import Location
from floodrisk.services.batch_orchestrator import BatchOrchestrator, split_groups
from floodrisk.utils.pacing import GroupPacer


def locations(n: int) -> list[Location]:
    return [Location(latitude=10 + i * 0.1, longitude=106.0, name=f"Loc {i}") for i in range(n)]


def orchestrator(assess, sleep=None, group_size=5, delay=2.0):
    sleep = sleep or RecordingSleep()
    return BatchOrchestrator(assess, lambda: GroupPacer(delay, sleep=sleep), group_size=group_size), sleep


class TestSplitGroups:
    @pytest.mark.parametrize("n,expected", [(0, []), (1, [1]), (5, [5]), (6, [5, 1]), (12, [5, 5, 2])])
    def test_group_sizes(self, n, expected):
        assert [len(g) for g in split_groups(locations(n), 5)] == expected


class TestGroupPacer:
    @pytest.mark.asyncio
    async def test_first_wait_is_free(self, recording_sleep):
        pacer = GroupPacer(2.0, sleep=recording_sleep)
        await pacer.wait()
        await pacer.wait()
        await pacer.wait()
        assert recording_sleep.calls == [2.0, 2.0]

    @pytest.mark.asyncio
    async def test_reset(self, recording_sleep):
        pacer = GroupPacer(2.0, sleep=recording_sleep)
        await pacer.wait()
        pacer.reset()
        await pacer.wait()
        assert recording_sleep.calls == []


class TestBatchOrchestrator:
    @pytest.mark.asyncio
    async def test_all_succeed_in_order(self):
        async def assess(loc):
            return make_assessment(loc)

        locs = locations(7)
        orch, sleep = orchestrator(assess)
        result = await orch.assess_batch(locs)

        assert result.total_requested == 7
        assert result.total_assessed == 7
        assert [a.location for a in result.assessments] == locs
        assert sleep.calls == [2.0]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("n,pauses", [(1, 0), (5, 0), (6, 1), (11, 2), (20, 3)])
    async def test_pause_between_groups_only(self, n, pauses):
        orch, sleep = orchestrator(AsyncMock(side_effect=make_assessment))
        await orch.assess_batch(locations(n))
        assert len(sleep.calls) == pauses

    @pytest.mark.asyncio
    async def test_failures_are_dropped(self):
        async def assess(loc):
            if loc.name == "Loc 1":
                return None
            if loc.name == "Loc 3":
                raise RuntimeError("unexpected")
            return make_assessment(loc)

        orch, _ = orchestrator(assess)
        result = await orch.assess_batch(locations(6))
        assert result.total_requested == 6
        assert result.total_assessed == 4
        assert [a.location.name for a in result.assessments] == ["Loc 0", "Loc 2", "Loc 4", "Loc 5"]
        assert result.success_rate == 67

    @pytest.mark.asyncio
    async def test_group_runs_concurrently_and_groups_run_sequentially(self):
        running = 0
        peak = 0
        order: list[str] = []

        async def assess(loc):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0)
            order.append(loc.name)
            running -= 1
            return make_assessment(loc)

        orch, _ = orchestrator(assess, group_size=3)
        await orch.assess_batch(locations(7))
        assert peak == 3
        assert set(order[:3]) == {"Loc 0", "Loc 1", "Loc 2"}
        assert set(order[3:6]) == {"Loc 3", "Loc 4", "Loc 5"}

    @pytest.mark.asyncio
    async def test_pause_falls_between_groups(self):
        events: list[str] = []

        async def sleep(seconds):
            events.append("sleep")

        async def assess(loc):
            await asyncio.sleep(0)
            events.append(loc.name)
            return make_assessment(loc)

        orch, _ = orchestrator(assess, sleep=sleep)
        await orch.assess_batch(locations(7))

        assert set(events[:5]) == {f"Loc {i}" for i in range(5)}
        assert events[5] == "sleep"
        assert set(events[6:]) == {"Loc 5", "Loc 6"}
        assert len(events) == 8

    @pytest.mark.asyncio
    async def test_cancelled_item_is_dropped(self):
        async def assess(loc):
            if loc.name == "Loc 2":
                raise asyncio.CancelledError()
            return make_assessment(loc)

        orch, _ = orchestrator(assess)
        result = await orch.assess_batch(locations(4))
        assert result.total_assessed == 3
        assert "Loc 2" not in [a.location.name for a in result.assessments]

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        orch, sleep = orchestrator(AsyncMock())
        result = await orch.assess_batch([])
        assert result.total_requested == 0
        assert result.success_rate == 0
        assert sleep.calls == []

    def test_rejects_zero_group_size(self):
        with pytest.raises(ValueError):
            BatchOrchestrator(AsyncMock(), lambda: GroupPacer(0), group_size=0)
