"""
属性测试：滑动窗口限流

使用 hypothesis 进行属性测试，验证窗口内记录的请求数不超过上限。
时钟与等待函数均为注入的假实现，测试不真正睡眠。
"""

import asyncio

import pytest
from hypothesis import given, strategies as st, settings, HealthCheck

from model_synth.infra.rate_gate import RateGate


class FakeClock:
    """假时钟：sleep 直接推进时间"""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


def make_gate(limit: int, clock: FakeClock, safety_margin: float = 0.1) -> RateGate:
    return RateGate(
        limit,
        safety_margin=safety_margin,
        clock=clock,
        sleep=clock.sleep,
    )


# ============== Property: 窗口容量 ==============


@pytest.mark.asyncio
@settings(max_examples=100, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(
    limit=st.integers(min_value=1, max_value=5),
    gaps=st.lists(
        st.floats(min_value=0.0, max_value=0.6, allow_nan=False),
        min_size=1,
        max_size=40,
    ),
)
async def test_window_never_exceeds_limit(limit: int, gaps: list[float]):
    """
    *For any* admit()/record() 序列，最近 1 秒内的记录数不超过 requests_per_second。
    """
    clock = FakeClock()
    gate = make_gate(limit, clock)

    for gap in gaps:
        clock.now += gap
        await gate.admit()
        gate.record()

        recent = [t for t in gate.snapshot() if clock.now - t < gate.window]
        assert len(recent) <= limit


@pytest.mark.asyncio
async def test_admit_waits_for_oldest_entry_to_expire():
    clock = FakeClock()
    gate = make_gate(2, clock)

    await gate.admit()
    gate.record()
    clock.now = 0.2
    await gate.admit()
    gate.record()

    clock.now = 0.5
    await gate.admit()

    # 1.0 - (0.5 - 0.0) + 0.1
    assert clock.sleeps == [pytest.approx(0.6)]
    assert clock.now == pytest.approx(1.1)
    assert gate.in_window() == 1


@pytest.mark.asyncio
async def test_admit_does_not_wait_below_limit():
    clock = FakeClock()
    gate = make_gate(3, clock)

    for _ in range(3):
        await gate.admit()
        gate.record()

    assert clock.sleeps == []
    assert gate.in_window() == 3


@pytest.mark.asyncio
async def test_released_reservation_does_not_consume_slot():
    """失败的请求归还名额，不写入时间戳"""
    clock = FakeClock()
    gate = make_gate(1, clock)

    for _ in range(5):
        await gate.admit()
        gate.release()

    assert clock.sleeps == []
    assert gate.in_window() == 0
    assert gate.in_flight == 0


@pytest.mark.asyncio
async def test_reservation_counts_toward_limit():
    """已准入但未完成的请求占用名额，后来者须等待其结束"""
    clock = FakeClock()
    gate = make_gate(2, clock)

    await gate.admit()
    await gate.admit()
    assert gate.in_flight == 2

    waiter = asyncio.create_task(gate.admit())
    await asyncio.sleep(0)
    assert not waiter.done()

    gate.release()
    await asyncio.wait_for(waiter, timeout=1)

    assert gate.in_flight == 2
    assert gate.in_window() == 0
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_entries_expire_after_window():
    clock = FakeClock()
    gate = make_gate(2, clock)

    await gate.admit()
    gate.record()
    clock.now = 1.0

    assert gate.in_window() == 0


@pytest.mark.asyncio
async def test_concurrent_admissions_serialized():
    """并发的 admit 调用依次通过，窗口仍不超限"""
    clock = FakeClock()
    gate = make_gate(2, clock)

    async def one_request() -> None:
        await gate.admit()
        gate.record()

    await asyncio.gather(*(one_request() for _ in range(6)))

    timestamps = sorted(gate.snapshot())
    assert len(timestamps) <= 2
    assert len(clock.sleeps) >= 2


def test_invalid_limit_rejected():
    with pytest.raises(ValueError):
        RateGate(0)
