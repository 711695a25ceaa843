from unittest.mock import MagicMock

import pytest

from app.tree_images.exceptions import RateLimitError
from app.tree_images.rate_limiter import RateLimitedImageProvider


class _FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _provider(
    clock: _FakeClock, max_per_hour: int = 50, min_interval: float = 0.0
) -> tuple[RateLimitedImageProvider, MagicMock]:
    inner = MagicMock()
    inner.search.side_effect = lambda name: f"https://img.test/{name}"
    provider = RateLimitedImageProvider(
        inner,
        max_per_hour=max_per_hour,
        min_interval_seconds=min_interval,
        clock=clock,
        sleep=clock.sleep,
    )
    return provider, inner


class TestRateLimitedImageProvider:
    def test_delegates_to_inner_provider(self) -> None:
        provider, inner = _provider(_FakeClock())

        assert provider.search("Oak") == "https://img.test/Oak"
        inner.search.assert_called_once_with("Oak")

    def test_spaces_consecutive_calls(self) -> None:
        clock = _FakeClock()
        provider, _inner = _provider(clock, min_interval=1.0)

        provider.search("Oak")
        clock.now += 0.25
        provider.search("Ash")

        assert clock.sleeps == [pytest.approx(0.75)]

    def test_no_wait_when_interval_already_elapsed(self) -> None:
        clock = _FakeClock()
        provider, _inner = _provider(clock, min_interval=1.0)

        provider.search("Oak")
        clock.now += 5
        provider.search("Ash")

        assert clock.sleeps == []

    def test_refuses_calls_over_hourly_quota(self) -> None:
        clock = _FakeClock()
        provider, inner = _provider(clock, max_per_hour=2)

        provider.search("Oak")
        provider.search("Ash")
        with pytest.raises(RateLimitError, match="quota of 2"):
            provider.search("Elm")
        assert inner.search.call_count == 2

    def test_quota_frees_up_after_an_hour(self) -> None:
        clock = _FakeClock()
        provider, inner = _provider(clock, max_per_hour=1)

        provider.search("Oak")
        clock.now += 3600
        provider.search("Ash")

        assert inner.search.call_count == 2
