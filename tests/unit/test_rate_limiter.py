"""Unit tests for the login throttle."""

import pytest

from src.core.rate_limiter import LoginThrottle, ThrottlePolicy, get_login_throttle


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def throttle(clock: FakeClock) -> LoginThrottle:
    """Create a throttle allowing three attempts per minute."""
    return LoginThrottle(ThrottlePolicy(max_attempts=3, window_seconds=60), clock=clock)


class TestHit:
    """Tests for hit."""

    @pytest.mark.asyncio
    async def test_allows_attempts_within_limit(self, throttle: LoginThrottle) -> None:
        """Test that attempts below the limit are allowed with decreasing remaining."""
        decisions = [await throttle.hit("login:yamada") for _ in range(3)]

        assert [d.allowed for d in decisions] == [True, True, True]
        assert [d.remaining for d in decisions] == [2, 1, 0]

    @pytest.mark.asyncio
    async def test_blocks_after_limit(self, throttle: LoginThrottle, clock: FakeClock) -> None:
        """Test that the attempt after the limit is refused until the oldest expires."""
        for _ in range(3):
            await throttle.hit("login:yamada")
            clock.now += 10

        allowed, remaining, retry_after = await throttle.hit("login:yamada")

        assert allowed is False
        assert remaining == 0
        assert retry_after == 31

    @pytest.mark.asyncio
    async def test_window_slides(self, throttle: LoginThrottle, clock: FakeClock) -> None:
        for _ in range(3):
            await throttle.hit("login:yamada")

        clock.now += 61
        decision = await throttle.hit("login:yamada")

        assert decision.allowed is True
        assert decision.remaining == 2

    @pytest.mark.asyncio
    async def test_keys_are_independent(self, throttle: LoginThrottle) -> None:
        for _ in range(3):
            await throttle.hit("login:yamada")

        decision = await throttle.hit("login:suzuki")

        assert decision.allowed is True


class TestReset:
    """Tests for reset."""

    @pytest.mark.asyncio
    async def test_reset_clears_attempts(self, throttle: LoginThrottle) -> None:
        """Test that a successful login can clear the counter."""
        for _ in range(3):
            await throttle.hit("login:yamada")

        await throttle.reset("login:yamada")
        decision = await throttle.hit("login:yamada")

        assert decision.allowed is True
        assert decision.remaining == 2


class TestSweep:
    """Tests for sweep."""

    @pytest.mark.asyncio
    async def test_drops_idle_keys(self, throttle: LoginThrottle, clock: FakeClock) -> None:
        await throttle.hit("login:yamada")
        clock.now += 30
        await throttle.hit("login:suzuki")
        clock.now += 40

        dropped = await throttle.sweep()

        assert dropped == 1
        assert throttle.tracked_keys == 1


class TestGetLoginThrottle:
    """Tests for the process-wide throttle."""

    def test_uses_settings(self) -> None:
        throttle = get_login_throttle()

        assert throttle is get_login_throttle()
        assert throttle.policy.max_attempts == 10
        assert throttle.policy.window_seconds == 300
