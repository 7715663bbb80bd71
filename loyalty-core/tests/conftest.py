import pytest

from loyalty_core.clock import Clock


class FakeClock(Clock):
    """Clock that only moves when told to; sleeping advances it instantly."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start
        self.sleeps = []

    def now_ms(self) -> float:
        return self.now

    async def sleep_ms(self, ms: float) -> None:
        self.sleeps.append(ms)
        self.now += ms

    def advance(self, ms: float):
        self.now += ms


class ProviderFailure(Exception):
    """Error shaped like a wallet-provider API failure."""

    def __init__(self, status: int, message: str = "Provider error"):
        super().__init__(message)
        self.status = status
        self.message = message


class Operation:
    """Callable that replays a script of results and exceptions."""

    def __init__(self, *outcomes, default=None):
        self.outcomes = list(outcomes)
        self.default = default
        self.calls = 0
        self.__name__ = "scripted_operation"

    async def __call__(self, *args, **kwargs):
        self.calls += 1
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def clock():
    return FakeClock()
