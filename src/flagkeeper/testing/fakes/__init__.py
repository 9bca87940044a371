"""Testing fakes – deterministic clocks and a fault-injecting store."""
from flagkeeper.kernel.time import FrozenClock
from flagkeeper.testing.fakes.clock import FakeClock, StepClock
from flagkeeper.testing.fakes.store import FlakyKeyValueStore

__all__ = ["FakeClock", "FlakyKeyValueStore", "FrozenClock", "StepClock"]
