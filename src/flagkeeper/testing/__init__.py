"""Testing utilities – fakes for flagkeeper's ports."""
from flagkeeper.testing.fakes import FakeClock, FlakyKeyValueStore, FrozenClock, StepClock

__all__ = ["FakeClock", "FlakyKeyValueStore", "FrozenClock", "StepClock"]
