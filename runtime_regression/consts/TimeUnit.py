from enum import Enum


class TimeUnit(Enum):
    NANOSECONDS = "ns/op"
    MICROSECONDS = "us/op"
    MILLISECONDS = "ms/op"
    SECONDS = "s/op"

    def to_milliseconds(self, value: float) -> float:
        return value * _TO_MS[self]


_TO_MS = {
    TimeUnit.NANOSECONDS: 1e-6,
    TimeUnit.MICROSECONDS: 1e-3,
    TimeUnit.MILLISECONDS: 1.0,
    TimeUnit.SECONDS: 1e3,
}
