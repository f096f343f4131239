"""
Seeded pseudo-randomness.

Every simulated outcome derives from a seed string rather than a global RNG,
so replaying an action with the same seed reproduces its result exactly.
The hash walks UTF-16 code units with 32-bit wraparound and the draw is the
fractional part of |sin(hash)|; Gaussians use the Box-Muller transform.
"""

import math
import sys

_INT32 = 0xFFFFFFFF


def _hash32(text: str) -> int:
    """Signed 32-bit rolling hash of a string's UTF-16 code units."""
    data = text.encode("utf-16-le")
    value = 0
    for i in range(0, len(data), 2):
        code = data[i] | (data[i + 1] << 8)
        value = ((value << 5) - value + code) & _INT32
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def seeded_random(seed: str) -> float:
    """Deterministic draw in [0, 1) for a seed string."""
    return abs(math.sin(_hash32(seed))) % 1


def seeded_gaussian(seed: str, mean: float, std_dev: float) -> float:
    """Deterministic normal draw using Box-Muller over two derived seeds."""
    u1 = seeded_random(seed + "-u1")
    u2 = seeded_random(seed + "-u2")
    if u1 <= 0:
        u1 = sys.float_info.min
    z0 = math.sqrt(-2 * math.log(u1)) * math.cos(2 * math.pi * u2)
    return mean + z0 * std_dev


def simple_hash(text: str) -> int:
    """Absolute value of the 32-bit string hash."""
    return abs(_hash32(text))


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves toward +infinity, unlike Python's banker's rounding."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
