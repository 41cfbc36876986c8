"""Video interface timing: refresh rate, current scanline, field and frame pacing."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field

VI_STATUS_REG = 0
VI_CURRENT_REG = 4
VI_V_SYNC_REG = 6
VI_H_SYNC_REG = 7
VI_REGS_COUNT = 14

NTSC_CLOCK = 48681812
PAL_CLOCK = 49656530

_U32 = 0xFFFFFFFF


@dataclass
class FrameLimiter:
    """Paces calls to at most one per ``period`` seconds."""

    period: float
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], None] = time.sleep
    _ready_at: float | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.period <= 0:
            raise ValueError("period must be positive")

    def wait(self) -> float:
        """Block until the next frame is allowed; return the seconds slept."""
        now = self.clock()
        start = now if self._ready_at is None else max(self._ready_at, now)
        delay = start - now
        if delay > 0:
            self.sleep(delay)
        self._ready_at = start + self.period
        return delay


@dataclass
class VideoInterface:
    """Video interface registers and derived timing."""

    regs: list[int] = field(default_factory=lambda: [0] * VI_REGS_COUNT)
    clock: int = 0
    delay: int = 0
    field: int = 0
    count_per_scanline: int = 0
    limiter: FrameLimiter | None = None

    def init_clock(self, pal: bool) -> None:
        """Select the video clock for PAL or NTSC."""
        self.clock = PAL_CLOCK if pal else NTSC_CLOCK

    def set_expected_refresh_rate(self, clock_rate: int) -> float:
        """Derive the frame delay in CPU cycles and the frame limiter; return frames per second."""
        v_sync = self.regs[VI_V_SYNC_REG] + 1
        h_sync = (self.regs[VI_H_SYNC_REG] & 0xFFF) + 1
        refresh_rate = self.clock / v_sync / h_sync * 2.0
        if refresh_rate <= 0:
            raise ValueError("video clock is not set")
        self.delay = int(clock_rate / refresh_rate)
        self.count_per_scanline = self.delay // v_sync
        self.limiter = FrameLimiter(1.0 / refresh_rate)
        return refresh_rate

    def current_line(self, next_vi_count: int | None, count: int) -> int:
        """Update VI_CURRENT from the cycles left until the next vertical interrupt."""
        line = self.regs[VI_CURRENT_REG]
        if next_vi_count is not None:
            elapsed = self.delay - (next_vi_count - count)
            line = (elapsed // self.count_per_scanline) & _U32
            v_sync = self.regs[VI_V_SYNC_REG]
            if line >= v_sync:
                line -= v_sync
        line = (line & ~1 & _U32) | self.field
        self.regs[VI_CURRENT_REG] = line
        return line

    def toggle_field(self) -> int:
        """Flip the field when the status register selects interlaced mode."""
        self.field ^= (self.regs[VI_STATUS_REG] >> 6) & 1
        return self.field