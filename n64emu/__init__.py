"""Nintendo 64 emulator components: RSP vector unit, TLB, save memory, video timing and input."""

__version__ = "0.1.0"