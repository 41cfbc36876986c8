"""Translation lookaside buffer of the main CPU and its page lookup tables."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, auto

ENTRY_COUNT = 32
PAGE_SIZE = 0x1000
PROBE_FAILURE = 0x80000000


class AccessType(Enum):
    """Kind of memory access being translated."""

    READ = auto()
    WRITE = auto()


class TlbMiss(Exception):
    """No valid mapping exists for a virtual address."""

    def __init__(self, address: int, access_type: AccessType) -> None:
        super().__init__(f"TLB miss on {access_type.name.lower()} at {address:#010x}")
        self.address = address
        self.access_type = access_type


@dataclass
class TlbLut:
    """Lookup-table slot for one 4 KiB virtual page."""

    address: int = 0
    cached: bool = False


@dataclass
class TlbEntry:
    """One TLB entry mapping an even and an odd page."""

    mask: int = 0
    vpn2: int = 0
    region: int = 0
    g: int = 0
    asid: int = 0
    pfn_even: int = 0
    c_even: int = 0
    d_even: int = 0
    v_even: int = 0
    pfn_odd: int = 0
    c_odd: int = 0
    d_odd: int = 0
    v_odd: int = 0
    start_even: int = 0
    end_even: int = 0
    phys_even: int = 0
    start_odd: int = 0
    end_odd: int = 0
    phys_odd: int = 0

    def halves(self) -> Iterator[tuple[int, int, int, int, int, int]]:
        """Yield (valid, dirty, start, end, physical, cache mode) for both pages."""
        yield self.v_even, self.d_even, self.start_even, self.end_even, self.phys_even, self.c_even
        yield self.v_odd, self.d_odd, self.start_odd, self.end_odd, self.phys_odd, self.c_odd


@dataclass
class Cop0Registers:
    """The coprocessor 0 registers that TLB instructions read and write."""

    index: int = 0
    entryhi: int = 0
    entrylo0: int = 0
    entrylo1: int = 0
    pagemask: int = 0


def _entrylo(pfn: int, c: int, d: int, v: int, g: int) -> int:
    return (pfn << 6) | (c << 3) | (d << 2) | (v << 1) | g


@dataclass
class Tlb:
    """TLB entries plus read and write page tables derived from them."""

    regs: Cop0Registers = field(default_factory=Cop0Registers)
    entries: list[TlbEntry] = field(
        default_factory=lambda: [TlbEntry() for _ in range(ENTRY_COUNT)]
    )
    lut_r: dict[int, TlbLut] = field(default_factory=dict)
    lut_w: dict[int, TlbLut] = field(default_factory=dict)

    def read(self, index: int) -> None:
        """Load entry ``index`` into the COP0 registers; out-of-range indices are ignored."""
        if index >= ENTRY_COUNT:
            return
        e = self.entries[index]
        self.regs.pagemask = e.mask << 13
        self.regs.entryhi = (e.region << 62) | (e.vpn2 << 13) | e.asid
        self.regs.entrylo0 = _entrylo(e.pfn_even, e.c_even, e.d_even, e.v_even, e.g)
        self.regs.entrylo1 = _entrylo(e.pfn_odd, e.c_odd, e.d_odd, e.v_odd, e.g)

    def write(self, index: int) -> None:
        """Store the COP0 registers into entry ``index`` and remap its pages."""
        if index >= ENTRY_COUNT:
            return
        self.unmap(index)
        lo0, lo1, hi = self.regs.entrylo0, self.regs.entrylo1, self.regs.entryhi
        e = self.entries[index]
        e.g = lo0 & lo1 & 1
        e.pfn_even = (lo0 >> 6) & 0xFFFFF
        e.pfn_odd = (lo1 >> 6) & 0xFFFFF
        e.c_even = (lo0 >> 3) & 7
        e.c_odd = (lo1 >> 3) & 7
        e.d_even = (lo0 >> 2) & 1
        e.d_odd = (lo1 >> 2) & 1
        e.v_even = (lo0 >> 1) & 1
        e.v_odd = (lo1 >> 1) & 1
        e.asid = hi & 0xFF
        mask = (self.regs.pagemask >> 13) & 0xFFF
        mask &= 0b101010101010
        mask |= mask >> 1
        e.mask = mask
        e.vpn2 = ((hi >> 13) & 0x7FFFFFF) & ~mask
        e.region = (hi >> 62) & 0xFF

        e.start_even = (e.vpn2 << 13) & 0xFFFFFFFF
        e.end_even = e.start_even + (mask << 12) + 0xFFF
        e.phys_even = e.pfn_even << 12
        e.start_odd = e.end_even + 1
        e.end_odd = e.start_odd + (mask << 12) + 0xFFF
        e.phys_odd = e.pfn_odd << 12

        self.map(index)

    def probe(self) -> None:
        """Set the index register to the entry matching ENTRYHI, or flag a failure."""
        hi = self.regs.entryhi
        self.regs.index = PROBE_FAILURE
        vpn2 = (hi >> 13) & 0x7FFFFFF
        region = (hi >> 62) & 0xFF
        asid = hi & 0xFF
        for position, e in enumerate(self.entries):
            if e.vpn2 & ~e.mask != vpn2 & ~e.mask:
                continue
            if e.region != region:
                continue
            if e.g == 0 and e.asid != asid:
                continue
            self.regs.index = position
            break

    def unmap(self, index: int) -> None:
        """Remove the pages of entry ``index`` from the lookup tables."""
        for valid, dirty, start, end, _phys, _cache in self.entries[index].halves():
            if not valid:
                continue
            for address in range(start, end, PAGE_SIZE):
                self.lut_r.pop(address >> 12, None)
            if dirty:
                for address in range(start, end, PAGE_SIZE):
                    self.lut_w.pop(address >> 12, None)

    def map(self, index: int) -> None:
        """Enter the pages of entry ``index`` into the lookup tables."""
        for valid, dirty, start, end, phys, cache in self.entries[index].halves():
            if not valid or start >= end:
                continue
            if start >= 0x80000000 and end < 0xC0000000:
                continue
            if phys >= 0x20000000:
                continue
            tables = [self.lut_r, self.lut_w] if dirty else [self.lut_r]
            for table in tables:
                for address in range(start, end, PAGE_SIZE):
                    table[address >> 12] = TlbLut(
                        address=0x80000000 | (phys + (address - start) + 0xFFF),
                        cached=cache != 2,
                    )

    def physical_address(self, address: int, access_type: AccessType) -> tuple[int, bool]:
        """Translate a virtual address; return (physical address, cached) or raise TlbMiss."""
        address &= 0xFFFFFFFF
        table = self.lut_w if access_type is AccessType.WRITE else self.lut_r
        slot = table.get(address >> 12)
        if slot is None or slot.address == 0:
            raise TlbMiss(address, access_type)
        return (slot.address & 0x1FFFF000) | (address & 0xFFF), slot.cached