"""
Payline catalog generation.

Paylines are built mathematically from pattern families instead of being
hardcoded, so any (reels, rows) shape gets a catalog. Families are
concatenated in a fixed order and deduplicated globally, keeping the first
occurrence. Selectable line counts ("tiers") are prefixes of one catalog, so
every 20-line payline is also one of the 40- and 100-line paylines.
"""
import logging
import math
from collections import Counter
from collections.abc import Iterable, Iterator
from enum import Enum

from slot_core.errors import InvalidConfigError, InvalidTierSizeError
from slot_core.logic.models import Payline
from slot_core.logic.rng import ProductionRNG, RNGBase


logger = logging.getLogger(__name__)

# V shapes and zigzags, written for five reels and up to three row indices
V_SHAPE_LIBRARY: tuple[Payline, ...] = (
    (0, 1, 2, 1, 0), (1, 2, 2, 2, 1), (0, 0, 1, 0, 0),
    (1, 1, 2, 1, 1), (0, 1, 1, 1, 0), (2, 1, 0, 1, 2),
    (1, 0, 0, 0, 1), (2, 2, 1, 2, 2), (1, 1, 0, 1, 1),
    (2, 1, 1, 1, 2), (0, 0, 2, 0, 0), (2, 2, 0, 2, 2),
    (0, 1, 2, 2, 0), (2, 1, 0, 0, 2), (1, 0, 1, 0, 1),
)

WAVE_FREQUENCIES = (1, 2, 3, 4)
CYCLE_SHIFTS = 5
FAMILY_LIMIT = 20  # wave and step families keep this many patterns
RANDOM_ATTEMPTS_PER_PATTERN = 10


class PaylineFamily(str, Enum):
    """Pattern family a catalog entry came from."""
    HORIZONTAL = "horizontal"
    DIAGONAL = "diagonal"
    V_SHAPE = "v_shape"
    WAVE = "wave"
    STEP = "step"
    RANDOM = "random"


def _dedup(patterns: Iterable[Payline]) -> list[Payline]:
    seen: set[Payline] = set()
    unique: list[Payline] = []
    for pattern in patterns:
        if pattern not in seen:
            seen.add(pattern)
            unique.append(pattern)
    return unique


class PaylineCatalog:
    """Ordered, deduplicated, immutable payline list for one grid shape."""

    def __init__(self, reels: int, rows: int, entries: list[tuple[Payline, PaylineFamily]]):
        self.reels = reels
        self.rows = rows
        self.lines: tuple[Payline, ...] = tuple(line for line, _ in entries)
        self._families: dict[Payline, PaylineFamily] = dict(entries)
        if len(self._families) != len(self.lines):
            raise InvalidConfigError("Payline catalog contains duplicate entries")

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[Payline]:
        return iter(self.lines)

    def __getitem__(self, index: int) -> Payline:
        return self.lines[index]

    def tier(self, size: int) -> tuple[Payline, ...]:
        """
        First `size` paylines of the catalog.

        Raises INVALID_TIER_SIZE when size is not in [1, len(catalog)];
        no selectable tier is empty.
        """
        if size < 1 or size > len(self.lines):
            raise InvalidTierSizeError(
                f"Tier of {size} lines requested, catalog for "
                f"{self.reels}x{self.rows} has {len(self.lines)}"
            )
        return self.lines[:size]

    def tiers(self, sizes: Iterable[int]) -> dict[int, tuple[Payline, ...]]:
        return {size: self.tier(size) for size in sizes}

    def family_of(self, payline: Payline) -> PaylineFamily:
        return self._families[tuple(payline)]

    def count_by_family(self) -> dict[PaylineFamily, int]:
        return dict(Counter(self._families.values()))


class PaylineGenerator:
    """
    Builds the payline catalog for a (reels, rows) grid.

    The random family uses the injected RNG, so a seeded RNG gives a
    reproducible catalog. target_size raises the random family's request so
    the catalog can cover the largest selectable tier.
    """

    def __init__(
        self,
        reels: int = 5,
        rows: int = 3,
        rng: RNGBase | None = None,
        random_count: int = 40,
        target_size: int = 0,
    ):
        if reels < 1 or rows < 1:
            raise InvalidConfigError(f"Invalid grid shape {reels}x{rows}")
        self.reels = reels
        self.rows = rows
        self.rng = rng or ProductionRNG()
        self.random_count = random_count
        self.target_size = target_size
        self._catalog: PaylineCatalog | None = None

    def generate_horizontal(self) -> list[Payline]:
        """Straight lines, (0,0,0,0,0) is the top row."""
        return [(row,) * self.reels for row in range(self.rows)]

    def generate_diagonals(self) -> list[Payline]:
        """Descending (top left to bottom right) then ascending."""
        span = self.reels - 1
        desc: list[int] = []
        asc: list[int] = []
        for i in range(self.reels):
            step = math.floor((i / span if span else 0.0) * (self.rows - 1))
            desc.append(min(step, self.rows - 1))
            asc.append(max(self.rows - 1 - step, 0))
        return [tuple(desc), tuple(asc)]

    def generate_v_shapes(self) -> list[Payline]:
        """Library patterns that fit this grid; the rest are dropped."""
        return [
            pattern
            for pattern in V_SHAPE_LIBRARY
            if len(pattern) == self.reels and all(0 <= row < self.rows for row in pattern)
        ]

    def generate_wave_patterns(self) -> list[Payline]:
        """Sine waves of frequency 1..4, shifted by every row offset."""
        span = max(self.reels - 1, 1)
        lines: list[Payline] = []
        for freq in WAVE_FREQUENCIES:
            for offset in range(self.rows):
                pattern = []
                for i in range(self.reels):
                    wave = math.sin((i * freq * math.pi) / span)
                    row = math.floor(((wave + 1) / 2) * (self.rows - 1))
                    pattern.append((row + offset) % self.rows)
                lines.append(tuple(pattern))
        return _dedup(lines)[:FAMILY_LIMIT]

    def generate_step_patterns(self) -> list[Payline]:
        """
        Staircases from every start row in both directions, plus cyclic shifts.

        Out-of-range rows bounce back to 1 / rows-2 rather than to the edge.
        """
        lines: list[Payline] = []
        for start_row in range(self.rows):
            for step in (-1, 1):
                pattern = []
                current = start_row
                for _ in range(self.reels):
                    pattern.append(current)
                    current += step
                    if current < 0:
                        current = 1
                    if current >= self.rows:
                        current = self.rows - 2
                    # single-row grids have nowhere to bounce to
                    current = min(max(current, 0), self.rows - 1)
                lines.append(tuple(pattern))

        for shift in range(CYCLE_SHIFTS):
            lines.append(tuple((j + shift) % self.rows for j in range(self.reels)))

        return _dedup(lines)[:FAMILY_LIMIT]

    def _random_walk(self) -> Payline:
        pattern = []
        prev_row = self.rng.randint(0, self.rows - 1)
        for _ in range(self.reels):
            new_row = prev_row + self.rng.randint(-1, 1)
            new_row = max(0, min(self.rows - 1, new_row))
            pattern.append(new_row)
            prev_row = new_row
        return tuple(pattern)

    def generate_random_patterns(
        self, count: int, existing: set[Payline] | None = None
    ) -> list[Payline]:
        """
        Random-walk patterns not already in `existing`.

        Gives up after 10 * count walks, so fewer than count may come back.
        """
        seen = set(existing or ())
        lines: list[Payline] = []
        attempts = 0
        max_attempts = count * RANDOM_ATTEMPTS_PER_PATTERN
        while len(lines) < count and attempts < max_attempts:
            pattern = self._random_walk()
            if pattern not in seen:
                seen.add(pattern)
                lines.append(pattern)
            attempts += 1

        if len(lines) < count:
            logger.debug(
                "Random paylines: %d of %d after %d attempts (%dx%d)",
                len(lines), count, attempts, self.reels, self.rows,
            )
        return lines

    def generate_all(self) -> PaylineCatalog:
        """Build the catalog once; later calls return the same object."""
        if self._catalog is not None:
            return self._catalog

        entries: list[tuple[Payline, PaylineFamily]] = []
        seen: set[Payline] = set()

        def extend(patterns: list[Payline], family: PaylineFamily) -> None:
            for pattern in patterns:
                if pattern not in seen:
                    seen.add(pattern)
                    entries.append((pattern, family))

        extend(self.generate_horizontal(), PaylineFamily.HORIZONTAL)
        extend(self.generate_diagonals(), PaylineFamily.DIAGONAL)
        extend(self.generate_v_shapes(), PaylineFamily.V_SHAPE)
        extend(self.generate_wave_patterns(), PaylineFamily.WAVE)
        extend(self.generate_step_patterns(), PaylineFamily.STEP)

        random_count = max(self.random_count, self.target_size - len(entries))
        extend(self.generate_random_patterns(random_count, seen), PaylineFamily.RANDOM)

        self._catalog = PaylineCatalog(self.reels, self.rows, entries)
        logger.debug(
            "Payline catalog %dx%d: %d lines %s",
            self.reels, self.rows, len(self._catalog),
            {family.value: n for family, n in self._catalog.count_by_family().items()},
        )
        return self._catalog

    def get_tier(self, size: int) -> tuple[Payline, ...]:
        return self.generate_all().tier(size)
