"""Experience, levels and the animal evolution tiers."""

from dataclasses import dataclass

XP_PER_LEVEL = 1000
XP_PER_SESSION = 250


@dataclass(frozen=True)
class Tier:
    """A cosmetic evolution stage unlocked at a given level."""

    level: int
    emoji: str
    name: str
    description: str


LEVEL_TIERS: tuple[Tier, ...] = (
    Tier(1, "🐛", "Caterpillar", "Just starting your journey!"),
    Tier(2, "🐜", "Ant", "Building discipline!"),
    Tier(3, "🐝", "Bee", "Buzzing with productivity!"),
    Tier(4, "🐸", "Frog", "Leaping to new heights!"),
    Tier(5, "🐢", "Turtle", "Steady and persistent!"),
    Tier(6, "🐰", "Rabbit", "Quick and efficient!"),
    Tier(7, "🐺", "Wolf", "Focused and determined!"),
    Tier(8, "🐅", "Tiger", "Powerful and precise!"),
    Tier(9, "🦅", "Eagle", "Soaring above challenges!"),
    Tier(10, "🦖", "T-Rex", "The ultimate focus master!"),
)


def level_for_xp(xp: int) -> int:
    """Return the level reached with *xp* experience (level 1 at 0 xp)."""
    if xp < 0:
        raise ValueError(f"xp must be non-negative, got {xp}")
    return xp // XP_PER_LEVEL + 1


def level_progress(xp: int) -> int:
    """Return the experience earned inside the current level."""
    if xp < 0:
        raise ValueError(f"xp must be non-negative, got {xp}")
    return xp % XP_PER_LEVEL


def tier_index(level: int) -> int:
    return min(max(level - 1, 0), len(LEVEL_TIERS) - 1)


def tier_for_level(level: int) -> Tier:
    """Return the tier shown for *level*; stops advancing past the last entry."""
    return LEVEL_TIERS[tier_index(level)]


def next_tier(level: int) -> Tier | None:
    """Return the tier unlocked at the next level, or None at the end of the table."""
    if level >= len(LEVEL_TIERS):
        return None
    return LEVEL_TIERS[tier_index(level + 1)]


@dataclass(frozen=True)
class LevelUpEvent:
    """Fired once per award that moves the level up.

    An award large enough to cross several boundaries still produces a single
    event; ``levels_gained`` tells the renderer how far it went.
    """

    previous_level: int
    new_level: int
    xp: int

    @property
    def levels_gained(self) -> int:
        return self.new_level - self.previous_level

    @property
    def tier(self) -> Tier:
        return tier_for_level(self.new_level)


@dataclass
class ProgressionState:
    """Accumulated experience. Level and tier are always derived."""

    xp: int = 0

    def __post_init__(self):
        if self.xp < 0:
            raise ValueError(f"xp must be non-negative, got {self.xp}")

    @property
    def level(self) -> int:
        return level_for_xp(self.xp)

    @property
    def level_progress(self) -> int:
        return level_progress(self.xp)

    @property
    def progress_percent(self) -> float:
        return self.level_progress / XP_PER_LEVEL * 100

    @property
    def xp_to_next_level(self) -> int:
        return XP_PER_LEVEL - self.level_progress

    @property
    def tier(self) -> Tier:
        return tier_for_level(self.level)

    @property
    def next_tier(self) -> Tier | None:
        return next_tier(self.level)

    def award(self, amount: int = XP_PER_SESSION) -> LevelUpEvent | None:
        """
        Add *amount* experience.

        Returns a LevelUpEvent when the award crossed a level boundary. The
        comparison uses the amount just awarded, so it stays correct for
        variable award sizes.
        """
        if amount <= 0:
            raise ValueError(f"award amount must be positive, got {amount}")

        self.xp += amount
        before = level_for_xp(self.xp - amount)
        after = level_for_xp(self.xp)
        if after > before:
            return LevelUpEvent(previous_level=before, new_level=after, xp=self.xp)
        return None
