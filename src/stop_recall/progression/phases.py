"""Phase tables for the two progression variants."""

from dataclasses import dataclass
from enum import Enum

from stop_recall.models.transit import LineCategory, Network


class Phase(str, Enum):
    """Progression tier gating which stops the player can guess."""

    TRAM = "tram"
    REGULAR_BUS = "regular_bus"
    BUS = "bus"  # terminal phase of the two-phase variant
    COMPLEMENTARY = "complementary"


class ProgressionVariant(str, Enum):
    """Which phase table is active for a deployment."""

    TWO_PHASE = "two_phase"  # tram -> bus
    THREE_PHASE = "three_phase"  # tram -> regular bus -> complementary


@dataclass(frozen=True)
class PhaseConfig:
    """Unlocked scope of a phase and what it takes to leave it.

    threshold is the fraction of stops within this phase's scope that must
    be found to unlock the next phase. The scope is the lines of the phase's
    categories, or of its networks when categories is None (no category
    split). Terminal phases have neither threshold nor unlocks.
    """

    phase: Phase
    networks: frozenset[Network]
    categories: frozenset[LineCategory] | None
    threshold: float | None = None
    unlocks: Phase | None = None

    @property
    def is_terminal(self) -> bool:
        return self.unlocks is None


ALL_NETWORKS = frozenset(Network)
ALL_CATEGORIES = frozenset(LineCategory)

TRAM_THRESHOLD = 0.5
REGULAR_BUS_THRESHOLD = 0.33

THREE_PHASE_TABLE: tuple[PhaseConfig, ...] = (
    PhaseConfig(
        phase=Phase.TRAM,
        networks=frozenset({Network.TRAM}),
        categories=frozenset({LineCategory.TRAM}),
        threshold=TRAM_THRESHOLD,
        unlocks=Phase.REGULAR_BUS,
    ),
    PhaseConfig(
        phase=Phase.REGULAR_BUS,
        networks=ALL_NETWORKS,
        categories=frozenset({LineCategory.TRAM, LineCategory.REGULAR}),
        threshold=REGULAR_BUS_THRESHOLD,
        unlocks=Phase.COMPLEMENTARY,
    ),
    PhaseConfig(
        phase=Phase.COMPLEMENTARY,
        networks=ALL_NETWORKS,
        categories=ALL_CATEGORIES,
    ),
)

# Network-based only
TWO_PHASE_TABLE: tuple[PhaseConfig, ...] = (
    PhaseConfig(
        phase=Phase.TRAM,
        networks=frozenset({Network.TRAM}),
        categories=None,
        threshold=TRAM_THRESHOLD,
        unlocks=Phase.BUS,
    ),
    PhaseConfig(
        phase=Phase.BUS,
        networks=ALL_NETWORKS,
        categories=None,
    ),
)

PHASE_TABLES: dict[ProgressionVariant, tuple[PhaseConfig, ...]] = {
    ProgressionVariant.TWO_PHASE: TWO_PHASE_TABLE,
    ProgressionVariant.THREE_PHASE: THREE_PHASE_TABLE,
}


def get_phase_table(variant: ProgressionVariant) -> tuple[PhaseConfig, ...]:
    """Ordered phases of a variant, terminal phase last."""
    return PHASE_TABLES[variant]


def get_phase_config(phase: Phase, variant: ProgressionVariant) -> PhaseConfig:
    """Look up one phase of a variant.

    Raises:
        ValueError: If the phase does not belong to the variant.
    """
    for config in PHASE_TABLES[variant]:
        if config.phase == phase:
            return config
    raise ValueError(f"Phase {phase.value} is not part of the {variant.value} variant")
