"""Phase progression derived from the found-stop set."""

from stop_recall.progression.engine import (
    LineStopsProvider,
    compute_active_categories,
    compute_active_networks,
    compute_current_phase,
    compute_progress,
)
from stop_recall.progression.models import PhaseProgress, ProgressReport
from stop_recall.progression.phases import (
    Phase,
    PhaseConfig,
    ProgressionVariant,
    get_phase_config,
    get_phase_table,
)

__all__ = [
    # Engine
    "compute_current_phase",
    "compute_active_networks",
    "compute_active_categories",
    "compute_progress",
    "LineStopsProvider",
    # Phases
    "Phase",
    "PhaseConfig",
    "ProgressionVariant",
    "get_phase_config",
    "get_phase_table",
    # Models
    "PhaseProgress",
    "ProgressReport",
]
