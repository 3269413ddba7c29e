"""Stateless progression: the phase is always derived from the found set."""

import logging
from collections.abc import Iterable, Sequence
from typing import Protocol

from stop_recall.models.transit import Line, LineCategory, Network, Stop, StopId
from stop_recall.progression.models import PhaseProgress, ProgressReport
from stop_recall.progression.phases import (
    Phase,
    PhaseConfig,
    ProgressionVariant,
    get_phase_config,
    get_phase_table,
)

logger = logging.getLogger(__name__)

DEFAULT_VARIANT = ProgressionVariant.THREE_PHASE


class LineStopsProvider(Protocol):
    """The one provider query the progression engine needs."""

    def get_stops_for_line(self, line_ref: str) -> Sequence[Stop]: ...


def _in_scope(line: Line, config: PhaseConfig) -> bool:
    if config.categories is None:
        return line.network in config.networks
    return line.category in config.categories


def _describe_scope(config: PhaseConfig) -> str:
    values = config.networks if config.categories is None else config.categories
    return ", ".join(sorted(v.value for v in values))


def _stop_universe(
    config: PhaseConfig,
    all_lines: Sequence[Line],
    provider: LineStopsProvider,
) -> set[StopId]:
    """Union of stop ids over every line in the phase's scope."""
    universe: set[StopId] = set()
    for line in all_lines:
        if _in_scope(line, config):
            universe.update(stop.id for stop in provider.get_stops_for_line(line.ref))
    return universe


def _report(
    config: PhaseConfig, variant: ProgressionVariant, phases: list[PhaseProgress]
) -> ProgressReport:
    return ProgressReport(
        variant=variant,
        phase=config.phase,
        networks=config.networks,
        categories=config.categories,
        phases=phases,
    )


def compute_progress(
    found_stop_ids: Iterable[StopId] | None,
    all_lines: Sequence[Line],
    provider: LineStopsProvider,
    variant: ProgressionVariant = DEFAULT_VARIANT,
) -> ProgressReport:
    """Walk the variant's phases and stop at the first threshold not reached.

    For each non-terminal phase, progress is the share of stops found among
    the lines in that phase's scope. An empty universe (e.g. a dataset
    without tram lines) unlocks everything rather than locking the player out.

    Args:
        found_stop_ids: Stops the player has found, None meaning none yet
        all_lines: Every line of the dataset
        provider: Source of per-line stop lists
        variant: Phase table to apply

    Returns:
        ProgressReport for the current phase
    """
    found = set(found_stop_ids or ())
    table = get_phase_table(variant)
    terminal = table[-1]
    evaluated: list[PhaseProgress] = []

    for config in table:
        if config.is_terminal or config.threshold is None:
            return _report(config, variant, evaluated)

        universe = _stop_universe(config, all_lines, provider)
        if not universe:
            logger.warning(
                f"No stops in {_describe_scope(config)} lines, unlocking {terminal.phase.value}"
            )
            return _report(terminal, variant, evaluated)

        found_count = len(found & universe)
        ratio = found_count / len(universe)
        reached = ratio >= config.threshold
        evaluated.append(
            PhaseProgress(
                phase=config.phase,
                found=found_count,
                total=len(universe),
                ratio=ratio,
                threshold=config.threshold,
                reached=reached,
            )
        )
        if not reached:
            return _report(config, variant, evaluated)

    return _report(terminal, variant, evaluated)


def compute_current_phase(
    found_stop_ids: Iterable[StopId] | None,
    all_lines: Sequence[Line],
    provider: LineStopsProvider,
    variant: ProgressionVariant = DEFAULT_VARIANT,
) -> Phase:
    """Current phase for a found set."""
    return compute_progress(found_stop_ids, all_lines, provider, variant).phase


def compute_active_networks(
    found_stop_ids: Iterable[StopId] | None,
    all_lines: Sequence[Line],
    provider: LineStopsProvider,
    variant: ProgressionVariant = DEFAULT_VARIANT,
) -> frozenset[Network]:
    """Networks unlocked for a found set."""
    phase = compute_current_phase(found_stop_ids, all_lines, provider, variant)
    return get_phase_config(phase, variant).networks


def compute_active_categories(
    found_stop_ids: Iterable[StopId] | None,
    all_lines: Sequence[Line],
    provider: LineStopsProvider,
    variant: ProgressionVariant = DEFAULT_VARIANT,
) -> frozenset[LineCategory] | None:
    """Line categories unlocked for a found set, None for a network-only variant."""
    phase = compute_current_phase(found_stop_ids, all_lines, provider, variant)
    return get_phase_config(phase, variant).categories
