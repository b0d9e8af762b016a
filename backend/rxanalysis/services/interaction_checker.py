"""
Drug interaction checker.
Interactions are pairwise-or-more, so fewer than two distinct names is a
caller error, raised before any provider call.
"""

import logging

from rxanalysis.errors import ValidationError
from rxanalysis.services.contract import InteractionReport
from rxanalysis.services.providers.base_provider import ExtractionProvider

logger = logging.getLogger("rxanalysis.interactions")

MIN_MEDICATIONS = 2


def _distinct_names(medications: list) -> list[str]:
    seen = set()
    names = []
    for med in medications:
        if not isinstance(med, str):
            continue
        name = med.strip()
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        names.append(name)
    return names


def check_interactions(provider: ExtractionProvider, medications: list) -> InteractionReport:
    """Return interaction findings for ``medications``, most severe first."""
    names = _distinct_names(medications or [])
    if len(names) < MIN_MEDICATIONS:
        raise ValidationError("At least two medications are required to check interactions")

    report = provider.check_interactions(names)
    logger.info(
        "Interaction check (%s mode) for %d medications: %d finding(s)",
        provider.mode, len(names), len(report.interactions),
    )
    return report.sorted_by_severity()
