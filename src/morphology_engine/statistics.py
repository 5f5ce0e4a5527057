"""Read-only rollups over the derivation index."""

from __future__ import annotations

from morphology_engine.index import DerivationIndex, LexiconSnapshot
from morphology_engine.models import RootFrequency, StatisticsModel


def compute_statistics(
    snapshot: LexiconSnapshot,
    index: DerivationIndex,
    *,
    top_n: int = 10,
) -> StatisticsModel:
    """Counts, totals and the *top_n* roots by summed derivative frequency.

    Ties in frequency keep the roots' lexicographic order.
    """
    per_root: list[RootFrequency] = []
    total_derivatives = 0
    total_frequency = 0

    for root in snapshot.roots:
        derivatives = index.derivatives(snapshot, root)
        frequency = sum(d.frequency for d in derivatives)
        total_derivatives += len(derivatives)
        total_frequency += frequency
        per_root.append(RootFrequency(root, frequency, len(derivatives)))

    total_roots = len(snapshot.roots)
    avg = total_derivatives / total_roots if total_roots else 0.0

    # snapshot.roots is sorted and sort() is stable
    per_root.sort(key=lambda r: r.total_frequency, reverse=True)

    return StatisticsModel(
        total_roots=total_roots,
        total_patterns=len(snapshot.patterns),
        total_derivatives=total_derivatives,
        total_frequency=total_frequency,
        avg_derivatives=avg,
        top_roots=tuple(per_root[:max(top_n, 0)]),
    )
