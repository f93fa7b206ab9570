"""Threshold matching of fresh quotes against subscribers."""
from collections.abc import Mapping, Sequence

from stockdrop_monitor.schemas import CandidateAlert, Quote, Subscriber


def is_breach(change_percent: float, threshold: float) -> bool:
    """True if the change is a decline at or beyond the threshold magnitude."""
    return change_percent <= -abs(threshold)


def match_alerts(
    groups: Mapping[str, Sequence[Subscriber]],
    quotes: Mapping[str, Quote],
) -> list[CandidateAlert]:
    """Candidate alerts for every subscriber whose threshold the quote breaches.

    Pure: quota is not consulted, symbols without a quote are skipped, and
    output order follows the group order.
    """
    candidates: list[CandidateAlert] = []
    for symbol, subscribers in groups.items():
        quote = quotes.get(symbol)
        if quote is None:
            continue
        for sub in subscribers:
            if is_breach(quote.change_percent, sub.threshold):
                candidates.append(
                    CandidateAlert(
                        user_id=sub.user_id,
                        symbol=symbol,
                        threshold=sub.threshold,
                        quote=quote,
                    )
                )
    return candidates
