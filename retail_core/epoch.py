"""Epoch schedule arithmetic.

Epoch boundaries lie on a fixed grid ``start + k * duration``. There is no
scheduler: the first call that observes a due boundary moves it forward to the
first grid point strictly after ``now``, however many epochs were missed.
"""

from retail_core.constants import MAX_EPOCH_DURATION, MIN_EPOCH_DURATION


def is_valid_epoch_duration(duration: int) -> bool:
    return MIN_EPOCH_DURATION <= duration <= MAX_EPOCH_DURATION


def is_epoch_due(boundary: int, duration: int, now: int) -> bool:
    """True when `now` has reached `boundary` and a rollover must happen."""
    return duration > 0 and now >= boundary


def epochs_elapsed(boundary: int, duration: int, now: int) -> int:
    """Number of whole epochs missed past `boundary` (0 if not due)."""
    if not is_epoch_due(boundary, duration, now):
        return 0
    return (now - boundary) // duration


def next_epoch_boundary(boundary: int, duration: int, now: int) -> int:
    """The boundary to store after observing `now`.

    Unchanged if not due; otherwise advanced by whole durations so the result
    is greater than `now` and stays on the original grid.
    """
    if not is_epoch_due(boundary, duration, now):
        return boundary
    return boundary + (epochs_elapsed(boundary, duration, now) + 1) * duration
