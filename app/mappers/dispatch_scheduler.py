"""Dispatch delays used to spread a batch's upstream calls over time."""

DETAIL_IMMEDIATE_COUNT = 3
DETAIL_STAGGER_MS = 1000
CONTENT_STAGGER_MS = 300


def detail_delay_ms(
    batch_size: int,
    index: int,
    immediate_count: int = DETAIL_IMMEDIATE_COUNT,
    stagger_ms: int = DETAIL_STAGGER_MS,
) -> int:
    """Delay before the detail fetch of the hotel at ``index``.

    A single-hotel batch starts right away. Otherwise the first
    ``immediate_count`` hotels start immediately and every later hotel waits
    one more ``stagger_ms`` step than the previous one, starting from zero.
    """
    if batch_size <= 1 or index < immediate_count:
        return 0
    return (index - immediate_count) * stagger_ms


def content_delay_ms(index: int, stagger_ms: int = CONTENT_STAGGER_MS) -> int:
    """Delay before the content generation of the hotel at ``index``."""
    return index * stagger_ms
