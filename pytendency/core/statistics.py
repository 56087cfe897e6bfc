"""
Diagnostics/statistics channel.

Named numeric records (sample size, means, standard deviations, p-values)
are published through the standard logging module on the
'pytendency.statistics' logger at the custom STATISTICS level, which sits
between DEBUG and INFO. Applications opt in by enabling that level:

    import logging
    from pytendency.core.statistics import STATISTICS

    logging.basicConfig()
    logging.getLogger('pytendency.statistics').setLevel(STATISTICS)

Each record carries the statistic name and value as LogRecord attributes
('statistic', 'value') so handlers can collect them without parsing the
message text.
"""

from __future__ import annotations

import logging
import numbers
from contextlib import contextmanager
from typing import Iterator

STATISTICS = 15
logging.addLevelName(STATISTICS, 'STATISTICS')

STATISTICS_LOGGER_NAME = 'pytendency.statistics'


class StatisticsChannelWarning(UserWarning):
    """Statistics were requested but the statistics channel is disabled."""


def get_statistics_logger() -> logging.Logger:
    """Logger backing the statistics channel."""
    return logging.getLogger(STATISTICS_LOGGER_NAME)


def statistics_enabled(logger: logging.Logger | None = None) -> bool:
    """True if records at the STATISTICS level would be handled."""
    logger = logger or get_statistics_logger()
    return logger.isEnabledFor(STATISTICS)


def emit_statistic(
    name: str,
    value: float | int,
    logger: logging.Logger | None = None,
) -> None:
    """
    Publish one named numeric record.

    Integers are kept as int; everything else is reported as float.
    """
    logger = logger or get_statistics_logger()
    if isinstance(value, numbers.Integral) and not isinstance(value, bool):
        value = int(value)
    else:
        value = float(value)
    logger.log(
        STATISTICS,
        "%s: %s",
        name,
        value,
        extra={'statistic': name, 'value': value},
    )


class StatisticsCollector(logging.Handler):
    """
    Handler that keeps statistics records as an ordered name -> value list.

    Useful for tests and for programs that want the records without
    formatting them:

        collector = StatisticsCollector()
        with collector.attached():
            hopkins(data, 50, repetitions=5, seed=1)
        collector.records  # [('pytendency.hopkins.samplesize', 50), ...]
    """

    def __init__(self, level: int = STATISTICS):
        super().__init__(level)
        self.records: list[tuple[str, float | int]] = []

    def emit(self, record: logging.LogRecord) -> None:
        name = getattr(record, 'statistic', None)
        if name is None:
            return
        self.records.append((name, record.value))

    def as_dict(self) -> dict[str, float | int]:
        return dict(self.records)

    @contextmanager
    def attached(self, logger: logging.Logger | None = None) -> Iterator[StatisticsCollector]:
        """
        Attach this handler for the duration of a with-block.

        Enables the STATISTICS level if needed; the logger level in effect
        on entry is restored on exit.
        """
        logger = logger or get_statistics_logger()
        previous_level = logger.level
        logger.addHandler(self)
        if not logger.isEnabledFor(STATISTICS):
            logger.setLevel(STATISTICS)
        try:
            yield self
        finally:
            logger.removeHandler(self)
            logger.setLevel(previous_level)
