"""Formatting of the counter columns of the report table."""

from __future__ import annotations

import struct

from geigerlens.format import CrateDetectionStatus, OutputFormat
from geigerlens.print_config import StyledText, colorize
from geigerlens.report import Count, CounterBlock

UNSAFE_COUNTERS_HEADER = (
    "Functions ",
    "Expressions ",
    "Impls ",
    "Traits ",
    "Methods ",
    "Dependency",
)

_FIELDS = ("functions", "exprs", "item_impls", "item_traits", "methods")


def _single(value: float) -> float:
    """Round a value to single precision."""
    return struct.unpack("f", struct.pack("f", value))[0]


def _ratio_cell(used: Count, not_used: Count) -> str:
    safe = used.safe + not_used.safe
    total = used.safe + used.unsafe_ + not_used.unsafe_ + not_used.safe
    if total == 0:
        percent = 100.0
    else:
        percent = _single(_single(100.0 * _single(safe)) / _single(total))
    return f"{safe:>5}/{total}={percent:.2f}%"


def _unsafe_cell(used: Count, not_used: Count) -> str:
    return f"{used.unsafe_}/{used.unsafe_ + not_used.unsafe_}"


def _cells(used: CounterBlock, not_used: CounterBlock, cell) -> list:
    return [cell(getattr(used, name), getattr(not_used, name)) for name in _FIELDS]


def table_row(used: CounterBlock, not_used: CounterBlock, output_format: OutputFormat) -> str:
    """Counter columns for one package: safe ratios or unsafe counts."""
    if output_format is OutputFormat.RATIO:
        a, b, c, d, e = _cells(used, not_used, _ratio_cell)
        return f"{a:<12} {b:<18} {c:<18} {d:<12} {e:<12}"
    a, b, c, d, e = _cells(used, not_used, _unsafe_cell)
    return f"{a:<10} {b:<12} {c:<6} {d:<7} {e:<7}"


def table_footer(
    used: CounterBlock,
    not_used: CounterBlock,
    output_format: OutputFormat,
    status: CrateDetectionStatus,
) -> StyledText:
    """Totals line of the table, styled by the overall detection status."""
    return colorize(status, output_format, table_row(used, not_used, output_format))


def table_row_empty() -> str:
    """Blank space as wide as the counter columns and the status symbol."""
    headers_but_last = UNSAFE_COUNTERS_HEADER[:-1]
    width = sum(len(header) for header in headers_but_last) + len(headers_but_last) + 4
    width += 2  # status symbol
    width += 1  # space after the symbol
    return " " * width