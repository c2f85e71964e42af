"""Running totals of package detection results across a report."""

from __future__ import annotations

from dataclasses import dataclass, field

from geigerlens.format import CrateDetectionStatus
from geigerlens.report import CounterBlock


@dataclass
class TotalPackageCounts:
    """Number of packages per detection status, and summed counters."""

    none_detected_forbids_unsafe: int = 0
    none_detected_allows_unsafe: int = 0
    unsafe_detected: int = 0
    total_counter_block: CounterBlock = field(default_factory=CounterBlock)
    total_unused_counter_block: CounterBlock = field(default_factory=CounterBlock)

    def get_total_detection_status(self) -> CrateDetectionStatus:
        """Overall status: any unsafe wins, then all-forbidding, else allowing."""
        if self.unsafe_detected > 0:
            return CrateDetectionStatus.UNSAFE_DETECTED
        if self.none_detected_forbids_unsafe > 0 and self.none_detected_allows_unsafe <= 0:
            return CrateDetectionStatus.NONE_DETECTED_FORBIDS_UNSAFE
        return CrateDetectionStatus.NONE_DETECTED_ALLOWS_UNSAFE