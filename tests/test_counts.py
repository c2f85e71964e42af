import pytest

from geigerlens.counts import TotalPackageCounts
from geigerlens.format import CrateDetectionStatus
from geigerlens.report import CounterBlock


@pytest.mark.parametrize(
    "forbids, allows, unsafe, expected",
    [
        (0, 0, 1, CrateDetectionStatus.UNSAFE_DETECTED),
        (1, 0, 0, CrateDetectionStatus.NONE_DETECTED_FORBIDS_UNSAFE),
        (4, 1, 0, CrateDetectionStatus.NONE_DETECTED_ALLOWS_UNSAFE),
    ],
)
def test_get_total_detection_status(forbids, allows, unsafe, expected):
    counts = TotalPackageCounts(
        none_detected_forbids_unsafe=forbids,
        none_detected_allows_unsafe=allows,
        unsafe_detected=unsafe,
        total_counter_block=CounterBlock(),
        total_unused_counter_block=CounterBlock(),
    )
    assert counts.get_total_detection_status() is expected


def test_unsafe_takes_precedence():
    counts = TotalPackageCounts(
        none_detected_forbids_unsafe=3, none_detected_allows_unsafe=2, unsafe_detected=1
    )
    assert counts.get_total_detection_status() is CrateDetectionStatus.UNSAFE_DETECTED


def test_empty_counts_allow_unsafe():
    counts = TotalPackageCounts()
    assert counts.get_total_detection_status() is CrateDetectionStatus.NONE_DETECTED_ALLOWS_UNSAFE
    assert counts.total_counter_block == CounterBlock()
    assert counts.total_unused_counter_block == CounterBlock()