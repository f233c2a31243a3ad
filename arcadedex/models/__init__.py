"""Machine data model."""

from .machine import (
    Machine,
    ExtendedData,
    BiosSet,
    Rom,
    DeviceRef,
    Software,
    Sample,
    Disk,
    HistorySection,
    Resource,
    combine,
)

__all__ = [
    "Machine",
    "ExtendedData",
    "BiosSet",
    "Rom",
    "DeviceRef",
    "Software",
    "Sample",
    "Disk",
    "HistorySection",
    "Resource",
    "combine",
]
