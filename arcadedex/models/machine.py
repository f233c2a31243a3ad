"""Machine record and its value types.

A Machine is the reconciled view of one MAME machine. Every reader produces
partial Machines holding only the fields its data file knows about; partial
records for the same name are folded together with ``combine``.
"""

from dataclasses import dataclass, field, fields
from typing import List, Optional


@dataclass
class BiosSet:
    """Represents a selectable BIOS set."""
    name: str
    description: str = ""


@dataclass
class Rom:
    """Represents a ROM dump required by a machine."""
    name: str
    size: int = 0
    merge: Optional[str] = None
    status: Optional[str] = None
    crc: Optional[str] = None
    sha1: Optional[str] = None


@dataclass
class DeviceRef:
    """Reference to a device used by a machine."""
    name: str


@dataclass
class Software:
    """Software list supported by a machine."""
    name: str


@dataclass
class Sample:
    """Audio sample used by a machine."""
    name: str


@dataclass
class Disk:
    """Represents a CHD disk requirement."""
    name: str
    sha1: Optional[str] = None
    merge: Optional[str] = None
    status: Optional[str] = None
    region: Optional[str] = None


@dataclass
class HistorySection:
    """One named block of a history entry (description, trivia, ...)."""
    name: str
    text: str
    order: int


@dataclass
class Resource:
    """Media resource (flyer, snapshot, manual, ...) published for a machine."""
    type: str
    name: str
    size: int = 0
    crc: str = ""
    sha1: str = ""


@dataclass
class ExtendedData:
    """Normalized and derived fields not present verbatim in any data file."""
    name: Optional[str] = None
    manufacturer: Optional[str] = None
    players: Optional[str] = None
    is_parent: Optional[bool] = None
    year: Optional[str] = None

    def combine(self, other: "ExtendedData") -> "ExtendedData":
        """Merge field by field, keeping our value wherever it is set.

        Args:
            other: Extended data contributed by another source

        Returns:
            New ExtendedData instance
        """
        return ExtendedData(**{
            f.name: _first_set(getattr(self, f.name), getattr(other, f.name))
            for f in fields(self)
        })


# Fields merged by concatenation; every other field except name and
# extended_data is a nullable scalar.
LIST_FIELDS = (
    "bios_sets",
    "roms",
    "device_refs",
    "software_list",
    "samples",
    "disks",
    "languages",
    "history_sections",
    "resources",
)


@dataclass
class Machine:
    """Represents a MAME machine assembled from one or more data files."""
    name: str  # shortname
    source_file: Optional[str] = None
    rom_of: Optional[str] = None
    clone_of: Optional[str] = None
    is_bios: Optional[bool] = None
    is_device: Optional[bool] = None
    runnable: Optional[bool] = None
    is_mechanical: Optional[bool] = None
    sample_of: Optional[str] = None
    description: Optional[str] = None
    year: Optional[str] = None
    manufacturer: Optional[str] = None
    driver_status: Optional[str] = None
    players: Optional[str] = None
    series: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    is_mature: Optional[bool] = None
    bios_sets: List[BiosSet] = field(default_factory=list)
    roms: List[Rom] = field(default_factory=list)
    device_refs: List[DeviceRef] = field(default_factory=list)
    software_list: List[Software] = field(default_factory=list)
    samples: List[Sample] = field(default_factory=list)
    disks: List[Disk] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)
    history_sections: List[HistorySection] = field(default_factory=list)
    resources: List[Resource] = field(default_factory=list)
    extended_data: Optional[ExtendedData] = field(default_factory=ExtendedData)

    def is_clone(self) -> bool:
        """Check if this machine depends on a parent set."""
        return self.clone_of is not None or self.rom_of is not None

    def is_game(self) -> bool:
        """Check if this machine is a playable game."""
        return (
            not self.is_bios and
            not self.is_device and
            self.runnable is not False
        )

    def combine(self, other: "Machine") -> "Machine":
        """Reconcile this record with a partial record for the same machine.

        Scalars keep this record's value when it is set and take the other
        record's value otherwise. Lists are concatenated, ours first, without
        deduplication. Extended data follows the scalar rule field by field.
        When both records set the same scalar the first writer wins silently.

        Args:
            other: Record contributed by another source

        Returns:
            New Machine; neither input is modified
        """
        values = {}
        for f in fields(self):
            ours = getattr(self, f.name)
            theirs = getattr(other, f.name)

            if f.name == "name":
                values["name"] = ours or theirs
            elif f.name == "extended_data":
                if ours is None:
                    values["extended_data"] = _copy_extended(theirs)
                elif theirs is None:
                    values["extended_data"] = _copy_extended(ours)
                else:
                    values["extended_data"] = ours.combine(theirs)
            elif f.name in LIST_FIELDS:
                values[f.name] = list(ours) + list(theirs)
            else:
                values[f.name] = _first_set(ours, theirs)

        return Machine(**values)


def combine(existing: Machine, incoming: Machine) -> Machine:
    """Reconcile two partial records; see ``Machine.combine``."""
    return existing.combine(incoming)


def _first_set(ours, theirs):
    return ours if ours is not None else theirs


def _copy_extended(data: Optional[ExtendedData]) -> ExtendedData:
    if data is None:
        return ExtendedData()
    return ExtendedData(**{f.name: getattr(data, f.name) for f in fields(data)})
