from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class CatalogRecord:
    id: str
    url: str
    name: str = ""             # empty when the catalog has no title yet
    description: str = ""
    has_artifact: bool = False


@dataclass
class CaptureResult:
    artifact: bytes            # JPEG screenshot
    title: str = ""
    meta_description: str = ""


class ItemStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ItemOutcome:
    record_id: str
    status: ItemStatus
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status is ItemStatus.SUCCESS


@dataclass
class RunSummary:
    new: int = 0
    stale: int = 0
    attempted: int = 0
    outcomes: list[ItemOutcome] = field(default_factory=list)

    @property
    def selected(self) -> int:
        return self.new + self.stale

    def _count(self, status: ItemStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def succeeded(self) -> int:
        return self._count(ItemStatus.SUCCESS)

    @property
    def failed(self) -> int:
        return self._count(ItemStatus.FAILURE)

    @property
    def skipped(self) -> int:
        return self._count(ItemStatus.SKIPPED)
