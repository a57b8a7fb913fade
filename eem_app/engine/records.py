from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

import numpy as np

RawRecord = Mapping[str, Any]


@dataclass(frozen=True)
class ResolvedSchema:
    ex_column: str
    em_column: str
    measurement_columns: Tuple[str, ...]


@dataclass(frozen=True)
class ReducedRow:
    ex: float
    em: float
    max_f: float

    def as_dict(self) -> Dict[str, float]:
        return {"Ex": self.ex, "Em": self.em, "MaxF": self.max_f}


@dataclass(frozen=True)
class HeatmapGrid:
    x: Tuple[float, ...]            # unique Ex, ascending
    y: Tuple[float, ...]            # unique Em, ascending
    z: np.ndarray                   # shape (len(y), len(x)); 0.0 where unmeasured

    def to_dict(self) -> Dict[str, Any]:
        return {"x": list(self.x), "y": list(self.y), "z": self.z.tolist()}

    @property
    def is_empty(self) -> bool:
        return self.z.size == 0


@dataclass(frozen=True)
class ExMaxPoint:
    ex: float
    max_f: float
    em: float

    def as_dict(self) -> Dict[str, float]:
        return {"Ex": self.ex, "MaxF": self.max_f, "Em": self.em}


@dataclass(frozen=True)
class PeakPoint:
    ex: float
    em: float
    max_f: float

    def as_dict(self) -> Dict[str, float]:
        return {"Ex": self.ex, "Em": self.em, "MaxF": self.max_f}


@dataclass
class ProcessingResult:
    table: List[ReducedRow]
    grid: HeatmapGrid
    curve: List[ExMaxPoint]
    peaks: List[PeakPoint]
    schema: ResolvedSchema
    audit: List[str] = field(default_factory=list)
