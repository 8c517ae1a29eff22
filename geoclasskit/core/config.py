"""Workflow configuration.

Defaults reproduce the reference LULC workflow: 2000 nominal samples
clamped to [7, 1000] per class, seed 42, 70/30 split, patches under 70
cells (counted up to 80) smoothed with a 2-cell square majority window.

min_points / max_points are policy parameters, not constants: raising
min_points over-samples rare classes relative to their prevalence.

Depends on: domain.*.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional

from ..domain.sampling import POLICY_CLAMP


@dataclass(frozen=True)
class WorkflowConfig:
    """Parameters for sampling, splitting, tuning and smoothing."""
    # Allocation
    num_total_points: int = 2000
    min_points: int = 7
    max_points: int = 1000

    # Sampling
    seed: int = 42
    insufficient_policy: str = POLICY_CLAMP   # "clamp" | "raise"
    nodata: Optional[int] = None

    # Train / validation split
    split_fraction: float = 0.7
    split_seed: int = 0

    # Grid search
    max_workers: int = 1

    # Accuracy
    confidence_level: float = 0.95

    # Patch smoothing
    min_patch_size: int = 70
    max_patch_size: Optional[int] = 80
    majority_radius: int = 2
    kernel: str = "square"
    eight_connected: bool = True

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "WorkflowConfig":
        """Build from a plain mapping; missing keys take defaults."""
        defaults = cls()
        values = {
            f.name: config.get(f.name, getattr(defaults, f.name))
            for f in fields(cls)
        }
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
