"""Input validation for GeoClassKit.

Validates workflow configuration, reference maps and feature stacks
before any sampling happens. Returns structured validation results
(never silently proceeds).

Depends on: core.config, domain.*.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from ..domain.errors import InvalidConfigurationError
from ..domain.sampling import INSUFFICIENT_POLICIES
from ..domain.smoothing import KERNELS
from .config import WorkflowConfig


@dataclass
class ValidationIssue:
    """A single validation finding."""
    severity: str     # 'FATAL' | 'ERROR' | 'WARNING'
    message: str
    suggestion: str = ""


@dataclass
class ValidationResult:
    """Aggregated validation result."""
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not any(i.severity == "FATAL" for i in self.issues)

    @property
    def has_warnings(self) -> bool:
        return any(i.severity == "WARNING" for i in self.issues)

    @property
    def fatal_issues(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == "FATAL"]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == "WARNING"]

    def fatal(self, message: str, suggestion: str = "") -> None:
        self.issues.append(ValidationIssue("FATAL", message, suggestion))

    def warn(self, message: str, suggestion: str = "") -> None:
        self.issues.append(ValidationIssue("WARNING", message, suggestion))

    def raise_if_invalid(self) -> None:
        """Raise InvalidConfigurationError listing every fatal issue."""
        if not self.is_valid:
            raise InvalidConfigurationError(
                "Validation failed:\n" +
                "\n".join(f"  [{i.severity}] {i.message}" for i in self.fatal_issues)
            )


def validate_workflow_config(config: WorkflowConfig) -> ValidationResult:
    """Check every bound of a WorkflowConfig."""
    result = ValidationResult()

    if config.num_total_points <= 0:
        result.fatal(
            f"num_total_points must be positive, got {config.num_total_points}."
        )
    if config.min_points <= 0:
        result.fatal(f"min_points must be positive, got {config.min_points}.")
    if config.min_points > config.max_points:
        result.fatal(
            f"min_points ({config.min_points}) exceeds "
            f"max_points ({config.max_points}).",
            suggestion="Lower min_points or raise max_points.",
        )
    if config.seed < 0 or config.split_seed < 0:
        result.fatal("Seeds must be non-negative integers.")
    if config.insufficient_policy not in INSUFFICIENT_POLICIES:
        result.fatal(
            f"Unknown insufficient_policy {config.insufficient_policy!r}.",
            suggestion=f"Use one of {INSUFFICIENT_POLICIES}.",
        )
    if not 0.0 < config.split_fraction < 1.0:
        result.fatal(
            f"split_fraction must be in (0, 1), got {config.split_fraction}."
        )
    elif not 0.5 <= config.split_fraction <= 0.9:
        result.warn(
            f"split_fraction {config.split_fraction} leaves a very "
            f"unbalanced training/validation split."
        )
    if config.max_workers < 1:
        result.fatal(f"max_workers must be >= 1, got {config.max_workers}.")
    if not 0.0 < config.confidence_level < 1.0:
        result.fatal(
            f"confidence_level must be in (0, 1), got {config.confidence_level}."
        )
    if config.min_patch_size < 1:
        result.fatal(
            f"min_patch_size must be >= 1, got {config.min_patch_size}."
        )
    if (config.max_patch_size is not None
            and config.max_patch_size < config.min_patch_size):
        result.fatal(
            f"max_patch_size ({config.max_patch_size}) is below "
            f"min_patch_size ({config.min_patch_size}); every patch "
            f"would be smoothed."
        )
    if config.majority_radius < 0:
        result.fatal(
            f"majority_radius must be >= 0, got {config.majority_radius}."
        )
    if config.kernel not in KERNELS:
        result.fatal(
            f"Unknown kernel {config.kernel!r}.",
            suggestion=f"Use one of {KERNELS}.",
        )

    return result


def validate_reference_map(
    reference: np.ndarray,
    nodata: Optional[int] = None,
    feature_stack: Optional[np.ndarray] = None,
    band_names: Optional[Sequence[str]] = None,
) -> ValidationResult:
    """Check a reference raster and, optionally, its feature stack."""
    result = ValidationResult()

    if reference.ndim != 2:
        result.fatal(f"Reference map must be 2-D, got shape {reference.shape}.")
        return result
    if not np.issubdtype(reference.dtype, np.integer):
        result.fatal(
            f"Reference map must hold integer class values, got {reference.dtype}."
        )
    valid = reference != nodata if nodata is not None else np.ones(reference.shape, bool)
    if not valid.any():
        result.fatal("Reference map has no valid (non-nodata) pixels.")
    elif np.issubdtype(reference.dtype, np.integer) and (reference[valid] < 0).any():
        result.fatal("Reference map holds negative class values.")

    if feature_stack is not None:
        if feature_stack.ndim != 3 or feature_stack.shape[1:] != reference.shape:
            result.fatal(
                f"Feature stack shape {feature_stack.shape} does not match "
                f"reference map {reference.shape} as (bands, rows, cols)."
            )
        elif band_names is not None and len(band_names) != feature_stack.shape[0]:
            result.fatal(
                f"{len(band_names)} band names for "
                f"{feature_stack.shape[0]} bands."
            )
        elif not np.isfinite(feature_stack[:, valid]).all():
            result.warn(
                "Feature stack holds non-finite values at valid pixels.",
                suggestion="Mask or fill them before training.",
            )

    return result
