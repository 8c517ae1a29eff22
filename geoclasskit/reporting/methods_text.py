"""Plain-text reporting for GeoClassKit runs.

Generates a methods paragraph and fixed-width tables (allocation,
sample distribution, grid search, accuracy) for console output or
inclusion in a report.

No I/O. Only depends on: domain models.
"""

import math
from typing import Dict, List

from ..domain.models import (
    ConfusionMatrixResult,
    GridSearchResult,
    PipelineResult,
    SampleSet,
)


def _fmt(value: float, pattern: str = "{:.4f}") -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "n/a"
    return pattern.format(value)


def format_sample_table(sample_set: SampleSet) -> str:
    """Per-class pixels, allocation and train/validation sizes."""
    lines = [
        f"{'Class':>6}  {'Name':<30} {'Pixels':>10} {'Alloc':>6} "
        f"{'Drawn':>6} {'Train':>6} {'Valid':>6}"
    ]
    for cls, info in sample_set.strata_info.items():
        lines.append(
            f"{cls:>6}  {info['name'][:30]:<30} {info['pixel_count']:>10} "
            f"{info['n_requested']:>6} {info['n_generated']:>6} "
            f"{info['n_training']:>6} {info['n_validation']:>6}"
        )
    return "\n".join(lines)


def format_grid_table(search: GridSearchResult) -> str:
    """Every grid point with its validation accuracy; best marked '*'."""
    lines: List[str] = []
    for outcome in search.outcomes:
        params = ", ".join(f"{k}={v}" for k, v in outcome.point.params)
        marker = "*" if outcome.point.index == search.best.point.index else " "
        acc = _fmt(outcome.accuracy) if outcome.succeeded else "FAILED"
        lines.append(f"{marker} {outcome.point.index:>4}  {params:<40} {acc:>8}")
    return "\n".join(lines)


def format_importance_table(importance: Dict[str, float]) -> str:
    """Relative variable importance (%), most important first."""
    width = max([7] + [len(name) for name in importance])
    lines = [f"{'Feature':<{width}}  {'Importance':>10}"]
    for name, value in sorted(importance.items(), key=lambda kv: (-kv[1], kv[0])):
        lines.append(f"{name:<{width}}  {value:>9.2f}%")
    return "\n".join(lines)


def format_accuracy_table(result: ConfusionMatrixResult) -> str:
    """Confusion matrix followed by per-class and global metrics."""
    labels = result.class_labels
    width = max(6, max(len(str(c)) for c in labels) + 1)

    lines = ["Reference (rows) x Predicted (columns)"]
    lines.append(" " * 8 + "".join(f"{c:>{width}}" for c in labels))
    for i, label in enumerate(labels):
        row = "".join(f"{int(v):>{width}}" for v in result.matrix[i])
        lines.append(f"{label:>6}  {row}")

    lines.append("")
    lines.append(f"{'Class':>6}  {'Name':<30} {'Producer':>9} {'Consumer':>9} {'F1':>7}")
    for label in labels:
        lines.append(
            f"{label:>6}  {result.class_names.get(label, str(label))[:30]:<30} "
            f"{_fmt(result.producers_accuracy[label]):>9} "
            f"{_fmt(result.consumers_accuracy[label]):>9} "
            f"{_fmt(result.f1_per_class[label]):>7}"
        )

    lo, hi = result.overall_accuracy_ci
    lines.append("")
    lines.append(
        f"Overall accuracy: {result.overall_accuracy:.4f} "
        f"(CI {lo:.4f}-{hi:.4f}, n={result.n_samples})"
    )
    lines.append(f"Kappa: {_fmt(result.kappa) if result.kappa is not None else 'undefined'}")
    return "\n".join(lines)


def generate_methods_text(result: PipelineResult) -> str:
    """Generate a methods paragraph describing a full pipeline run."""
    sample_set = result.sample_set
    config = sample_set.config
    allocation = sample_set.allocation
    split = sample_set.split
    search = result.tuning.search
    assessment = result.assessment

    paragraphs = []

    p1 = (
        f"Reference samples were drawn by stratified random sampling "
        f"from {len(sample_set.histogram)} reference classes. A nominal "
        f"total of {allocation.num_total_points} samples was allocated "
        f"in proportion to class area and clamped to between "
        f"{allocation.min_points} and {allocation.max_points} samples per "
        f"class, giving {len(sample_set.points)} samples "
        f"(random seed {config.seed})."
    )
    if allocation.skipped_classes:
        p1 += (
            f" Classes {list(allocation.skipped_classes)} had no pixels "
            f"and were not sampled."
        )
    paragraphs.append(p1)

    paragraphs.append(
        f"Samples were split per class into training "
        f"({len(split.training)}) and validation ({len(split.validation)}) "
        f"sets with a training probability of {split.split_fraction:.0%}."
    )

    best = search.best
    params = ", ".join(f"{k} = {v}" for k, v in best.point.params)
    paragraphs.append(
        f"Hyperparameters were selected by grid search over "
        f"{len(search.outcomes)} combinations, scoring each trained model "
        f"by overall accuracy on the validation set. The best combination "
        f"({params}) reached {best.accuracy:.1%}."
        + (f" {len(search.failures)} combination(s) failed to train."
           if search.failures else "")
    )
    importance = result.tuning.feature_importance
    if importance:
        top = max(importance, key=lambda name: (importance[name], name))
        paragraphs[-1] += (
            f" The most important predictor of the final model was {top} "
            f"({importance[top]:.1f}% of total importance)."
        )
    baseline = result.tuning.baseline_assessment
    if baseline is not None:
        paragraphs[-1] += (
            f" An untuned model reached {baseline.overall_accuracy:.1%} on "
            f"the same validation set, against "
            f"{result.tuning.assessment.overall_accuracy:.1%} after tuning."
        )

    oa_lo, oa_hi = assessment.overall_accuracy_ci
    p4 = (
        f"The classified map reached an overall accuracy of "
        f"{assessment.overall_accuracy:.1%} "
        f"(Wilson CI: {oa_lo:.1%}–{oa_hi:.1%})"
    )
    if assessment.kappa is not None:
        p4 += f" and a Kappa index of {assessment.kappa:.4f}"
    p4 += "."
    paragraphs.append(p4)

    paragraphs.append(
        f"Patches smaller than {config.min_patch_size} pixels "
        f"({'8' if config.eight_connected else '4'}-connectivity) were "
        f"replaced by the majority class within a {config.kernel} window "
        f"of radius {config.majority_radius} pixels; the smoothed map "
        f"reached an overall accuracy of "
        f"{result.smoothed_assessment.overall_accuracy:.1%}."
    )

    return "\n\n".join(paragraphs)


def distribution_table(distributions: Dict[str, Dict[int, int]]) -> str:
    """Side-by-side per-class counts, e.g. all / training / validation."""
    names = list(distributions)
    classes = sorted({c for d in distributions.values() for c in d})
    lines = [f"{'Class':>6}" + "".join(f"{n:>12}" for n in names)]
    for cls in classes:
        lines.append(
            f"{cls:>6}" + "".join(f"{distributions[n].get(cls, 0):>12}" for n in names)
        )
    return "\n".join(lines)
