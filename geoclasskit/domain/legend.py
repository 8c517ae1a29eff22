"""Land use / land cover legend (MapBiomas collection classes).

Maps class values to display names and colours. Value 0 is the
designated "out of area of interest" class.

No I/O. Only depends on: typing.
"""

from typing import Dict, Iterable, NamedTuple, Optional


class ClassInfo(NamedTuple):
    name: str
    color: str


UNCLASSIFIED = 0

LEGEND: Dict[int, ClassInfo] = {
    0: ClassInfo("Out of area of interest", "#808080"),
    1: ClassInfo("Forest", "#32a65e"),
    3: ClassInfo("Forest Formation", "#1f8d49"),
    4: ClassInfo("Savanna Formation", "#7dc975"),
    5: ClassInfo("Mangrove", "#04381d"),
    6: ClassInfo("Floodable Forest", "#026975"),
    9: ClassInfo("Forest Plantation", "#7a5900"),
    10: ClassInfo("Non Forest Natural Formation", "#ad975a"),
    11: ClassInfo("Wetland", "#519799"),
    12: ClassInfo("Grassland", "#d6bc74"),
    13: ClassInfo("Other non Forest Formations", "#d89f5c"),
    14: ClassInfo("Farming", "#FFFFB2"),
    15: ClassInfo("Pasture", "#edde8e"),
    18: ClassInfo("Agriculture", "#E974ED"),
    19: ClassInfo("Temporary Crop", "#C27BA0"),
    20: ClassInfo("Sugar cane", "#db7093"),
    21: ClassInfo("Mosaic of Uses", "#ffefc3"),
    22: ClassInfo("Non vegetated area", "#d4271e"),
    23: ClassInfo("Beach, Dune and Sand Spot", "#ffa07a"),
    24: ClassInfo("Urban Area", "#d4271e"),
    25: ClassInfo("Other non Vegetated Areas", "#db4d4f"),
    26: ClassInfo("Water", "#0000FF"),
    27: ClassInfo("Not Observed", "#ffffff"),
    29: ClassInfo("Rocky Outcrop", "#ffaa5f"),
    30: ClassInfo("Mining", "#9c0027"),
    31: ClassInfo("Aquaculture", "#091077"),
    32: ClassInfo("Hypersaline Tidal Flat", "#fc8114"),
    33: ClassInfo("River, Lake and Ocean", "#2532e4"),
    35: ClassInfo("Palm Oil", "#9065d0"),
    36: ClassInfo("Perennial Crop", "#d082de"),
    39: ClassInfo("Soybean", "#f5b3c8"),
    40: ClassInfo("Rice", "#c71585"),
    41: ClassInfo("Other Temporary Crops", "#f54ca9"),
    46: ClassInfo("Coffee", "#d68fe2"),
    47: ClassInfo("Citrus", "#9932cc"),
    48: ClassInfo("Other Perennial Crops", "#e6ccff"),
    49: ClassInfo("Wooded Sandbank Vegetation", "#02d659"),
    50: ClassInfo("Herbaceous Sandbank Vegetation", "#ad5100"),
    62: ClassInfo("Cotton", "#ff69b4"),
}


def class_name(value: int, overrides: Optional[Dict[int, str]] = None) -> str:
    """Display name for a class value; falls back to the number."""
    if overrides and value in overrides:
        return overrides[value]
    info = LEGEND.get(value)
    return info.name if info else str(value)


def class_names(
    values: Iterable[int],
    overrides: Optional[Dict[int, str]] = None,
) -> Dict[int, str]:
    return {int(v): class_name(int(v), overrides) for v in values}
