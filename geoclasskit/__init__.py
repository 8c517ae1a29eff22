"""
GeoClassKit — Sampling, Tuning and Accuracy for Land Cover Maps

Stratified sample allocation, stratified train/validation splitting,
hyperparameter grid search under a held-out protocol, confusion-matrix
accuracy statistics (overall, producer's, consumer's, Cohen's Kappa)
and connected-patch smoothing of classified rasters.
"""

import logging

__version__ = "1.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
