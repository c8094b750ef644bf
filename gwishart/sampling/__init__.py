"""Constrained precision-matrix sampling and normalizing-constant estimation."""

from gwishart.sampling.forms import ScaleForm, ScaleMatrix
from gwishart.sampling.linalg import (
    check_structure,
    excluded_matvec,
    log_mean,
    log_sum_exp,
    upper_part,
)
from gwishart.sampling.normalizing import (
    NormalizingConstantEstimator,
    log_normalizing_constant,
)
from gwishart.sampling.norms import ConvergenceNorm
from gwishart.sampling.rng import RandomSource
from gwishart.sampling.sampler import (
    GWishartSample,
    GWishartSampler,
    build_sampler,
    rgwish,
    sample_gwishart,
)

__all__ = [
    "ConvergenceNorm",
    "GWishartSample",
    "GWishartSampler",
    "NormalizingConstantEstimator",
    "RandomSource",
    "ScaleForm",
    "ScaleMatrix",
    "build_sampler",
    "check_structure",
    "excluded_matvec",
    "log_mean",
    "log_normalizing_constant",
    "log_sum_exp",
    "rgwish",
    "sample_gwishart",
    "upper_part",
]
