"""Default configuration, the single source of truth for run parameters."""

from gwishart.config.experiment import RunConfig

# All-default values: 10 nodes in 5 groups, sparsity 0.3, b=3, D given as an
# inverse scale, mean-absolute convergence below 1e-8 within 500 sweeps,
# 500 Monte Carlo draws on one worker, seed=42.
DEFAULT_CONFIG = RunConfig()
