"""Run configuration dataclasses, all frozen and slotted for immutability."""

from dataclasses import dataclass, field

from gwishart.errors import ValidationError
from gwishart.sampling.forms import ScaleForm
from gwishart.sampling.norms import ConvergenceNorm


@dataclass(frozen=True, slots=True)
class GraphConfig:
    """Random block graph parameters."""

    n_elements: int = 10  # elementary nodes
    n_groups: int = 5  # contiguous groups, sizes differ by at most one
    sparsity: float = 0.3  # probability that a stored entry is a link

    def __post_init__(self) -> None:
        if self.n_elements < 1:
            raise ValidationError(
                f"n_elements must be positive, got {self.n_elements}"
            )
        if self.n_groups < 1:
            raise ValidationError(f"n_groups must be positive, got {self.n_groups}")
        if not 0.0 <= self.sparsity <= 1.0:
            raise ValidationError(
                f"sparsity must lie in [0, 1], got {self.sparsity}"
            )


@dataclass(frozen=True, slots=True)
class GWishartConfig:
    """Constrained sampler parameters."""

    b: float = 3.0  # shape, must exceed 2
    form: str = "InvScale"  # parametrization of D
    norm: str = "Mean"  # convergence statistic
    threshold: float = 1e-8
    max_iter: int = 500

    def __post_init__(self) -> None:
        if self.b <= 2:
            raise ValidationError(f"Shape parameter b must exceed 2, got {self.b}")
        valid_forms = [f.value for f in ScaleForm]
        if self.form not in valid_forms:
            raise ValidationError(
                f"form must be one of {valid_forms}, got {self.form!r}"
            )
        valid_norms = [n.value for n in ConvergenceNorm]
        if self.norm not in valid_norms:
            raise ValidationError(
                f"norm must be one of {valid_norms}, got {self.norm!r}"
            )
        if self.threshold <= 0:
            raise ValidationError(
                f"threshold must be positive, got {self.threshold}"
            )
        if self.max_iter < 1:
            raise ValidationError(f"max_iter must be positive, got {self.max_iter}")


@dataclass(frozen=True, slots=True)
class NormalizingConstantConfig:
    """Monte Carlo normalizing-constant parameters."""

    mc_iterations: int = 500
    n_workers: int = 1

    def __post_init__(self) -> None:
        if self.mc_iterations < 1:
            raise ValidationError(
                f"mc_iterations must be positive, got {self.mc_iterations}"
            )
        if self.n_workers < 1:
            raise ValidationError(
                f"n_workers must be positive, got {self.n_workers}"
            )


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Top-level configuration composing all sub-configs.

    All fields are frozen and typed. Cross-parameter validation runs
    in __post_init__ to reject invalid configurations early.
    """

    graph: GraphConfig = field(default_factory=GraphConfig)
    gwishart: GWishartConfig = field(default_factory=GWishartConfig)
    normalizing: NormalizingConstantConfig = field(
        default_factory=NormalizingConstantConfig
    )
    seed: int = 42
    description: str = ""
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.graph.n_groups > self.graph.n_elements:
            raise ValidationError(
                f"n_groups ({self.graph.n_groups}) must be "
                f"<= n_elements ({self.graph.n_elements})"
            )
        if self.seed < 0:
            raise ValidationError(f"seed must be non-negative, got {self.seed}")
