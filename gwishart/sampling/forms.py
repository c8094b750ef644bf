"""Parametrizations of the matrix D handed to the Wishart draws.

D is usually an inverse scale, but the first step of every Wishart draw is a
Cholesky factorization of the scale. When the same D is reused across many
draws it pays to factorize it once, so four interchangeable forms exist and
all of them reduce to the lower Cholesky factor of the scale matrix.
"""

from dataclasses import dataclass
from enum import StrEnum

import numpy as np
import scipy.linalg

from gwishart.errors import NumericalFailure, ValidationError
from gwishart.sampling.linalg import check_symmetric


class ScaleForm(StrEnum):
    """What the matrix of a ``ScaleMatrix`` holds.

    SCALE: The scale matrix D^-1 itself.
    INV_SCALE: The inverse scale D; it has to be inverted before drawing.
    CHOL_UPPER_INV_SCALE: Upper factor U of the scale, D^-1 = U^T U.
    CHOL_LOWER_INV_SCALE: Lower factor L of the scale, D^-1 = L L^T.
    """

    SCALE = "Scale"
    INV_SCALE = "InvScale"
    CHOL_UPPER_INV_SCALE = "CholUpper_InvScale"
    CHOL_LOWER_INV_SCALE = "CholLower_InvScale"


def parse_form(form: ScaleForm | str) -> ScaleForm:
    """Resolve a form name, raising ValidationError on unknown names."""
    try:
        return ScaleForm(form)
    except ValueError as exc:
        raise ValidationError(
            f"Only possible forms are {', '.join(f.value for f in ScaleForm)}; "
            f"got {form!r}"
        ) from exc


@dataclass(frozen=True)
class ScaleMatrix:
    """A matrix tagged with its ``ScaleForm``, validated at construction.

    Attributes:
        form: How ``matrix`` relates to the inverse scale D.
        matrix: Square finite float array; symmetric for the Scale and
            InvScale forms, triangular for the Cholesky forms.
    """

    form: ScaleForm
    matrix: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "form", parse_form(self.form))
        mat = np.asarray(self.matrix, dtype=np.float64)
        if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
            raise ValidationError(f"Non squared matrix inserted: shape {mat.shape}")
        if not np.all(np.isfinite(mat)):
            raise ValidationError("Matrix D contains non-finite entries")
        if self.form in (ScaleForm.SCALE, ScaleForm.INV_SCALE):
            check_symmetric(mat, f"D ({self.form})")
        if self.form is ScaleForm.CHOL_UPPER_INV_SCALE and np.any(np.tril(mat, -1)):
            raise ValidationError("CholUpper_InvScale matrix must be upper triangular")
        if self.form is ScaleForm.CHOL_LOWER_INV_SCALE and np.any(np.triu(mat, 1)):
            raise ValidationError("CholLower_InvScale matrix must be lower triangular")
        object.__setattr__(self, "matrix", mat)

    @classmethod
    def of(
        cls,
        D: "ScaleMatrix | np.ndarray",
        form: ScaleForm | str = ScaleForm.INV_SCALE,
    ) -> "ScaleMatrix":
        """Wrap a raw array as ``form``; an existing ``ScaleMatrix`` passes through."""
        if isinstance(D, ScaleMatrix):
            return D
        return cls(parse_form(form), D)

    @property
    def size(self) -> int:
        return int(self.matrix.shape[0])

    def scale_cholesky(self) -> np.ndarray:
        """Lower triangular L with ``L @ L.T`` equal to the scale matrix D^-1.

        Raises:
            NumericalFailure: If the matrix is not positive definite.
        """
        mat = self.matrix
        try:
            if self.form is ScaleForm.SCALE:
                return scipy.linalg.cholesky(mat, lower=True)
            if self.form is ScaleForm.INV_SCALE:
                factor = scipy.linalg.cho_factor(mat, lower=True)
                scale = scipy.linalg.cho_solve(factor, np.eye(self.size))
                return scipy.linalg.cholesky((scale + scale.T) / 2, lower=True)
        except np.linalg.LinAlgError as exc:
            raise NumericalFailure(
                f"Cholesky decomposition of the {self.form} matrix failed: {exc}"
            ) from exc
        if self.form is ScaleForm.CHOL_UPPER_INV_SCALE:
            return mat.T.copy()
        return mat.copy()
