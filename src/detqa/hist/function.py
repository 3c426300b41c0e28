"""Parametrized one-dimensional functions which can be fitted to graphs."""

import numpy as np
from scipy.optimize import curve_fit

from detqa.utils.logger import logger

__all__ = ["Function1D", "ThresholdFunction"]


class Function1D:
    """Parametrized function of one variable.

    Attributes
    ----------
    name : str
        Name of the function
    formula : callable
        Function of the form `f(x, *params)`
    low : float
        Lower bound of the domain of definition
    high : float
        Upper bound of the domain of definition
    params : np.ndarray
        (P) current parameter values
    errors : np.ndarray
        (P) parameter uncertainties (0 until fitted)
    chi2 : float
        Chi-square of the last fit
    ndf : int
        Number of degrees of freedom of the last fit
    """

    expression = ""

    def __init__(self, name, formula, low, high, params):
        """Initialize the function.

        Parameters
        ----------
        name : str
            Name of the function
        formula : callable
            Function of the form `f(x, *params)`
        low : float
            Lower bound of the domain of definition
        high : float
            Upper bound of the domain of definition
        params : List[float]
            Initial parameter values
        """
        self.name = name
        self.formula = formula
        self.low = low
        self.high = high
        self.params = np.asarray(params, dtype=np.float64)
        self.errors = np.zeros(len(self.params))
        self.chi2 = -1.0
        self.ndf = -1

    @property
    def n_params(self):
        """Number of free parameters."""
        return len(self.params)

    def __call__(self, x):
        """Evaluates the function with the current parameters."""
        return self.formula(np.asarray(x, dtype=np.float64), *self.params)

    def fit(self, x, y, sigma=None, low=None, high=None):
        """Fits the function to a set of points with least squares.

        Parameters
        ----------
        x : np.ndarray
            (N) abscissa of the points
        y : np.ndarray
            (N) ordinate of the points
        sigma : np.ndarray, optional
            (N) uncertainties on the ordinates. Points with a zero uncertainty
            are fitted with unit weight
        low : float, optional
            Lower bound of the fit range. Defaults to the function domain
        high : float, optional
            Upper bound of the fit range. Defaults to the function domain

        Returns
        -------
        bool
            `True` if the fit converged
        """
        low = self.low if low is None else low
        high = self.high if high is None else high
        x, y = np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64)
        mask = (x >= low) & (x <= high)
        if mask.sum() < self.n_params:
            logger.warning(
                "Cannot fit %s: %d point(s) in the fit range for %d parameters.",
                self.name,
                mask.sum(),
                self.n_params,
            )
            return False

        if sigma is not None:
            sigma = np.asarray(sigma, dtype=np.float64)[mask]
            if np.any(sigma <= 0):
                sigma = None

        try:
            params, cov = curve_fit(
                self.formula,
                x[mask],
                y[mask],
                p0=self.params,
                sigma=sigma,
                absolute_sigma=sigma is not None,
                maxfev=20000,
            )
        except RuntimeError as err:
            logger.warning("Fit of %s did not converge: %s", self.name, err)
            return False

        self.params = params
        self.errors = np.zeros(self.n_params)
        if np.all(np.isfinite(cov)):
            self.errors = np.sqrt(np.abs(np.diag(cov)))
        residuals = y[mask] - self.formula(x[mask], *params)
        if sigma is not None:
            residuals = residuals / sigma
        self.chi2 = float(np.sum(residuals**2))
        self.ndf = int(mask.sum() - self.n_params)

        return True

    def copy(self, name=None):
        """Returns an independent copy of the function."""
        func = Function1D(
            name or self.name, self.formula, self.low, self.high, self.params.copy()
        )
        func.expression = self.expression
        func.errors = self.errors.copy()
        func.chi2, func.ndf = self.chi2, self.ndf

        return func


def threshold_formula(x, p0, p1, p2, p3):
    """Electron likelihood threshold as a function of momentum."""
    return 1.0 - p0 - p1 * x - p2 * np.exp(-p3 * x)


class ThresholdFunction(Function1D):
    """Parametrization of the electron likelihood threshold which achieves a
    fixed electron efficiency, as a function of momentum:

    .. math::

        t(p) = 1 - p_0 - p_1 p - p_2 e^{-p_3 p}
    """

    expression = "1-[0]-[1]*x-[2]*exp(-[3]*x)"

    def __init__(self, name="thresh", low=0.1, high=10.0, params=(0.1, 0.01, 0.1, 1.0)):
        """Initialize the threshold parametrization.

        Parameters
        ----------
        name : str, default 'thresh'
            Name of the function
        low : float, default 0.1
            Lower bound of the momentum range
        high : float, default 10.
            Upper bound of the momentum range
        params : List[float], default (0.1, 0.01, 0.1, 1.)
            Initial parameter values
        """
        super().__init__(name, threshold_formula, low, high, params)
