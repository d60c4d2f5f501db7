"""Custom types for pystretch."""

from typing import TYPE_CHECKING, Annotated, Any, Protocol, TypeAlias

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from ..samplers.ensemble import Sampler

# These shape annotations are for documentation only.
# Current numpy type annotations only specify the dtype, not the shape.
FloatArray: TypeAlias = npt.NDArray[np.floating]
WalkerPositions: TypeAlias = Annotated[FloatArray, "(n_walkers, n_dims)"]
WalkerChain: TypeAlias = Annotated[FloatArray, "(n_walkers, n_dims, n_saved)"]
WalkerLogPosterior: TypeAlias = Annotated[FloatArray, "(n_walkers, n_saved)"]
FlatChain: TypeAlias = Annotated[FloatArray, "(n_dims, n_walkers * n_saved)"]


class LogDensity(Protocol):
    """Protocol for user-supplied log-density functions.

    The density does not need to be normalised. It must be safe to call
    concurrently from several threads when the parallel strategy is used,
    i.e. it must not mutate shared state.
    """

    def __call__(self, x: FloatArray, *args: Any) -> float:
        """Evaluate the log-density at point x.

        Parameters
        ----------
        x : FloatArray
            Walker position, shape (n_dims,).
        *args : Any
            Fixed extra arguments configured on the sampler.

        Returns
        -------
        float
            Log-density value at x.
        """
        ...


class StepObserver(Protocol):
    """Protocol for objects notified whenever a walker's step is recorded.

    The sampler calls ``on_step_recorded`` once per walker, in walker-index
    order, for every sweep that lands on a thinning boundary of a persisted
    run.
    """

    def on_step_recorded(
        self, sampler: "Sampler", step: int, save_index: int, walker: int
    ) -> None:
        """Handle a recorded step.

        Parameters
        ----------
        sampler : Sampler
            The sampler being run. Its chain already holds the recorded column.
        step : int
            Sweep number within the current run, starting at 1.
        save_index : int
            Column of ``sampler.chain`` the step was written to.
        walker : int
            Index of the walker.
        """
        ...
