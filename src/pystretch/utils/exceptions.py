"""Custom exceptions for pyStretch.

This module defines the exception hierarchy for the pyStretch package,
providing specific error types for different failure modes.
"""


class PyStretchError(Exception):
    """Base exception class for all pyStretch-specific errors.

    This is the root exception class from which all other pyStretch
    exceptions inherit. It can be used to catch any pyStretch-related
    error in a general exception handler.
    """

    pass


class InputError(PyStretchError, ValueError):
    """Raised when the sampler configuration or run arguments are invalid.

    This exception is raised when:
    - Walker count or dimension are not positive integers
    - The walker count is odd or smaller than twice the dimension
    - Initial positions do not have shape (n_walkers, n_dims)
    - Step counts or thinning factors are not positive integers

    It is always raised before any sampling work starts.

    Parameters
    ----------
    msg : str, optional
        Human-readable error message describing the input problem.
    """

    def __init__(self, msg="Invalid or missing input parameters"):
        super().__init__(msg)


class EmptyChainError(InputError):
    """Raised when resuming a sampler whose chain holds no saved steps."""

    def __init__(self, msg="No initial position for chain: the chain is empty"):
        super().__init__(msg)
