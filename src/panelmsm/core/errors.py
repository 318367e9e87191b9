"""Exception types raised by the panel-data estimation pipeline."""


class InvalidDimension(ValueError):
    """Parameter vector length does not match S*(S-1) for the state space."""


class NumericalInstability(ArithmeticError):
    """Matrix exponentiation (or a derived quantity) produced non-finite values.

    Raised by the transition-probability engine. ``log_posterior`` absorbs it
    and returns ``-inf`` so that samplers reject the offending proposal.
    """


class SamplerConfigError(ValueError):
    """Sampler tuning parameters or start vector are malformed."""
