"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask, HTTP, or SQLAlchemy directly.

Expected business outcomes (invalid credentials, unknown refresh tokens, ...)
are *not* exceptions: they travel as :class:`~survey_basket.services._shared.result.Result`
failures. What remains here are programming-contract violations, which must
fail fast.
"""

from __future__ import annotations


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - Reaching the API layer with one of these means a bug, so the generic
      500 handler in ``survey_basket.core.errors`` renders them.
    """

    pass


class ResultContractError(ServiceError):
    """
    Raised when a :class:`Result` is built or read inconsistently.

    Examples: a success carrying an error, a failure without one, or reading
    ``value`` from a failure.
    """

    pass
