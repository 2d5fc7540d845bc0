"""Typed failures raised by repositories and workflows.

The HTTP layer maps these to status codes in ``bloom.main``; library callers
catch them directly.  Decryption mismatches and storage corruption are not
errors and never surface here.
"""

from __future__ import annotations


class BloomError(Exception):
    """Base class for all domain failures."""


class NotFoundError(BloomError, LookupError):
    """A referenced record does not exist (or belongs to another user)."""

    def __init__(self, resource: str, identifier: object) -> None:
        super().__init__(f"{resource} not found: {identifier}")
        self.resource = resource
        self.identifier = identifier


class InvalidInputError(BloomError, ValueError):
    """Input rejected before any write."""


class InvalidTransitionError(BloomError):
    """The requested state change is not allowed from the current state."""


class SlotUnavailableError(InvalidTransitionError):
    """The appointment slot is already held by a booked appointment."""


class ExternalServiceError(BloomError):
    """An external collaborator failed after all retries."""


class PaymentAuthorizationError(ExternalServiceError):
    """Payment authorization did not complete."""


class InsightGenerationError(ExternalServiceError):
    """The insight generator failed or returned nothing usable."""
