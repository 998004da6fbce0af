"""Processing filter interface.

The hosting framework runs filters one at a time on an authentication
context; each filter exposes a single ``process`` operation.
"""

from typing import Protocol, runtime_checkable

from opaque_smartid.models.context import AuthenticationContext
from opaque_smartid.models.results import ProcessingResult


@runtime_checkable
class ProcessingFilter(Protocol):
    """Protocol for authentication processing filters."""

    def process(self, context: AuthenticationContext) -> ProcessingResult:
        """Process one authentication context.

        Args:
            context: Context owned exclusively by this call

        Returns:
            ProcessingResult; a non-success status carries an ErrorReport
        """
        ...
