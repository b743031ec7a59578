from abc import ABC, abstractmethod
from .types import CompletionRequest, RawCompletion


class CompletionBackend(ABC):
    """
    Abstract text-generation boundary.
    The completion client depends ONLY on this interface.
    """

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> RawCompletion:
        """
        Perform exactly one remote call.

        Raises:
            ServiceError: classified failure of this attempt
        """
        raise NotImplementedError
