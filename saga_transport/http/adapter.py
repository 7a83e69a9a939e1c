"""
Base transport interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..exceptions import TransactionFailedError
from ..request import Params
from ..responses import SagaResponse, SuccessfulSagaResponse


class Transport(ABC):
    """
    Abstract base class for transports.

    A transport performs one remote invocation per call and never retries;
    retry and compensation are left to the caller.
    """

    @abstractmethod
    def invoke(
        self,
        address: str,
        path: str,
        method: str,
        params: Optional[Params] = None,
    ) -> SuccessfulSagaResponse:
        """
        Invoke a remote operation.

        Args:
            address: Host with an optional ``:port``, no scheme
            path: URL path
            method: Case-insensitive HTTP verb
            params: Request parameters by category

        Returns:
            Successful response for 2xx status codes

        Raises:
            TransactionFailedError: On any routing, URI, remote or transport
                failure
        """
        raise NotImplementedError

    def outcome(
        self,
        address: str,
        path: str,
        method: str,
        params: Optional[Params] = None,
    ) -> SagaResponse:
        """Same as ``invoke`` but returns failures as ``FailedSagaResponse``."""
        try:
            return self.invoke(address, path, method, params)
        except TransactionFailedError as e:
            return e.to_response()
