from abc import ABC, abstractmethod

from slugshortener.models import RateLimitInfo


class RateLimitBaseDAO(ABC):
    """Interface for fixed-window rate limit counters.

    Counters are keyed by (purpose, client id) so that independent policies
    (e.g. redirects vs. admin API traffic) never share a budget.
    """

    @abstractmethod
    def hit(self, purpose: str, client_id: str, limit: int, window_ms: int, **kwargs) -> RateLimitInfo:
        """Record one request and return the counter state after it.

        Args:
            purpose (str):
                Namespace of the policy, e.g. 'redirect' or 'admin'.
            client_id (str):
                Identity of the caller, usually its IP address.
            limit (int):
                Maximum number of requests allowed within one window.
            window_ms (int):
                Window length in milliseconds. The counter expires with the window.

        Returns:
            RateLimitInfo: counter state; `allowed` is True iff count <= limit.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    def allow(self, purpose: str, client_id: str, limit: int, window_ms: int, **kwargs) -> bool:
        return self.hit(purpose, client_id, limit, window_ms, **kwargs).allowed
