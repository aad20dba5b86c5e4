"""Errors raised by the WQP pull"""


class WQPQueryError(RuntimeError):
    """A WQP request failed or returned something unreadable."""


class SubRegionQueryError(WQPQueryError):
    """A county-scoped fallback query failed; the region cannot be inventoried."""

    def __init__(self, state_id: str, message: str):
        super().__init__(f"{state_id}: {message}")
        self.state_id = state_id


class PartitionUnderProvisionedError(RuntimeError):
    """Every partition hit its site cap before all sites were assigned."""
