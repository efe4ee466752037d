"""
Error taxonomy for the liquidation bot.

ConfigurationError    - invalid settings, fatal at startup
MissingGasPriceError  - no fee data for a token, fatal for that token only
InvariantViolation    - internal consistency breach (e.g. wrong-token flow in a batch)
SubmissionError       - a liquidation transaction did not succeed on-chain
SubgraphError         - the subgraph query failed or returned errors
"""


class GraphinatorError(Exception):
    """Base class for all errors raised by graphinator."""


class ConfigurationError(GraphinatorError):
    """Invalid or missing configuration. The process must not proceed."""


class MissingGasPriceError(GraphinatorError):
    """The network did not report a usable gas price."""


class InvariantViolation(GraphinatorError):
    """A programming error, e.g. a batch containing a flow of another token."""


class SubmissionError(GraphinatorError):
    """A liquidation transaction was mined but reverted."""

    def __init__(self, message: str, tx_hash: str | None = None):
        super().__init__(message)
        self.tx_hash = tx_hash


class SubgraphError(GraphinatorError):
    """HTTP or GraphQL level failure talking to the subgraph."""
