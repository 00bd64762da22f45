"""
Engine errors.

Only one failure is fatal in the engine: a precondition violation,
which means the orchestrator called the engine with arguments that can
never produce a fair round. Everything else (mistimed input, out of
range bets) is absorbed by the engine and never raised.
"""


class PreconditionViolation(Exception):
    """
    Raised when the engine is driven with impossible arguments.

    Examples:
    - shuffling fewer than two cups
    - a negative number of shuffle steps
    - an RNG that fails or returns a value outside the requested range
    """
