"""Exception hierarchy for extraction."""


class ExtractionError(Exception):
    """Base class for all extraction errors."""


class MalformedEGraphError(ExtractionError, ValueError):
    """The e-graph is structurally broken (unknown ids, unresolvable root).

    No amount of search can repair this, so it is raised at construction.
    """


class InvariantViolationError(ExtractionError):
    """An illegal (cycle-creating) move was applied or a term is invalid.

    Indicates a bug in move enumeration, never a data problem.
    """


class OracleFailure(ExtractionError):
    """Raised by a cost oracle that cannot evaluate a term."""


class ConfigError(ExtractionError, ValueError):
    """Invalid extractor configuration."""
