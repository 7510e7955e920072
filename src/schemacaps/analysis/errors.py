"""Exceptions raised by model analysis.

Configuration errors are fatal for a whole run and are raised before any
model is analyzed. Relation errors are fatal only for the model being
analyzed.
"""


class AnalysisError(Exception):
    """Base class for analysis failures."""

    pass


class ConfigurationError(AnalysisError):
    """Raised when analyzer configuration is invalid."""

    pass


class ModelNotFoundError(AnalysisError):
    """Raised when a requested model is not part of the schema."""

    pass


class RelationIntegrityError(AnalysisError):
    """Raised when a relation field targets a model missing from the schema."""

    def __init__(self, model: str, field: str, target: str):
        self.model = model
        self.field = field
        self.target = target
        super().__init__(
            f"Model '{model}' has relation field '{field}' pointing to undefined "
            f"model '{target}'. Check your schema for typos or missing models."
        )


class AmbiguousRelationError(AnalysisError):
    """Raised when a back-reference cannot be paired without a relation name."""

    def __init__(self, model: str, field: str, target: str, candidates: list):
        self.model = model
        self.field = field
        self.target = target
        self.candidates = list(candidates)
        super().__init__(
            f"Relation '{model}.{field}' is ambiguous: '{model}' and '{target}' are "
            f"linked by several relation fields ({', '.join(self.candidates)}). "
            "Give both sides of each relation an explicit relation name."
        )
