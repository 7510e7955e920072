"""Resolve domain capabilities (slug, publish state, soft delete, ...) to fields."""

from typing import Dict, List, Optional

from schemacaps.analysis.config import AnalyzerConfig
from schemacaps.analysis.fields import normalize_field_name
from schemacaps.analysis.models import Diagnostic, SpecialFields, SpecialFieldsResult
from schemacaps.global_models import DiagnosticCode, FieldKind
from schemacaps.schema.models import Model


class SpecialFieldsDetector:
    """Evaluate the ordered capability matcher table against a model."""

    def __init__(self, config: AnalyzerConfig):
        self.config = config

    def detect(self, model: Model) -> SpecialFieldsResult:
        """
        Resolve every configured capability to its first matching field.

        Fields are scanned in declaration order; only scalar and enum fields
        are candidates. A capability with several candidates keeps the first
        and reports a diagnostic. A capability without a candidate resolves to
        None.

        Args:
            model: Model to scan

        Returns:
            SpecialFieldsResult with resolved fields and diagnostics
        """
        candidates = [
            (f, normalize_field_name(f.name))
            for f in model.fields
            if f.kind in (FieldKind.SCALAR, FieldKind.ENUM)
        ]

        resolved: Dict[str, Optional[str]] = {}
        diagnostics: List[Diagnostic] = []

        for key, matcher in self.config.matchers.items():
            matches = [
                field.name
                for field, normalized in candidates
                if matcher.matches(normalized, field.type)
            ]
            resolved[key] = matches[0] if matches else None
            if len(matches) > 1:
                diagnostics.append(
                    Diagnostic(
                        model=model.name,
                        field=matches[0],
                        code=DiagnosticCode.MULTIPLE_SPECIAL_FIELD_CANDIDATES,
                        message=(
                            f"Fields {', '.join(matches)} all match capability "
                            f"'{key}'; using '{matches[0]}'"
                        ),
                    )
                )

        return SpecialFieldsResult(
            special_fields=SpecialFields(**resolved),
            diagnostics=tuple(diagnostics),
        )
