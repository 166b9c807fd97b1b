"""
Analysis Input Validator: structural and referential checks.

Validates:
1. Required fields (ids, titles, dates of schedulable activities)
2. Chronology (end >= start) and non-negative cost
3. Activity level enum
4. Probability, impact-percent and relation-strength ranges
5. Referential integrity (affected activities, related risks)
6. Duplicate ids for activities and risks
7. At least one affected activity per risk

Never raises for malformed domain data: every problem becomes a
ValidationIssue. The engine does not re-validate, so callers decide whether
to block on errors before calling analyze().
"""

from enum import StrEnum
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from riskbehavior.engine.enrichment import parse_date
from riskbehavior.schemas.inputs import (
    RISK_CATEGORIES,
    VALID_LEVELS,
    Activity,
    ActivityLevel,
    AnalysisInput,
    InputModel,
    RelationType,
    Risk,
)

logger = structlog.get_logger(__name__)

VALID_RELATION_TYPES: set[str] = {t.value for t in RelationType}


class ValidationSeverity(StrEnum):
    ERROR = "error"         # Input should be fixed before analysis
    WARNING = "warning"     # Analysis runs, but the result may surprise


class ValidationIssue:
    """A single field-scoped problem found in the input."""

    def __init__(
        self,
        field: str,
        message: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ):
        self.field = field
        self.message = message
        self.severity = severity

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationIssue):
            return NotImplemented
        return (self.field, self.message, self.severity) == (
            other.field, other.message, other.severity,
        )

    def __repr__(self) -> str:
        return f"ValidationIssue({self.field!r}, {self.message!r}, {self.severity.value})"


class ValidationResult:
    """Result of validating one analysis input."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "errors": [i.to_dict() for i in self.errors],
            "warnings": [i.to_dict() for i in self.warnings],
        }


class InputValidator:
    """
    Deep validator for analysis input bundles.

    Goes beyond pydantic parsing: value ranges, chronology and cross-record
    references are checked here so that construction stays lenient.
    """

    def validate(self, data: Union[AnalysisInput, Mapping[str, Any]]) -> ValidationResult:
        """
        Validate an input bundle, collecting every issue found.

        Mapping input is parsed record by record: a record pydantic cannot
        parse contributes its structural issues and its id, and every other
        check still runs.
        """
        issues: list[ValidationIssue] = []
        failed_activity_ids: list[str] = []
        failed_risk_ids: list[str] = []

        if isinstance(data, AnalysisInput):
            bundle = data
        elif isinstance(data, Mapping) and all(
            isinstance(data.get(key) or [], (list, tuple)) for key in ("activities", "risks")
        ):
            activities, activity_issues, failed_activity_ids = self._parse_records(
                data.get("activities") or [], Activity, "activities",
            )
            risks, risk_issues, failed_risk_ids = self._parse_records(
                data.get("risks") or [], Risk, "risks",
            )
            issues.extend(activity_issues)
            issues.extend(risk_issues)
            bundle = AnalysisInput(activities=activities, risks=risks)
        else:
            try:
                bundle = AnalysisInput.model_validate(data)
            except PydanticValidationError as exc:
                result = ValidationResult(self._structural_issues(exc))
                logger.warning("input_structure_invalid", errors=len(result.errors))
                return result

        if issues:
            logger.warning("input_records_unparsable", errors=len(issues))

        if not bundle.activities and not failed_activity_ids:
            issues.append(ValidationIssue("activities", "At least one activity is required"))
        if not bundle.risks and not failed_risk_ids:
            issues.append(ValidationIssue("risks", "At least one risk is required"))

        # ── Activities ────────────────────────────────────────────────
        for activity in bundle.activities:
            issues.extend(self.validate_activity(activity))

        all_activity_ids = [a.id for a in bundle.activities] + [i for i in failed_activity_ids if i]
        for activity_id in self._duplicates(all_activity_ids):
            issues.append(ValidationIssue("activities", f"Duplicate activity ID: {activity_id}"))

        # ── Risks ─────────────────────────────────────────────────────
        activity_ids = set(all_activity_ids)
        all_risk_ids = [r.id for r in bundle.risks] + [i for i in failed_risk_ids if i]
        known_risk_ids = set(all_risk_ids)
        for risk in bundle.risks:
            issues.extend(self.validate_risk(risk, activity_ids, known_risk_ids))
            if not risk.affected_activities:
                issues.append(ValidationIssue(
                    "risks", f"Risk {risk.id} must have at least one affected activity",
                ))

        for risk_id in self._duplicates(all_risk_ids):
            issues.append(ValidationIssue("risks", f"Duplicate risk ID: {risk_id}"))

        result = ValidationResult(issues)
        if not result.is_valid:
            logger.warning(
                "input_validation_failed",
                errors=len(result.errors),
                warnings=len(result.warnings),
            )
        else:
            logger.debug("input_validated", warnings=len(result.warnings))
        return result

    def validate_activity(self, activity: Activity) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []

        if not activity.id.strip():
            issues.append(ValidationIssue("id", "Activity ID is required"))
        if not activity.title.strip():
            issues.append(ValidationIssue("title", "Activity title is required"))

        if activity.level not in VALID_LEVELS:
            issues.append(ValidationIssue("level", "Level must be 1 or 2"))

        # Artifacts carry no dates
        if activity.level != ActivityLevel.ARTIFACT:
            if not activity.start.strip():
                issues.append(ValidationIssue("start", "Start date is required"))
            if not activity.end.strip():
                issues.append(ValidationIssue("end", "End date is required"))

        start = parse_date(activity.start)
        end = parse_date(activity.end)
        if activity.start.strip() and start is None:
            issues.append(ValidationIssue("start", f"Start date '{activity.start}' is not a valid date"))
        if activity.end.strip() and end is None:
            issues.append(ValidationIssue("end", f"End date '{activity.end}' is not a valid date"))
        if start is not None and end is not None and end < start:
            issues.append(ValidationIssue("end", "End date must be >= start date"))

        if activity.cost < 0:
            issues.append(ValidationIssue("cost", "Cost must be >= 0"))

        return issues

    def validate_risk(
        self,
        risk: Risk,
        activity_ids: set[str],
        risk_ids: Optional[set[str]] = None,
    ) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []

        if not risk.id.strip():
            issues.append(ValidationIssue("id", "Risk ID is required"))
        if not risk.title.strip():
            issues.append(ValidationIssue("title", "Risk title is required"))

        if risk.probability < 0 or risk.probability > 100:
            issues.append(ValidationIssue(
                "probability", "Probability must be between 0 and 100",
            ))
        if risk.time_impact_percent < 0:
            issues.append(ValidationIssue("timeImpactPercent", "Time impact must be >= 0"))
        if risk.cost_impact_percent < 0:
            issues.append(ValidationIssue("costImpactPercent", "Cost impact must be >= 0"))

        if risk.category not in RISK_CATEGORIES:
            issues.append(ValidationIssue(
                "category",
                f"Unknown category '{risk.category}'. Valid: {list(RISK_CATEGORIES)}",
                ValidationSeverity.WARNING,
            ))

        for activity_id in risk.affected_activities:
            if activity_id not in activity_ids:
                issues.append(ValidationIssue(
                    "affectedActivities", f"Activity {activity_id} does not exist",
                ))

        for relation in risk.related_risks:
            if relation.strength is not None and not 0 <= relation.strength <= 1:
                issues.append(ValidationIssue(
                    "relatedRisks",
                    f"Relation strength must be between 0 and 1 for {relation.risk_id}",
                ))
            if relation.relation_type not in VALID_RELATION_TYPES:
                issues.append(ValidationIssue(
                    "relatedRisks",
                    f"Relation type '{relation.relation_type}' for {relation.risk_id} "
                    f"must be one of {sorted(VALID_RELATION_TYPES)}",
                ))
            if risk_ids is not None and relation.risk_id not in risk_ids:
                issues.append(ValidationIssue(
                    "relatedRisks", f"Related risk {relation.risk_id} does not exist",
                ))
            if relation.risk_id == risk.id:
                issues.append(ValidationIssue(
                    "relatedRisks",
                    f"Risk {risk.id} is related to itself; the relation is ignored",
                    ValidationSeverity.WARNING,
                ))

        return issues

    def _parse_records(
        self,
        raw_records: Sequence[Any],
        model: type[InputModel],
        field: str,
    ) -> tuple[list, list[ValidationIssue], list[str]]:
        """Parse records one at a time; return (parsed, issues, ids of unparsable records)."""
        parsed = []
        issues: list[ValidationIssue] = []
        failed_ids: list[str] = []
        for index, raw in enumerate(raw_records):
            try:
                parsed.append(model.model_validate(raw))
            except PydanticValidationError as exc:
                issues.extend(self._structural_issues(exc, prefix=f"{field}.{index}"))
                record_id = raw.get("id") if isinstance(raw, Mapping) else None
                failed_ids.append(record_id if isinstance(record_id, str) else "")
        return parsed, issues, failed_ids

    @staticmethod
    def _duplicates(ids: Iterable[str]) -> list[str]:
        """Each id seen more than once, reported once per repeat, in input order."""
        seen: set[str] = set()
        repeated = []
        for record_id in ids:
            if record_id in seen:
                repeated.append(record_id)
            seen.add(record_id)
        return repeated

    def _structural_issues(
        self,
        exc: PydanticValidationError,
        prefix: str = "",
    ) -> list[ValidationIssue]:
        issues = []
        for err in exc.errors():
            parts = [prefix] if prefix else []
            parts.extend(str(part) for part in err.get("loc", ()))
            field = ".".join(parts) or "input"
            issues.append(ValidationIssue(field, err.get("msg", "Invalid value")))
        return issues


_validator = InputValidator()


def validate_report(data: Union[AnalysisInput, Mapping[str, Any]]) -> ValidationResult:
    """Validate and return errors and warnings."""
    return _validator.validate(data)


def validate(data: Union[AnalysisInput, Mapping[str, Any]]) -> list[dict]:
    """Validate and return the error list as [{"field", "message"}, ...]."""
    return [i.to_dict() for i in _validator.validate(data).errors]
