"""
Rubric validation module.

The Rubric model already rejects broken weights and duplicate keys. This
validator adds the checks that make a rubric usable as scoring instructions
for a language model.
"""

from pitchtrainer.models import Rubric, RubricCategory


class RubricValidationError(Exception):
    """Raised when rubric validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        message = "Rubric validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        super().__init__(message)


class RubricValidator:
    """
    Validates rubrics for completeness and consistency.

    Checks:
    1. Every sub-criterion has a description the model can act on
    2. Sub-criterion keys are unique across the whole rubric
    3. Categories stay within a sensible size
    """

    # Minimum description length for clarity
    MIN_DESCRIPTION_LENGTH = 10

    # More sub-criteria than this dilutes each one in the category mean
    MAX_CRITERIA_PER_CATEGORY = 8

    def validate(self, rubric: Rubric) -> tuple[bool, list[str]]:
        """
        Validate a rubric and return any issues found.

        Args:
            rubric: The rubric to validate.

        Returns:
            Tuple of (is_valid, list of issues).
        """
        issues: list[str] = []

        for i, category in enumerate(rubric.categories, start=1):
            issues.extend(self._validate_category(category, i))

        issues.extend(self._check_duplicate_criteria(rubric))

        return len(issues) == 0, issues

    def validate_or_raise(self, rubric: Rubric) -> None:
        """
        Validate a rubric and raise if invalid.

        Raises:
            RubricValidationError: If validation fails.
        """
        is_valid, issues = self.validate(rubric)
        if not is_valid:
            raise RubricValidationError(issues)

    def _validate_category(self, category: RubricCategory, index: int) -> list[str]:
        issues: list[str] = []
        prefix = f"Category {index} ({category.key})"

        if len(category.criteria) > self.MAX_CRITERIA_PER_CATEGORY:
            issues.append(
                f"{prefix}: {len(category.criteria)} sub-criteria exceed the maximum "
                f"of {self.MAX_CRITERIA_PER_CATEGORY}"
            )

        for criterion in category.criteria:
            if len(criterion.description.strip()) < self.MIN_DESCRIPTION_LENGTH:
                issues.append(
                    f"{prefix}: Description of '{criterion.key}' is too short "
                    f"(minimum {self.MIN_DESCRIPTION_LENGTH} characters)"
                )

        return issues

    def _check_duplicate_criteria(self, rubric: Rubric) -> list[str]:
        """Sub-criterion keys must not repeat across categories."""
        issues: list[str] = []
        seen: dict[str, str] = {}

        for category in rubric.categories:
            for key in category.criterion_keys:
                if key in seen:
                    issues.append(
                        f"Sub-criterion '{key}' appears in both '{seen[key]}' and '{category.key}'"
                    )
                else:
                    seen[key] = category.key

        return issues
