from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .personalization.selection import ValidationReport


class PersonalizationError(Exception):
    def __init__(self, message: str, *, error_type: str) -> None:
        self.error_type = error_type
        super().__init__(message)


class MissingProduct(PersonalizationError):
    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}", error_type="missing_product")


class MissingSchema(PersonalizationError):
    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(
            f"Product {product_id} has no personalization schema",
            error_type="missing_schema",
        )


class UnknownTab(PersonalizationError):
    def __init__(self, tab_id: str) -> None:
        self.tab_id = tab_id
        super().__init__(f"Unknown tab: {tab_id}", error_type="unknown_tab")


class SubmissionValidationError(PersonalizationError):
    """Raised when a configuration is submitted with invalid text fields.

    The attached ``report`` lists every failing variant and the tab the
    configurator should switch to.
    """

    def __init__(self, report: "ValidationReport") -> None:
        self.report = report
        failing = ", ".join(report.failing_ids) or "-"
        super().__init__(f"Invalid configuration ({failing})", error_type="validation")


__all__ = [
    "PersonalizationError",
    "MissingProduct",
    "MissingSchema",
    "SubmissionValidationError",
    "UnknownTab",
]
