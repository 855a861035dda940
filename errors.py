"""Errors raised by the catalog rules, the store and the customer auth flow."""

from typing import Iterable


class CatalogError(Exception):
    """Base class for every catalog error; carries a user-facing message."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingFieldsError(CatalogError):
    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required fields: {', '.join(self.missing)}")


class InvalidFieldError(CatalogError):
    pass


class UnknownReferenceError(CatalogError):
    """A shop or offer points at a category, floor or shop that does not exist."""


class RecordNotFound(CatalogError):
    status_code = 404

    def __init__(self, entity: str, record_id: int):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} not found")


class ReferentialIntegrityError(CatalogError):
    """Delete refused because shops still reference the target."""


class DuplicateEmailError(CatalogError):
    def __init__(self, email: str):
        self.email = email
        super().__init__("Email already registered")


class InvalidCredentialsError(CatalogError):
    status_code = 401


class PersistenceError(CatalogError):
    status_code = 500


class AdminRequiredError(CatalogError):
    status_code = 403


class ComparisonLimitError(CatalogError):
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"You can compare up to {limit} shops at a time")
