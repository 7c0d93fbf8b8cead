"""Exceptions raised by the Firestore REST client."""


class FirestoreError(Exception):
    """Base class for all client errors."""


class ConfigurationError(FirestoreError):
    """Required configuration values are missing."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            "Missing required Firestore configuration parameters: "
            + ", ".join(missing)
        )


class InvalidPathError(FirestoreError):
    """A collection or document path has the wrong number of segments."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(f"{message} (path={path})" if path is not None else message)


class FirestoreAPIError(FirestoreError):
    """The REST API answered with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Firestore API error: {status_code} {body}")


class AuthenticationError(FirestoreError):
    """Exchanging the service account assertion for a token failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
