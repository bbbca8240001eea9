"""
Domain errors raised by the service layer.

Each error carries the HTTP status the API answers with; the handler in
main.py turns them into {"detail": ...} responses.
"""


class MarketplaceError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationFailedError(MarketplaceError):
    status_code = 400


class UnknownSkillError(ValidationFailedError):
    def __init__(self, names):
        self.names = sorted(names)
        super().__init__(f"Unknown skills: {', '.join(self.names)}")


class PermissionDeniedError(MarketplaceError):
    status_code = 403


class NotFoundError(MarketplaceError):
    status_code = 404


class ConflictError(MarketplaceError):
    status_code = 409


class ProfileExistsError(ConflictError):
    pass


class DuplicateRequestError(ConflictError):
    pass


class RequestAlreadyResolvedError(ConflictError):
    pass


class InvalidStatusTransitionError(ConflictError):
    pass
