from __future__ import annotations


class RecruitmentError(Exception):
    """Base class for errors raised by the store layer."""

    status_code = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(RecruitmentError, ValueError):
    status_code = 400


class NotFoundError(RecruitmentError):
    status_code = 404


class PermissionDeniedError(RecruitmentError):
    status_code = 403


class TransitionError(RecruitmentError):
    status_code = 409


class BackendError(RecruitmentError):
    status_code = 503


class NotificationError(RecruitmentError):
    pass
