from careerpath.db.base import Base
from careerpath.models.candidate import Candidate
from careerpath.models.interview_process import InterviewProcess
from careerpath.models.process_access import ProcessAccess
from careerpath.models.status_update import StatusUpdate
from careerpath.models.user import Profile, UserRole

__all__ = [
    "Base",
    "Candidate",
    "InterviewProcess",
    "ProcessAccess",
    "Profile",
    "StatusUpdate",
    "UserRole",
]
