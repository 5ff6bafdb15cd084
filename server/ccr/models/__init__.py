from .user import User  # noqa: F401
from .profile import Profile  # noqa: F401
from .activity_log import ActivityLog  # noqa: F401
from .validation_request import ValidationRequest  # noqa: F401
