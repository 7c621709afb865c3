# Importing every model registers it on Base.metadata
from app.models.profile import Profile  # noqa: F401
from app.models.auth_session import AuthSession  # noqa: F401
from app.models.issue import Issue  # noqa: F401
from app.models.upvote import Upvote  # noqa: F401
from app.models.verification import Verification  # noqa: F401
from app.models.comment import Comment  # noqa: F401
from app.models.status_history import StatusHistoryEntry  # noqa: F401
