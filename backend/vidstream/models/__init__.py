from vidstream.models.subscription import Subscription
from vidstream.models.user import User

__all__ = ["Subscription", "User"]
