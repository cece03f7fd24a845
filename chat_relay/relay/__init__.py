from .routing import Audience, audience_for
from .broadcast import BroadcastRelay

__all__ = ["Audience", "BroadcastRelay", "audience_for"]
