"""Remote synchronization — push and pull of the latest snapshot."""

from vcgit.sync.pull import PullResult, pull
from vcgit.sync.push import PushResult, clear_namespace, push

__all__ = [
    "PullResult",
    "PushResult",
    "clear_namespace",
    "pull",
    "push",
]
