"""
Platform registry
=================

Maps target names to their implementation. Registration order is the
default posting order when a request does not name its targets.
"""

from .base import Target
from .bluesky import BlueskyConfig, BlueskyTarget
from .twitter import TwitterConfig, TwitterTarget

TARGET_TYPES = {
    BlueskyTarget.name: BlueskyTarget,
    TwitterTarget.name: TwitterTarget,
}


def build_targets(configs):
    """
    Instantiate every registered target that has a configuration record.

    Args:
        configs: dict of target name -> config dataclass

    Returns:
        dict of target name -> Target, in registry order
    """
    return {
        name: target_cls(configs[name])
        for name, target_cls in TARGET_TYPES.items()
        if name in configs
    }


__all__ = [
    'Target', 'TARGET_TYPES', 'build_targets',
    'BlueskyConfig', 'BlueskyTarget', 'TwitterConfig', 'TwitterTarget',
]
