"""
Build profile assembly for the orchestration module.

This module turns an environment list into the ordered (browser, server)
profile pairs the multi-target engine is constructed from.
"""

import logging
from typing import Any, Callable, List, Sequence

from ..models.profiles import BuildProfile, SharedOptions, TargetKind

logger = logging.getLogger(__name__)

# (target, env, options) -> engine configuration
ConfigProvider = Callable[[TargetKind, str, SharedOptions], Any]

# Browser first: some engines name and report children by position.
TARGET_ORDER = (TargetKind.BROWSER, TargetKind.SERVER)


class BuildProfileAssembler:
    """
    Builds one browser and one server profile per environment.

    Every profile is produced from the same SharedOptions instance so that
    both targets of an environment coordinate through one state bag.
    """

    def __init__(self, config_provider: ConfigProvider, options: SharedOptions):
        self.config_provider = config_provider
        self.options = options

    def assemble(self, envs: Sequence[str]) -> List[List[BuildProfile]]:
        """
        Build the profile pairs, grouped per environment.

        Args:
            envs: Environment names, in the order they should be built

        Returns:
            One ``[browser, server]`` list per environment
        """
        profiles = []
        for env in envs:
            pair = [
                BuildProfile(
                    env=env,
                    target=target,
                    config=self.config_provider(target, env, self.options),
                )
                for target in TARGET_ORDER
            ]
            profiles.append(pair)
        logger.debug(f"Assembled {2 * len(profiles)} build profiles for {list(envs)}")
        return profiles

    def flatten(self, envs: Sequence[str]) -> List[BuildProfile]:
        """Profiles for all environments as one ordered list."""
        return [profile for pair in self.assemble(envs) for profile in pair]

    def engine_configs(self, envs: Sequence[str]) -> List[Any]:
        """Just the engine configurations, in profile order."""
        return [profile.config for profile in self.flatten(envs)]
