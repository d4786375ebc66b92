"""Self-update orchestration: resolve versions, compare, install."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field

from wasaupdate.core.installer import Installer
from wasaupdate.core.policy import VersionPolicy
from wasaupdate.core.runner import CommandResult
from wasaupdate.core.version import SemanticVersion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdatePlan:
    """Current and latest versions as reported by the policy."""

    current: SemanticVersion
    latest: SemanticVersion

    @property
    def needs_update(self) -> bool:
        # Structural comparison, "1.0.0" and "1.0.0+build" differ
        return self.current != self.latest


class UpdateReport(BaseModel):
    """Outcome of an update run."""

    current_version: str
    latest_version: str
    needs_update: bool
    install_location: Optional[str] = Field(
        default=None, description="Location returned by install_version, when it was asked for."
    )
    installed: bool = False
    install_dir: Optional[str] = None
    dry_run: bool = False
    post_update: Optional[CommandResult] = None


class Updater:
    """Compose a version policy with the installer."""

    def __init__(self, policy: VersionPolicy, installer: Optional[Installer] = None):
        self.policy = policy
        self.installer = installer or Installer()

    def check(self) -> UpdatePlan:
        current = self.policy.current_version()
        latest = self.policy.latest_version()
        logger.info("Current version %s, latest version %s", current, latest)
        return UpdatePlan(current=current, latest=latest)

    def resolve_location(self, latest: SemanticVersion) -> str:
        location = self.policy.install_version(str(latest))
        logger.info("Install location for %s: %s", latest, location)
        return location

    def run(self, dry_run: bool = False) -> UpdateReport:
        """Run one update.

        Nothing is installed when the versions are equal. A dry run resolves
        the install location but never installs.
        """
        plan = self.check()
        report = UpdateReport(
            current_version=str(plan.current),
            latest_version=str(plan.latest),
            needs_update=plan.needs_update,
            dry_run=dry_run,
        )

        if dry_run:
            report.install_location = self.resolve_location(plan.latest)
            return report

        if not plan.needs_update:
            logger.info("Already up to date: %s", plan.current)
            return report

        report.install_location = self.resolve_location(plan.latest)
        target = self.installer.install(report.install_location)
        report.installed = True
        report.install_dir = str(target)
        logger.info("Installed %s into %s", plan.latest, target)
        return report
