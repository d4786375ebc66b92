import logging
from pathlib import Path
from typing import Any

from wasaupdate.cli.utils import Console
from wasaupdate.core.exceptions import ProcessError
from wasaupdate.core.policy import VersionPolicy
from wasaupdate.core.runner import run_after_update
from wasaupdate.core.updater import Updater

logger = logging.getLogger(__name__)

STARTER_SCRIPT = '''\
"""wasaupdate policy script.

``fetch(url)`` and ``run(command)`` are available as globals. Each function
returns a string.
"""


def current_version():
    return "0.1.0"


def latest_version():
    return "0.1.0"


def install_version(version):
    return "path/to/archive-" + version + ".tar.gz"
'''


def handle_init(script_path: Path, console: Console) -> int:
    """Write a starter policy script; never overwrites an existing file."""
    if script_path.exists():
        console.error(f"The update script file '{script_path}' already exists.")
        return 1
    script_path.parent.mkdir(parents=True, exist_ok=True)
    script_path.write_text(STARTER_SCRIPT, encoding="utf-8")
    logger.info("Wrote starter policy script to %s", script_path)
    if console.as_json:
        console.emit({"script": str(script_path), "created": True})
    else:
        console.info(f"✅ Initialized update script at '{script_path}'")
    return 0


def handle_query(
    policy: VersionPolicy,
    console: Console,
    *,
    current: bool,
    latest: bool,
    install: bool,
) -> int:
    """Print the requested values without updating anything."""
    payload: dict[str, Any] = {}
    if current:
        payload["current_version"] = str(policy.current_version())
        console.info(f"Current version: {payload['current_version']}")
    if latest or install:
        latest_version = policy.latest_version()
        if latest:
            payload["latest_version"] = str(latest_version)
            console.info(f"Latest version: {payload['latest_version']}")
        if install:
            payload["install_location"] = policy.install_version(str(latest_version))
            console.info(f"Install path for latest version: {payload['install_location']}")
    if console.as_json:
        console.emit(payload)
    return 0


def handle_dry(updater: Updater, console: Console) -> int:
    """Report what an update would do."""
    report = updater.run(dry_run=True)
    if console.as_json:
        console.emit(report.model_dump(mode="json"))
        return 0

    console.info(f"Current version: {report.current_version}")
    console.info(f"Latest version: {report.latest_version}")
    console.info(f"Install path for latest version: {report.install_location}")
    console.info(f"Install directory: {updater.installer.target_dir}")
    if report.needs_update:
        console.info("🔄 Update will be performed.")
    else:
        console.info("👍 No update needed.")
    return 0


def handle_update(
    updater: Updater,
    console: Console,
    run_after: list[str],
    background: bool = False,
) -> int:
    """Update if needed, then launch the post-update command."""
    report = updater.run()
    if report.installed:
        console.info(
            f"✅ Updated {report.current_version} -> {report.latest_version} in {report.install_dir}"
        )
    else:
        console.info(f"👍 Already up to date: {report.current_version}")

    if run_after:
        try:
            report.post_update = run_after_update(
                run_after,
                background=background,
                executable_dir=updater.installer.target_dir,
            )
        except ProcessError as e:
            # The update itself already succeeded
            logger.error("Post-update command failed: %s", e)
            console.error(e.message)

    if console.as_json:
        console.emit(report.model_dump(mode="json"))
    return 0
