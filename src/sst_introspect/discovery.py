"""
Locate SST projects and their running dev servers on disk.

Layout of a project with a running ``sst dev``::

    {root}/
        sst.config.ts       # or sst.config.js
        .sst/
            {stage}.server  # base URL of the dev server for that stage
            log/
                {tab}.log
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

from sst_introspect.constants import (
    LOG_DIRNAME,
    LOG_FILE_SUFFIX,
    SERVER_FILE_SUFFIX,
    SST_CONFIG_FILENAMES,
    SST_STATE_DIRNAME,
)
from sst_introspect.models import LogFile, SSTProject

logger = logging.getLogger(__name__)


def find_sst_config(start_dir: Path | str) -> Path | None:
    """Walk up from ``start_dir`` and return the first SST config file found."""
    current = Path(start_dir).resolve()
    for directory in (current, *current.parents):
        for filename in SST_CONFIG_FILENAMES:
            config_path = directory / filename
            if config_path.exists():
                return config_path
    return None


def get_available_stages(project_root: Path | str) -> list[str]:
    sst_dir = Path(project_root) / SST_STATE_DIRNAME
    if not sst_dir.is_dir():
        return []
    return sorted(
        path.name.removesuffix(SERVER_FILE_SUFFIX)
        for path in sst_dir.iterdir()
        if path.name.endswith(SERVER_FILE_SUFFIX)
    )


def discover_sst_server(project_root: Path | str, stage: str) -> SSTProject | None:
    project_root = Path(project_root)
    sst_dir = project_root / SST_STATE_DIRNAME
    server_file = sst_dir / f"{stage}{SERVER_FILE_SUFFIX}"
    if not server_file.is_file():
        return None
    server_url = server_file.read_text(encoding="utf-8").strip()
    return SSTProject(
        root=project_root,
        stage=stage,
        server_url=server_url,
        log_dir=sst_dir / LOG_DIRNAME,
    )


def auto_discover(start_dir: Path | str) -> list[SSTProject]:
    """All dev servers of the SST project containing ``start_dir``, one per stage."""
    config_path = find_sst_config(start_dir)
    if config_path is None:
        logger.debug("No SST config above %s", start_dir)
        return []
    project_root = config_path.parent
    projects = []
    for stage in get_available_stages(project_root):
        project = discover_sst_server(project_root, stage)
        if project is not None:
            projects.append(project)
    return projects


def get_log_files(project: SSTProject) -> list[LogFile]:
    """Log tabs of a project, most recently modified first."""
    if not project.log_dir.is_dir():
        return []
    log_files = []
    for path in project.log_dir.iterdir():
        if not path.name.endswith(LOG_FILE_SUFFIX) or not path.is_file():
            continue
        stats = path.stat()
        log_files.append(
            LogFile(
                name=path.name.removesuffix(LOG_FILE_SUFFIX),
                path=path,
                size=stats.st_size,
                modified_at=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
            )
        )
    return sorted(log_files, key=lambda f: f.modified_at, reverse=True)
