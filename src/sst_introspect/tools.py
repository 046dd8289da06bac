"""
Introspection tools over a running ``sst dev`` server.

Every call re-discovers the project from the configured working directory,
so stages started or stopped between calls are picked up. Results are plain
JSON-ready dicts with the camelCase keys clients of the MCP server expect.
"""

import logging
from pathlib import Path
from typing import Any

import httpx

from sst_introspect.config import IntrospectConfig
from sst_introspect.constants import LOG_URI_SCHEME
from sst_introspect.discovery import (
    auto_discover,
    discover_sst_server,
    find_sst_config,
    get_log_files,
)
from sst_introspect.events import extract_function_invocations, group_events_by_type
from sst_introspect.exceptions import InvalidRequestError, ServerNotRunningError
from sst_introspect.health import is_server_running
from sst_introspect.log_stream import LogStream
from sst_introspect.models import Event, SSTProject
from sst_introspect.stream import collect_events, fetch_completed
from sst_introspect.utils import format_size_kb, validate_path_component

logger = logging.getLogger(__name__)

NO_SERVER_MESSAGE = "No running SST dev server found."
NO_DEPLOYMENT_MESSAGE = "No deployment data yet."


def _project_info(project: SSTProject) -> dict[str, Any]:
    return {
        "root": str(project.root),
        "stage": project.stage,
        "serverUrl": project.server_url,
        "logDir": str(project.log_dir),
    }


class IntrospectTools:
    def __init__(
        self,
        config: IntrospectConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.config = config or IntrospectConfig()
        # None means every request opens and closes its own client
        self.http_client = http_client

    @property
    def working_dir(self) -> Path:
        return self.config.working_dir

    def current_project(self, stage: str | None = None) -> SSTProject:
        """First discovered stage, or the requested one."""
        projects = auto_discover(self.working_dir)
        if not projects:
            raise ServerNotRunningError(NO_SERVER_MESSAGE)
        if stage is None:
            return projects[0]
        for project in projects:
            if project.stage == stage:
                return project
        raise ServerNotRunningError(f"No SST dev server for stage: {stage}")

    async def is_running(self, project: SSTProject) -> bool:
        return await is_server_running(
            project.server_url,
            timeout=self.config.health_timeout,
            client=self.http_client,
        )

    async def running_project(self, stage: str | None = None) -> SSTProject:
        """Current project, after checking its dev server answers."""
        project = self.current_project(stage)
        if not await self.is_running(project):
            raise ServerNotRunningError(
                f"SST dev server for '{project.stage}' not responding."
            )
        return project

    async def discover(self, directory: Path | str | None = None) -> dict[str, Any]:
        directory = Path(directory) if directory else self.working_dir
        projects = auto_discover(directory)
        if not projects:
            config_path = find_sst_config(directory)
            if config_path is not None:
                return {
                    "found": False,
                    "message": "SST project found but no dev servers running.",
                    "projectRoot": str(config_path.parent),
                }
            return {"found": False, "message": "No SST project found"}

        projects_info = []
        for project in projects:
            projects_info.append(
                {
                    **_project_info(project),
                    "running": await self.is_running(project),
                    "logFiles": [f.name for f in get_log_files(project)],
                }
            )
        return {"found": True, "projects": projects_info}

    async def list_tabs(self, stage: str | None = None) -> dict[str, Any]:
        project = self.current_project(stage)
        log_files = get_log_files(project)
        return {
            "stage": project.stage,
            "serverUrl": project.server_url,
            "serverRunning": await self.is_running(project),
            "tabs": [
                {
                    "name": f.name,
                    "size": format_size_kb(f.size),
                    "lastModified": f.modified_at.isoformat(),
                }
                for f in log_files
            ],
        }

    def read_logs(
        self, tab: str, lines: int | None = None, offset: int = 0
    ) -> dict[str, Any]:
        tab = validate_path_component(tab)
        lines = lines or self.config.default_log_lines
        offset = offset or 0
        project = self.current_project()
        page = LogStream(project.log_path(tab)).page(offset=offset, limit=lines)
        return {
            "tab": tab,
            "stage": project.stage,
            "total": page.total,
            "showing": len(page.lines),
            "offset": offset,
            "hasMore": page.has_more,
            "lines": page.lines,
        }

    def tail_logs(self, tab: str, lines: int | None = None) -> list[str]:
        """Last lines of a tab in the order they were written."""
        tab = validate_path_component(tab)
        project = self.current_project()
        count = lines or self.config.default_log_lines
        return LogStream(project.log_path(tab)).tail_lines(count)

    async def get_status(self, stage: str | None = None) -> dict[str, Any] | str:
        project = await self.running_project(stage)
        completed = await fetch_completed(
            project.server_url,
            timeout=self.config.snapshot_timeout,
            client=self.http_client,
        )
        if completed is None:
            return NO_DEPLOYMENT_MESSAGE
        return {
            "stage": project.stage,
            "app": completed.app,
            "finished": completed.finished,
            "errors": [e.model_dump(by_alias=True) for e in completed.errors],
            "outputs": completed.outputs,
            "hints": completed.hints,
            "resourceCount": len(completed.resources),
            "resources": [
                {"type": r.type, "urn": r.urn}
                for r in completed.resources[: self.config.max_status_resources]
            ],
        }

    async def _collect(self, project: SSTProject, timeout_ms: int) -> list[Event]:
        return await collect_events(
            project.server_url,
            time_budget=timeout_ms / 1000,
            client=self.http_client,
        )

    async def get_invocations(self, timeout_ms: int | None = None) -> dict[str, Any]:
        timeout_ms = timeout_ms or self.config.default_collect_ms
        project = await self.running_project()
        events = await self._collect(project, timeout_ms)
        invocations = extract_function_invocations(events)
        max_logs = self.config.max_invocation_logs
        return {
            "stage": project.stage,
            "collectionTimeMs": timeout_ms,
            "invocationCount": len(invocations),
            "invocations": [
                {
                    "functionId": inv.function_id,
                    "requestId": inv.request_id,
                    "hasOutput": bool(inv.output),
                    "hasError": inv.error is not None,
                    "logCount": len(inv.logs),
                    "logs": inv.logs[:max_logs],
                    "error": inv.error.model_dump() if inv.error else None,
                }
                for inv in invocations.values()
            ],
        }

    async def get_events(
        self, timeout_ms: int | None = None, event_type: str | None = None
    ) -> dict[str, Any]:
        timeout_ms = timeout_ms or self.config.default_collect_ms
        project = await self.running_project()
        events = await self._collect(project, timeout_ms)
        if event_type:
            events = [e for e in events if e.type == event_type]
        grouped = group_events_by_type(events)
        recent = self.config.recent_events_per_type
        return {
            "stage": project.stage,
            "collectionTimeMs": timeout_ms,
            "totalEvents": len(events),
            "eventTypes": list(grouped),
            "eventsByType": {
                type_: {
                    "count": len(bucket),
                    "recent": [e.model_dump() for e in bucket[-recent:]],
                }
                for type_, bucket in grouped.items()
            },
        }

    def list_log_resources(self) -> list[dict[str, str]]:
        projects = auto_discover(self.working_dir)
        if not projects:
            return []
        project = projects[0]
        return [
            {
                "uri": f"{LOG_URI_SCHEME}/{project.stage}/{f.name}",
                "name": f"{f.name} ({project.stage})",
                "description": f"SST dev log: {f.name}",
                "mimeType": "text/plain",
            }
            for f in get_log_files(project)
        ]

    def read_stage_log(self, stage: str, name: str) -> str:
        stage = validate_path_component(stage, "stage")
        name = validate_path_component(name)
        config_path = find_sst_config(self.working_dir)
        if config_path is None:
            raise InvalidRequestError("No SST project found")
        project = discover_sst_server(config_path.parent, stage)
        if project is None:
            raise InvalidRequestError(f"No SST dev server for stage: {stage}")
        lines = LogStream(project.log_path(name)).tail_lines(
            self.config.resource_tail_lines
        )
        return "\n".join(lines)
