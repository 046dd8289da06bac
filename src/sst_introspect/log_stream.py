"""
Line-oriented access to SST dev log tabs.

Blank lines are never counted or returned. Two read orders are offered and
they are deliberately opposite:

- ``tail_lines`` returns the newest lines oldest-first, as they were written.
- ``page`` returns a window newest-first, counting ``offset`` back from the
  end of the file.
"""

import logging
from pathlib import Path

from sst_introspect.models import LogPage

logger = logging.getLogger(__name__)


class LogStream:
    """Access to a single log tab file"""

    def __init__(self, log_path: Path | str):
        self.log_path = Path(log_path)

    @property
    def name(self) -> str:
        return self.log_path.stem

    def read_lines(self) -> list[str]:
        """Read all non-blank lines from the log file"""
        if not self.log_path.is_file():
            return []
        content = self.log_path.read_text(encoding="utf-8", errors="replace")
        return [line for line in content.split("\n") if line.strip()]

    def tail_lines(self, count: int) -> list[str]:
        """Return the last ``count`` lines, oldest first"""
        if count <= 0:
            return []
        return self.read_lines()[-count:]

    def page(self, offset: int = 0, limit: int = 100) -> LogPage:
        """Return up to ``limit`` lines ending ``offset`` lines before the end, newest first"""
        all_lines = self.read_lines()
        total = len(all_lines)
        start = max(0, total - offset - limit)
        # an offset past the first line must not wrap around to the end
        end = max(0, total - offset)
        lines = all_lines[start:end]
        lines.reverse()
        logger.debug(
            "Paged %s: offset=%d limit=%d -> [%d, %d) of %d",
            self.log_path,
            offset,
            limit,
            start,
            end,
            total,
        )
        return LogPage(lines=lines, total=total, has_more=start > 0)

    def __repr__(self) -> str:
        """Show recent log entries"""
        recent = self.tail_lines(5)
        if recent:
            return f"<LogStream {self.name}>\n" + "\n".join(recent)
        else:
            return f"<LogStream {self.name}: empty>"


def read_last_lines(path: Path | str, count: int) -> list[str]:
    return LogStream(path).tail_lines(count)


def read_log_lines(path: Path | str, offset: int = 0, limit: int = 100) -> LogPage:
    return LogStream(path).page(offset=offset, limit=limit)
