from sst_introspect.config import IntrospectConfig  # noqa: F401
from sst_introspect.discovery import auto_discover, get_log_files  # noqa: F401
from sst_introspect.events import (  # noqa: F401
    InvocationTracker,
    extract_function_invocations,
    group_events_by_type,
)
from sst_introspect.health import is_server_running  # noqa: F401
from sst_introspect.log_stream import LogStream  # noqa: F401
from sst_introspect.stream import collect_events, fetch_completed  # noqa: F401
from sst_introspect.tools import IntrospectTools  # noqa: F401

__version__ = "0.1.0"
