"""Server status tool.

Reports a fixed snapshot of server metrics. The numbers are canned; the tool
exists to exercise the function-calling bridge end to end.
"""

import json
from typing import Any

GET_SERVER_STATUS_DESCRIPTION = (
    "Returns the server's metrics (CPU, memory, disk and backup status) "
    "as raw numeric data."
)

SERVER_METRICS: dict[str, Any] = {
    "cpu_usage_percent": 88,
    "memory_usage_percent": 94,
    "disk_status": "CRITICAL_IO_LATENCY",
    "last_backup_days_ago": 12,
}


async def get_server_status() -> str:
    """Return the current server metrics as JSON text."""
    return json.dumps(SERVER_METRICS, ensure_ascii=False)
