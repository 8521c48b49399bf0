"""Built-in default configuration values for SIAM processes.

These defaults are the final fallback in the configuration cascade:
CLI params > ENV vars > config file > built-in defaults.
"""

from __future__ import annotations

from typing import Any

BUILTIN_DEFAULTS: dict[str, Any] = {
    "logging": {
        "level": "INFO",
        "json_output": True,
        "service": "siam-apiserver",
        "environment": "dev",
        "enable_trace": False,
        "file": {
            "enabled": False,
            "directory": "log",
            "max_size_mb": 10,
            "max_backups": 5,
        },
    },
    "postgres": {
        "enabled": False,
        "url": "",
        "host": "localhost",
        "port": 5432,
        "user": "",
        "password": "",
        "database": "",
        "sslmode": "disable",
        "timezone": "Asia/Shanghai",
        "max_idle_conns": 100,
        "max_open_conns": 100,
        "conn_max_idle_time_minutes": 10,
        "conn_max_lifetime_minutes": 30,
        "connect_timeout_seconds": 10.0,
    },
    "codes": {
        "base_dir": ".",
        "paths": {
            "apiserver": "services/apiserver/codes/apiserver.go",
        },
    },
}
