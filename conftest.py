"""Root conftest: pins relay settings before any module imports."""
from __future__ import annotations

import os

_TEST_ENV = {
    "APP_ENV": "local",
    "STATIC_DIR": "",
    "LOG_LEVEL": "debug",
    "ALLOW_UNKNOWN_ROLE": "true",
    "NOTIFY_DISPLAY_ROUTE_FAILURE": "false",
}

for key, value in _TEST_ENV.items():
    os.environ.setdefault(key, value)
