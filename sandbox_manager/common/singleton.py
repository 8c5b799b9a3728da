# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

"""Thread-safe singleton metaclass."""

import threading
from typing import Any, Dict


class SingletonMeta(type):
    """Metaclass that keeps one instance per class."""

    _instances: Dict[type, Any] = {}
    _lock = threading.Lock()

    def __call__(cls, *args, **kwargs):
        if cls not in cls._instances:
            with cls._lock:
                if cls not in cls._instances:
                    cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]

    @classmethod
    def reset_all_instances(mcs) -> None:
        """Drop every cached instance. Used by tests."""
        with mcs._lock:
            mcs._instances.clear()
