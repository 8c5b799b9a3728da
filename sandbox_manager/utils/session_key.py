# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

from typing import Optional

AGENT_SESSION_PREFIX = "agent"


def resolve_sandbox_agent_id(session_key: Optional[str]) -> Optional[str]:
    # "agent:<id>" or "agent:<id>:<suffix>"; anything else uses the default config
    if not session_key:
        return None
    parts = session_key.strip().split(":")
    if len(parts) < 2 or parts[0].strip().lower() != AGENT_SESSION_PREFIX:
        return None
    return normalize_agent_id(parts[1])


def normalize_agent_id(agent_id: Optional[str]) -> Optional[str]:
    if agent_id is None:
        return None
    normalized = agent_id.strip().lower()
    return normalized or None
