"""Policy and permissions for tool execution."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RiskLevel(str, Enum):
    READ = "read"
    MUTATING = "mutating"


class Decision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True)
class PolicyDecision:
    decision: Decision
    reason: str


class ToolPolicy:
    def __init__(
        self,
        read_only: bool = False,
        deny_tools: set[str] | frozenset[str] | None = None,
    ) -> None:
        self._read_only = read_only
        self._deny_tools = set(deny_tools or ())

    def evaluate(self, tool_name: str, risk_level: RiskLevel) -> PolicyDecision:
        if tool_name in self._deny_tools:
            return PolicyDecision(
                Decision.DENY, f"Tool is blocked by policy: {tool_name}"
            )
        if risk_level is RiskLevel.MUTATING and self._read_only:
            return PolicyDecision(
                Decision.DENY, f"Server is read-only; {tool_name} is not allowed"
            )
        return PolicyDecision(Decision.ALLOW, "Allowed")
