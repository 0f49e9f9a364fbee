"""Exceptions raised by the Sunflower core.

All custom exceptions inherit from SunflowerError so commands can catch
every app-specific failure in one place. The base class provides:

- `user_message`: Human-friendly message for display
- `technical_message`: Detailed message for logging
- `recoverable`: Whether retrying may succeed
- `recovery_hint`: Optional suggestion for how to fix the issue
"""

from typing import Optional


class SunflowerError(Exception):
    """Base exception for all Sunflower errors."""

    def __init__(
        self,
        user_message: str,
        technical_message: Optional[str] = None,
        recoverable: bool = False,
        recovery_hint: Optional[str] = None,
    ):
        super().__init__(user_message)
        self.user_message = user_message
        self.technical_message = technical_message or user_message
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint

    def __str__(self) -> str:
        return self.user_message

    def get_full_message(self) -> str:
        """Get complete error message with recovery hint."""
        msg = self.user_message
        if self.recovery_hint:
            msg += f"\n\nHint: {self.recovery_hint}"
        return msg


class DiscoveryError(SunflowerError):
    """No hub answered the discovery broadcast in time."""

    def __init__(self, timeout: float, technical_message: Optional[str] = None):
        super().__init__(
            f"No Sunflower hub found within {timeout:g}s",
            technical_message=technical_message,
            recoverable=True,
            recovery_hint="Check the hub is switched on, or set its IP manually with 'set-ip'",
        )
        self.timeout = timeout


class HubUnreachable(SunflowerError):
    """The hub did not acknowledge a heartbeat."""

    def __init__(self, ip: str, technical_message: Optional[str] = None):
        super().__init__(
            f"Hub at {ip or '(no IP set)'} is not responding",
            technical_message=technical_message,
            recoverable=True,
            recovery_hint="Check the hub is connected and switched on, then run 'scan'",
        )
        self.ip = ip


class ProtocolError(SunflowerError):
    """The hub sent a reply that could not be parsed."""

    def __init__(self, reply: str, technical_message: Optional[str] = None):
        super().__init__(
            "Unexpected reply from hub",
            technical_message=technical_message or f"Could not parse hub reply: {reply!r}",
        )
        self.reply = reply


class HubCommandError(SunflowerError, OSError):
    """A single command failed or timed out."""

    def __init__(self, command: str, technical_message: Optional[str] = None):
        SunflowerError.__init__(
            self,
            f"Hub command failed: {command}",
            technical_message=technical_message,
            recoverable=True,
        )
        self.command = command


class NotFoundError(SunflowerError, KeyError):
    """An unknown preset or light was referenced."""

    def __init__(self, kind: str, name: str, suggestions: Optional[list[str]] = None):
        hint = None
        if suggestions:
            hint = "Did you mean: " + ", ".join(suggestions)
        SunflowerError.__init__(self, f"Unknown {kind}: {name!r}", recovery_hint=hint)
        self.kind = kind
        self.name = name
        self.suggestions = suggestions or []

    def __str__(self) -> str:
        # KeyError would otherwise quote the message
        return self.user_message


class PresetActivationError(SunflowerError):
    """One or more lights failed while a preset was being activated.

    Lights that succeeded keep their new state; activation is not atomic.
    """

    def __init__(self, preset: str, failures: list[tuple[str, HubCommandError]]):
        ids = ", ".join(light_id for light_id, _ in failures)
        super().__init__(
            f"Preset {preset!r}: {len(failures)} light(s) failed ({ids})",
            technical_message="; ".join(f"{i}: {e.technical_message}" for i, e in failures),
            recoverable=True,
            recovery_hint="Activate the preset again once the hub is responding",
        )
        self.preset = preset
        self.failures = failures


class BatchApplyError(SunflowerError):
    """One or more lights failed during a batched state change."""

    def __init__(self, failures: list[tuple[str, HubCommandError]]):
        ids = ", ".join(light_id for light_id, _ in failures)
        super().__init__(
            f"{len(failures)} light(s) failed to update ({ids})",
            technical_message="; ".join(f"{i}: {e.technical_message}" for i, e in failures),
            recoverable=True,
        )
        self.failures = failures
