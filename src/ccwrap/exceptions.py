"""Exception types raised by the compiler wrapper."""

from __future__ import annotations

from typing import Sequence

from ccwrap.command import QuotingStyle, quote


class NeverThrown(RuntimeError):
    """Raised when a code path that should be unreachable is reached.

    The optional env payload carries whatever context the call site had; it
    is metadata only and is rendered into the message for diagnostics.
    """

    def __init__(self, reason: str, *, env: dict[str, object] | None = None):
        self.reason = reason
        self.env = dict(env or {})
        detail = ", ".join(f"{key}={value!r}" for key, value in sorted(self.env.items()))
        super().__init__(f"{reason} ({detail})" if detail else reason)


class CompilationCommandError(RuntimeError):
    """The compiler driver reported an error while explaining the invocation.

    ``clang -###`` almost never fails on its own account, so an error line in
    its output means the original compilation command is broken.
    """

    def __init__(self, program: str, args: Sequence[str], diagnostic: str):
        self.program = program
        self.args_list = tuple(args)
        self.diagnostic = diagnostic
        super().__init__(self.render())

    def render(self) -> str:
        rendered_args = " ".join(
            quote(QuotingStyle.SINGLE_QUOTES, arg) for arg in self.args_list
        )
        return (
            "Failed to execute compilation command:\n"
            f"{quote(QuotingStyle.SINGLE_QUOTES, self.program)} {rendered_args}\n"
            "\n"
            "Error message:\n"
            f"{self.diagnostic}\n"
            "\n"
            "*** ccwrap needs a working compilation command to run."
        )


class ConfigError(ValueError):
    """Invalid value in ccwrap.toml or the CCWRAP_* environment."""
