from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class DispatcherSettings(BaseSettings):
    """Runtime settings for a dispatcher.

    All settings can be configured via environment variables with the
    SEQUENCER_ prefix. For example:
    - SEQUENCER_MAX_COMMANDS_PER_RUN=10000
    - SEQUENCER_FAIL_ON_REJECTION=true
    - SEQUENCER_LOG_COMMANDS=true

    Attributes:
        max_commands_per_run: Upper bound on commands processed by a single
            run(). None leaves the drain unbounded, so a policy cycle that
            keeps re-issuing commands never returns.
        fail_on_rejection: Raise CommandRejected when the domain refuses a
            command. When False the rejection is logged and the command
            behaves as a no-op.
        log_commands: Log every command through LoggingMiddleware.
        log_level: Level used by LoggingMiddleware.

    Example:
        >>> settings = DispatcherSettings(max_commands_per_run=1_000)
        >>> dispatcher = builder.with_settings(settings).build()
    """

    max_commands_per_run: int | None = Field(default=None, ge=1)
    fail_on_rejection: bool = False
    log_commands: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    model_config = {"env_prefix": "SEQUENCER_"}
