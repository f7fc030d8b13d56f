"""Pick the rule configuration for a merge request."""
import logging
from dataclasses import dataclass
from enum import Enum

from ..context import RequestContext
from ..errors import AcknowledgedError
from ..gitlab_client import GitLabClientError
from ..scm_config import Config, ConfigParseError, parse_file
from .protocols import RemoteConfigSource

logger = logging.getLogger(__name__)


class ConfigSource(str, Enum):
    REMOTE = "remote"
    GLOBAL = "global"
    # Remote file exists but did not parse. The processing stage re-reads it
    # and reports the error through its own channel.
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class ResolvedConfig:
    source: ConfigSource
    config: Config | None = None
    error: str | None = None

    @classmethod
    def remote(cls, config: Config) -> "ResolvedConfig":
        return cls(ConfigSource.REMOTE, config)

    @classmethod
    def from_global(cls, config: Config | None) -> "ResolvedConfig":
        return cls(ConfigSource.GLOBAL, config)

    @classmethod
    def unresolved(cls, error: str) -> "ResolvedConfig":
        return cls(ConfigSource.UNRESOLVED, None, error)


class ConfigResolver:
    """Chooses between the project's own config file and the global fallback.

    - remote file found: parse it; a parse failure is not fatal here
    - remote file missing or fetch failed: use the global config if one is set
    - nothing usable and no global config: acknowledge the webhook with the error
    """

    def __init__(
        self,
        client: RemoteConfigSource,
        config_file: str,
        global_config_file: str = "",
        global_config: Config | None = None,
    ):
        """Initialize config resolver.

        Args:
            client: Source of remote config files
            config_file: Path of the config file inside each project
            global_config_file: Path of the global fallback; empty if not configured
            global_config: Global fallback, already loaded at startup
        """
        self.client = client
        self.config_file = config_file
        self.global_config_file = global_config_file
        self.global_config = global_config

    def has_fallback(self) -> bool:
        return bool(self.global_config_file)

    async def resolve(self, ctx: RequestContext) -> ResolvedConfig:
        """Resolve the configuration for the merge request in ctx.

        Raises:
            AcknowledgedError: If no configuration can be found and there is no fallback
        """
        log = ctx.logger(logger)

        file: bytes | None = None
        try:
            file = await self.client.get_remote_config(ctx.project_id, self.config_file, ctx.commit_sha)
        except GitLabClientError as e:
            if not self.has_fallback():
                raise AcknowledgedError(str(e)) from e
            log.warning(f"Remote config fetch failed, using global config: {e}")

        if file is not None:
            try:
                config = parse_file(file)
            except ConfigParseError as e:
                log.warning(f"Config file {self.config_file} did not parse, deferring to processing: {e}")
                return ResolvedConfig.unresolved(str(e))

            log.debug(f"Using config file {self.config_file} from the project")
            return ResolvedConfig.remote(config)

        if not self.has_fallback():
            raise AcknowledgedError(f"could not find config file {self.config_file} at {ctx.commit_sha}")

        log.debug(f"Using global config from {self.global_config_file}")
        return ResolvedConfig.from_global(self.global_config)
