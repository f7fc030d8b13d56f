"""Default processing stage for merge request events."""
import logging
from typing import Any

from ..context import RequestContext
from ..scm_config import parse_file
from .config_resolver import ConfigSource, ResolvedConfig
from .protocols import RemoteConfigSource

logger = logging.getLogger(__name__)


class ConfigCheckProcessor:
    """Hands the event to the rule engine once a configuration is usable.

    Rule evaluation happens elsewhere; this stage makes sure a config that
    failed to parse during resolution is read again and its error raised, so
    the failure is reported where the user sees it.
    """

    def __init__(self, config_file: str):
        self.config_file = config_file

    async def process_mr(
        self,
        ctx: RequestContext,
        client: RemoteConfigSource,
        resolved: ResolvedConfig,
        payload: Any,
    ) -> None:
        log = ctx.logger(logger)

        if resolved.source is ConfigSource.UNRESOLVED:
            file = await client.get_remote_config(ctx.project_id, self.config_file, ctx.commit_sha)
            if file is None:
                raise RuntimeError(f"config file {self.config_file} disappeared at {ctx.commit_sha}")
            # Raises ConfigParseError with the same message seen during resolution
            config = parse_file(file)
        else:
            config = resolved.config

        if config is None:
            raise RuntimeError("no configuration available for merge request")

        object_kind = payload.get("object_kind", "unknown") if isinstance(payload, dict) else "unknown"
        log.info(
            f"Processing {object_kind} event with {resolved.source.value} config: "
            f"{len(config.actions)} actions, {len(config.label)} labels"
            + (" (dry run)" if config.dry_run else "")
        )
