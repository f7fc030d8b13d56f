"""Protocols (interfaces) for dependency inversion."""

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..context import RequestContext
    from .config_resolver import ResolvedConfig


class RemoteConfigSource(Protocol):
    """Protocol for fetching a config file from a project."""

    async def get_remote_config(self, project: str, path: str, ref: str) -> bytes | None:
        """Fetch a file at a commit.

        Returns:
            File contents, or None if the file does not exist at that commit
        """
        ...


class MergeRequestProcessor(Protocol):
    """Protocol for the rule engine entry point."""

    async def process_mr(
        self,
        ctx: "RequestContext",
        client: RemoteConfigSource,
        resolved: "ResolvedConfig",
        payload: Any,
    ) -> None:
        """Evaluate rules for the merge request described by ctx.

        Args:
            ctx: Request correlation context
            client: Shared GitLab client
            resolved: Configuration picked by the resolver (possibly unresolved)
            payload: Full, untyped webhook payload

        Raises:
            Exception: Any failure; it is reported back with 200 OK
        """
        ...
