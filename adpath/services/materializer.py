"""Materializer - Creates the missing containers of a DN, root first."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from ..constants import MESSAGES, ActionKind
from ..exceptions import DirectoryError, MaterializationError, UnsupportedOperation
from .path_service import PathSegment

logger = logging.getLogger(__name__)


class DirectoryClient(Protocol):
    """What the materializer needs from a directory service."""

    def exists(self, dn: str) -> bool:
        ...

    def create_container(self, name: str, parent_dn: str) -> None:
        ...


@dataclass
class ActionRecord:
    """Outcome for a single segment."""
    segment: PathSegment
    kind: ActionKind
    parent: str
    detail: str = ""
    error: Optional[Exception] = None
    simulated: bool = False

    @property
    def dn(self) -> str:
        return f"{self.segment.raw},{self.parent}"


@dataclass
class MaterializeResult:
    """Final path and the ordered action log of one run."""
    final_path: str
    actions: List[ActionRecord] = field(default_factory=list)

    def count(self, kind: ActionKind) -> int:
        return sum(1 for action in self.actions if action.kind == kind)


class PathMaterializer:
    """Walks a build plan and creates whatever containers are missing."""

    def __init__(self, client: DirectoryClient, quiet: bool = False, dry_run: bool = False):
        """Initialize materializer.

        Args:
            client: Directory client used to query and create containers
            quiet: Log per-segment outcomes at DEBUG instead of INFO
            dry_run: Report what would be created without creating anything
        """
        self.client = client
        self.quiet = quiet
        self.dry_run = dry_run

    def _record(self, actions: List[ActionRecord], action: ActionRecord) -> ActionRecord:
        actions.append(action)
        if action.kind == ActionKind.FAILED:
            logger.error(f"{action.segment.raw} under {action.parent}: {action.detail}")
        else:
            level = logging.DEBUG if self.quiet else logging.INFO
            logger.log(level, f"[{action.kind.value}] {action.dn}"
                       + (f" ({action.detail})" if action.detail else ""))
        return action

    def _fail(self, actions: List[ActionRecord], segment: PathSegment, prefix: str,
              error: DirectoryError, message: str) -> MaterializationError:
        self._record(actions, ActionRecord(
            segment=segment,
            kind=ActionKind.FAILED,
            parent=prefix,
            detail=message.format(error=error),
            error=error,
        ))
        return MaterializationError(segment, prefix, list(actions), error)

    def _skip_rest(self, actions: List[ActionRecord], remaining: List[PathSegment],
                   prefix: str, missing_parent: str) -> None:
        """Record the segments below a non-container that was never placed."""
        for segment in remaining:
            self._record(actions, ActionRecord(
                segment=segment,
                kind=ActionKind.UNSUPPORTED_SKIP,
                parent=prefix,
                detail=MESSAGES['PARENT_NOT_PLACED'].format(parent=missing_parent),
                simulated=self.dry_run,
            ))

    def materialize(self, plan: List[PathSegment], root: str) -> MaterializeResult:
        """Ensure every container in the plan exists beneath root.

        Segments are handled strictly in plan order. The current path only
        advances past segments that exist or were created. A missing
        non-container halts descent; the remaining segments are reported as
        skipped and the run still succeeds.

        Args:
            plan: Segments in root-to-leaf order
            root: Base DN the first segment lives under

        Returns:
            MaterializeResult with the deepest placed path and the action log

        Raises:
            MaterializationError: If a query or creation fails. Containers
                created before the failure are left in place.
        """
        current_path = root
        actions: List[ActionRecord] = []
        # Set once a container was only pretended to be created
        below_simulated = False

        for index, segment in enumerate(plan):
            candidate = f"{segment.raw},{current_path}"

            if below_simulated:
                exists = False
            else:
                try:
                    exists = self.client.exists(candidate)
                except DirectoryError as e:
                    raise self._fail(actions, segment, current_path, e,
                                     MESSAGES['EXISTS_FAILED']) from e

            if exists:
                self._record(actions, ActionRecord(
                    segment=segment,
                    kind=ActionKind.EXISTS,
                    parent=current_path,
                    detail=MESSAGES['EXISTS'],
                ))
                current_path = candidate
                continue

            if not segment.is_container:
                unsupported = UnsupportedOperation(segment)
                logger.log(logging.DEBUG if self.quiet else logging.WARNING,
                           f"{unsupported}; leaving {current_path} as deepest path")
                self._record(actions, ActionRecord(
                    segment=segment,
                    kind=ActionKind.UNSUPPORTED_SKIP,
                    parent=current_path,
                    detail=MESSAGES['UNSUPPORTED'],
                    error=unsupported,
                    simulated=self.dry_run,
                ))
                self._skip_rest(actions, plan[index + 1:], current_path, candidate)
                break

            if self.dry_run:
                self._record(actions, ActionRecord(
                    segment=segment,
                    kind=ActionKind.CREATED,
                    parent=current_path,
                    detail=MESSAGES['WOULD_CREATE'],
                    simulated=True,
                ))
                below_simulated = True
                current_path = candidate
                continue

            try:
                self.client.create_container(segment.name, current_path)
            except DirectoryError as e:
                raise self._fail(actions, segment, current_path, e,
                                 MESSAGES['CREATE_FAILED']) from e

            self._record(actions, ActionRecord(
                segment=segment,
                kind=ActionKind.CREATED,
                parent=current_path,
                detail=MESSAGES['CREATED'],
            ))
            current_path = candidate

        return MaterializeResult(final_path=current_path, actions=actions)


def materialize(plan: List[PathSegment], root: str, client: DirectoryClient,
                quiet: bool = False, dry_run: bool = False) -> MaterializeResult:
    """Run a PathMaterializer once over plan."""
    return PathMaterializer(client, quiet=quiet, dry_run=dry_run).materialize(plan, root)
