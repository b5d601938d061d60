"""Report orchestrator: one watcher report action from request to history.

The orchestrator renders the mail subject and body, captures the target
page through a BrowserSession, mails the artifact and records the outcome
in the history store. No exception leaves ``ReportOrchestrator.run``: a
broken report must not take down the watcher that fired it.
"""

import asyncio
import json
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .capture.browser_session import BrowserSession
from .config.loader import ReportSettings, merge_action_overrides
from .errors import (
    HistoryWriteError,
    ReportConfigurationError,
    ReportError,
    ReportsDisabledError,
)
from .mail.client import MailClient, MailMessage
from .models.report import (
    AttachmentPart,
    HistoryRecord,
    ReportAction,
    ReportConfig,
    ReportResult,
    WatcherTask,
)
from .packaging import build_attachment, derive_filename
from .persistence.history import HistoryStore
from .templating import render

logger = logging.getLogger(__name__)

DEFAULT_BODY_TEMPLATE = "Series Report {{payload._id}}: {{payload.hits.total}}"
DEFAULT_PRIORITY = "INFO"
STATELESS_MESSAGE = "stateless report does not save data"

Renderer = Callable[[str, Dict[str, Any]], str]


def serialize_error(error: BaseException) -> str:
    """Serialize an exception for the fallback history record."""
    if isinstance(error, ReportError):
        data = error.to_dict()
    else:
        data = {"error": type(error).__name__, "message": str(error)}
    return json.dumps(data, default=str)


class ReportOrchestrator:
    """Runs report actions end to end."""

    def __init__(
        self,
        settings: ReportSettings,
        mail_client: MailClient,
        history_store: HistoryStore,
        renderer: Renderer = render,
        session_factory: Callable[[ReportConfig], BrowserSession] = BrowserSession
    ):
        """Initialize report orchestrator.

        Args:
            settings: Process-wide settings; never modified by a run
            mail_client: Transport used to deliver reports
            history_store: Store receiving the run outcome
            renderer: Template renderer for subject and body
            session_factory: Builds the browser session for a resolved config
        """
        self.settings = settings
        self.mail_client = mail_client
        self.history_store = history_store
        self.renderer = renderer
        self.session_factory = session_factory

    async def run(
        self,
        task: WatcherTask,
        action: ReportAction,
        action_name: str,
        payload: Optional[Dict[str, Any]] = None
    ) -> Optional[ReportResult]:
        """Execute a report action.

        Args:
            task: Watcher that fired the action
            action: Report action definition
            action_name: Name of the action within the watcher
            payload: Search response the watcher fired on

        Returns:
            Result of the run, or None when the run failed (failures are logged)
        """
        try:
            return await self._run(task, action, action_name, payload or {})
        except Exception as e:
            logger.error(f"Report action '{action_name}' of watcher {task.id} failed: {e}")
            logger.debug("Report failure details", exc_info=True)
            return None

    async def run_many(
        self,
        jobs: Iterable[Tuple[WatcherTask, ReportAction, str, Optional[Dict[str, Any]]]]
    ) -> List[Optional[ReportResult]]:
        """Execute several report actions concurrently, one browser each.

        Args:
            jobs: ``(task, action, action_name, payload)`` tuples

        Returns:
            One result per job, in job order
        """
        return await asyncio.gather(*(self.run(*job) for job in jobs))

    async def _run(
        self,
        task: WatcherTask,
        action: ReportAction,
        action_name: str,
        payload: Dict[str, Any]
    ) -> ReportResult:
        config = self.settings.report
        if not config.active:
            raise ReportsDisabledError()

        snapshot = action.snapshot
        if not snapshot.url:
            raise ReportConfigurationError("Report Disabled: No URL Settings!", field="snapshot.url")

        subject, text = self._render_message(action, action_name, payload)
        priority = action.priority or DEFAULT_PRIORITY
        logger.debug(f"subject: {subject}, body: {text}")

        filename = derive_filename(snapshot.name, snapshot.type)
        run_config = merge_action_overrides(config, action)

        async with self.session_factory(run_config) as session:
            await session.open(snapshot.url, run_config.executable_path)
            artifact = await session.capture(snapshot.type)

        logger.debug(f"Sending email, watcher {task.id}, text {text}")
        attachment = build_attachment(filename, artifact, snapshot.type)
        await self.mail_client.send(MailMessage(
            text=text,
            from_=action.from_,
            to=action.to,
            subject=subject,
            attachment=attachment,
        ))

        if action.stateless:
            logger.debug(STATELESS_MESSAGE)
            return ReportResult(message=STATELESS_MESSAGE)

        record_id = await self._save_history(task, action_name, priority, text, attachment)
        return ReportResult(id=record_id)

    def _render_message(
        self,
        action: ReportAction,
        action_name: str,
        payload: Dict[str, Any]
    ) -> Tuple[str, str]:
        subject_template = action.subject or f"{self.settings.app_name}: {action_name}"
        body_template = action.body or DEFAULT_BODY_TEMPLATE

        context = {'payload': payload}
        return self.renderer(subject_template, context), self.renderer(body_template, context)

    async def _save_history(
        self,
        task: WatcherTask,
        action_name: str,
        priority: str,
        text: str,
        attachment: List[AttachmentPart]
    ) -> int:
        """Write the report record, or the reduced fallback record if that fails.

        Raises:
            HistoryWriteError: If the fallback write fails as well
        """
        record = HistoryRecord(
            title=task.title,
            action_type=action_name,
            level=priority,
            message=text,
            attachment=attachment,
            report=True,
        )

        try:
            return await self.history_store.write(record)
        except Exception as e:
            logger.warning(f"Failed to save report history for watcher {task.id}: {e}")
            fallback = HistoryRecord.fallback(task.title, action_name, serialize_error(e))

        try:
            return await self.history_store.write(fallback)
        except Exception as e:
            raise HistoryWriteError(str(e), fallback=True) from e
