import asyncio
import unittest
from unittest.mock import AsyncMock, MagicMock

from navi.config import Preferences
from navi.core.action_dispatcher import ActionDispatcher, normalize_url
from navi.core.confirmations import PendingConfirmationStore
from navi.core.intent_classifier import classify
from navi.core.workflow import WorkflowRunner
from navi.models import (
    ActionError,
    ActionFailed,
    ActionOk,
    Candidate,
    CandidateKind,
    ChatReply,
    ErrorKind,
    PendingConfirmation,
)

BACKEND_METHODS = (
    "open_application", "open_path", "focus_process", "terminate_process",
    "run_calculation", "open_web_search_or_url", "run_system_action",
    "open_terminal", "run_command", "open_in_ide",
)


def make_backend():
    backend = MagicMock()
    for name in BACKEND_METHODS:
        setattr(backend, name, AsyncMock(return_value=ActionOk(message=name)))
    backend.invoke_chat = AsyncMock(return_value=ChatReply(message="Hello!"))
    return backend


def make_source(*names):
    source = MagicMock()
    source.search_installed_apps = AsyncMock(
        return_value=[Candidate(display_name=n, action_key=f"/apps/{n}") for n in names]
    )
    return source


class TestNormalizeUrl(unittest.TestCase):

    def test_schemes(self):
        self.assertEqual(normalize_url("github.com"), "https://github.com")
        self.assertEqual(normalize_url("localhost:3000"), "http://localhost:3000")
        self.assertEqual(normalize_url("http://x.org"), "http://x.org")
        self.assertEqual(normalize_url("ftp://files.example.com"), "ftp://files.example.com")


class TestActionDispatcher(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.backend = make_backend()
        self.source = make_source("Code", "Codium")
        self.runner = WorkflowRunner(
            self.backend,
            preferences_loader=Preferences,
            path_exists=lambda path: False,
        )
        self.store = PendingConfirmationStore(ttl_seconds=300)
        self.dispatcher = ActionDispatcher(self.backend, self.source, runner=self.runner,
                                           store=self.store, timeout=1.0)

    async def test_routes_candidate_kinds(self):
        await self.dispatcher.dispatch(Candidate(display_name="Lock Screen", action_key="lock",
                                                 kind=CandidateKind.SYSTEM))
        self.backend.run_system_action.assert_awaited_once_with("lock")

        await self.dispatcher.dispatch(Candidate(display_name="slack", action_key="slack",
                                                 kind=CandidateKind.QUIT))
        self.backend.terminate_process.assert_awaited_once_with("slack")

        await self.dispatcher.dispatch(Candidate(display_name="code", action_key="code",
                                                 kind=CandidateKind.SWITCH))
        self.backend.focus_process.assert_awaited_once_with("code")

        app = Candidate(display_name="Code", action_key="/apps/Code")
        await self.dispatcher.dispatch(app)
        self.backend.open_application.assert_awaited_once_with(app)

    async def test_url_intent_is_normalized(self):
        result = await self.dispatcher.dispatch(classify("github.com"))
        self.assertIsInstance(result, ActionOk)
        self.backend.open_web_search_or_url.assert_awaited_once_with("https://github.com")

    async def test_app_intent_opens_best_match(self):
        await self.dispatcher.dispatch(classify("open cod"))
        opened = self.backend.open_application.await_args.args[0]
        self.assertEqual(opened.display_name, "Code")

    async def test_app_intent_without_match_opens_by_name(self):
        self.source.search_installed_apps.return_value = []
        await self.dispatcher.dispatch(classify("obscure-tool"))
        opened = self.backend.open_application.await_args.args[0]
        self.assertEqual(opened.display_name, "obscure-tool")
        self.assertEqual(opened.action_key, "")

    async def test_quit_without_target_is_invalid(self):
        result = await self.dispatcher.dispatch(classify("quit"))
        self.assertIsInstance(result, ActionError)
        self.assertEqual(result.kind, ErrorKind.INVALID)
        self.backend.terminate_process.assert_not_awaited()

    async def test_concurrent_dispatch_is_busy(self):
        release = asyncio.Event()

        async def slow(expression):
            await release.wait()
            return ActionOk(message="4")

        self.backend.run_calculation = AsyncMock(side_effect=slow)
        first = asyncio.create_task(self.dispatcher.dispatch(classify("2+2")))
        while not self.dispatcher.busy:
            await asyncio.sleep(0)

        second = await self.dispatcher.dispatch(classify("3+3"))
        self.assertEqual(second.kind, ErrorKind.BUSY)

        release.set()
        self.assertIsInstance(await first, ActionOk)
        self.assertFalse(self.dispatcher.busy)

    async def test_timeout(self):
        async def hang(expression):
            await asyncio.sleep(10)

        self.backend.run_calculation = AsyncMock(side_effect=hang)
        self.dispatcher.timeout = 0.01
        result = await self.dispatcher.dispatch(classify("2+2"))
        self.assertEqual(result.kind, ErrorKind.TIMEOUT)
        self.assertFalse(self.dispatcher.busy)

    async def test_collaborator_exception_becomes_failed(self):
        self.backend.run_calculation = AsyncMock(side_effect=RuntimeError("boom"))
        result = await self.dispatcher.dispatch(classify("2+2"))
        self.assertEqual(result.kind, ErrorKind.FAILED)
        self.assertEqual(result.message, "boom")

    async def test_chat_failure_keeps_kind(self):
        self.backend.invoke_chat = AsyncMock(side_effect=ActionFailed("offline", ErrorKind.UNAVAILABLE))
        result = await self.dispatcher.dispatch(classify("/chat hi"))
        self.assertEqual(result.kind, ErrorKind.UNAVAILABLE)

    async def test_chat_reply(self):
        result = await self.dispatcher.dispatch(classify("/chat hi"))
        self.backend.invoke_chat.assert_awaited_once_with("hi")
        self.assertEqual(result.message, "Hello!")

    async def test_missing_path_needs_confirmation(self):
        self.backend.open_path = AsyncMock(side_effect=[
            ActionError(kind=ErrorKind.NOT_FOUND, message="Path not found"),
            ActionOk(message="Opened /tmp/nope"),
        ])
        result = await self.dispatcher.dispatch(classify("/tmp/nope"))
        self.assertIsInstance(result, PendingConfirmation)
        self.assertTrue(result.id.startswith("confirm_"))
        self.assertEqual(result.context, {"path": "/tmp/nope"})
        self.assertEqual(len(self.store), 1)

        accepted = await self.dispatcher.resolve_confirmation(result.id, True)
        self.assertEqual(accepted.message, "Opened /tmp/nope")
        self.backend.open_path.assert_awaited_with("/tmp/nope", require_exists=False)

    async def test_declined_confirmation_cannot_be_replayed(self):
        self.backend.open_path = AsyncMock(
            return_value=ActionError(kind=ErrorKind.NOT_FOUND, message="Path not found")
        )
        pending = await self.dispatcher.dispatch(classify("/tmp/nope"))

        declined = await self.dispatcher.resolve_confirmation(pending.id, False)
        self.assertEqual(declined.message, "Cancelled")

        replay = await self.dispatcher.resolve_confirmation(pending.id, True)
        self.assertEqual(replay.kind, ErrorKind.NOT_FOUND)
        self.assertEqual(self.backend.open_path.await_count, 1)

    async def test_discarded_confirmation_cannot_be_accepted(self):
        self.backend.open_path = AsyncMock(
            return_value=ActionError(kind=ErrorKind.NOT_FOUND, message="Path not found")
        )
        pending = await self.dispatcher.dispatch(classify("/tmp/nope"))

        self.assertTrue(self.dispatcher.discard_confirmation(pending.id))
        self.assertFalse(self.dispatcher.discard_confirmation(pending.id))
        self.assertEqual(len(self.store), 0)

        result = await self.dispatcher.resolve_confirmation(pending.id, True)
        self.assertEqual(result.kind, ErrorKind.NOT_FOUND)
        self.assertEqual(self.backend.open_path.await_count, 1)

    async def test_open_path_anyway_skips_existence_check(self):
        result = await self.dispatcher.open_path_anyway("/tmp/nope")
        self.assertIsInstance(result, ActionOk)
        self.backend.open_path.assert_awaited_once_with("/tmp/nope", require_exists=False)

    async def test_open_path_anyway_respects_in_flight_guard(self):
        release = asyncio.Event()

        async def slow(expression):
            await release.wait()
            return ActionOk(message="4")

        self.backend.run_calculation = AsyncMock(side_effect=slow)
        first = asyncio.create_task(self.dispatcher.dispatch(classify("2+2")))
        while not self.dispatcher.busy:
            await asyncio.sleep(0)

        second = await self.dispatcher.open_path_anyway("/tmp/nope")
        self.assertEqual(second.kind, ErrorKind.BUSY)
        self.backend.open_path.assert_not_awaited()

        release.set()
        await first

    async def test_open_path_anyway_timeout(self):
        async def hang(path, require_exists=True):
            await asyncio.sleep(10)

        self.backend.open_path = AsyncMock(side_effect=hang)
        self.dispatcher.timeout = 0.01
        result = await self.dispatcher.open_path_anyway("/tmp/nope")
        self.assertEqual(result.kind, ErrorKind.TIMEOUT)

    async def test_expired_confirmation(self):
        clock = [1000.0]
        self.dispatcher.store = PendingConfirmationStore(ttl_seconds=300, clock=lambda: clock[0])
        self.backend.open_path = AsyncMock(
            return_value=ActionError(kind=ErrorKind.NOT_FOUND, message="Path not found")
        )
        pending = await self.dispatcher.dispatch(classify("/tmp/nope"))
        clock[0] += 301
        result = await self.dispatcher.resolve_confirmation(pending.id, True)
        self.assertEqual(result.kind, ErrorKind.NOT_FOUND)

    async def test_chat_workflow_pauses_and_resumes(self):
        self.backend.invoke_chat = AsyncMock(return_value=ChatReply(
            message="Opening it",
            workflow={"steps": [
                {"type": "open_file", "value": "/nope/readme.md"},
                {"type": "open_browser", "value": "https://docs.python.org"},
            ]},
        ))
        pending = await self.dispatcher.dispatch(classify("/chat open the readme"))
        self.assertIsInstance(pending, PendingConfirmation)
        self.assertEqual(pending.context["path"], "/nope/readme.md")
        self.backend.open_path.assert_not_awaited()

        done = await self.dispatcher.resolve_confirmation(pending.id, True)
        self.assertIsInstance(done, ActionOk)
        self.assertEqual(done.message, "Workflow completed: 2/2 steps succeeded")
        self.backend.open_path.assert_awaited_once_with("/nope/readme.md", require_exists=False)
        self.backend.open_web_search_or_url.assert_awaited_once_with("https://docs.python.org")


if __name__ == "__main__":
    unittest.main()
