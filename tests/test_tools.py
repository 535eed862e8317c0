import asyncio
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import httpx

from navi.models import ActionError, ActionOk, Candidate, ErrorKind
from navi.tools.ai.chat import ChatTool
from navi.tools.base import BaseTool, ToolInstanceRegistry, ToolOutput
from navi.tools.file_system.operations import PathOpenTool
from navi.tools.loader import load_tools
from navi.tools.system.operations import command_for
from navi.tools.system.terminal import installed_terminals
from navi.tools.web.search import build_search_url, looks_like_url
from navi.utils.searcher.app_searcher import InstalledAppCatalog, parse_desktop_entry
from navi.utils.searcher.recent_searcher import RecentItemsReader


class EchoTool(BaseTool):
    params = {
        "text": {"type": "string", "required": True},
        "loud": {"type": "boolean", "default": False},
    }

    def get_tool_name(self) -> str:
        return "echo"

    async def _execute(self, inputs):
        if inputs["text"] == "explode":
            raise RuntimeError("kaboom")
        text = inputs["text"].upper() if self.get_input(inputs, "loud") else inputs["text"]
        return ToolOutput(success=True, data={"text": text}, message=text)


class TestBaseTool(unittest.TestCase):

    def test_to_result(self):
        ok = ToolOutput(success=True, data={"a": 1}, message="fine").to_result()
        self.assertEqual(ok, ActionOk(message="fine", data={"a": 1}))

        err = ToolOutput(success=False, data={}, error="gone", error_kind=ErrorKind.NOT_FOUND).to_result()
        self.assertIsInstance(err, ActionError)
        self.assertEqual(err.kind, ErrorKind.NOT_FOUND)

    def test_validation(self):
        tool = EchoTool()
        missing = asyncio.run(tool.execute({}))
        self.assertEqual(missing.error_kind, ErrorKind.INVALID)

        wrong_type = asyncio.run(tool.execute({"text": "hi", "loud": "yes"}))
        self.assertIn("must be boolean", wrong_type.error)

        loud = asyncio.run(tool.execute({"text": "hi", "loud": True}))
        self.assertEqual(loud.data["text"], "HI")

    def test_exceptions_become_failed_output(self):
        output = asyncio.run(EchoTool().execute({"text": "explode"}))
        self.assertFalse(output.success)
        self.assertEqual(output.error, "kaboom")
        self.assertEqual(output.error_kind, ErrorKind.FAILED)

    def test_loader_registers_every_tool(self):
        registry = load_tools(InstalledAppCatalog(scanner=list), registry=ToolInstanceRegistry())
        self.assertEqual(set(registry.list_tools()), {
            "app_open", "path_open", "web_open", "calculate", "system_action",
            "process_focus", "process_quit", "terminal_open", "command_run", "ide_open", "chat",
        })


class TestPathOpenTool(unittest.TestCase):

    def test_missing_path_is_not_found(self):
        output = asyncio.run(PathOpenTool().execute({"path": "/definitely/not/here/navi"}))
        self.assertEqual(output.error_kind, ErrorKind.NOT_FOUND)

    def test_skip_check_opens_anyway(self):
        with patch("navi.tools.file_system.operations.shell_open") as shell_open:
            output = asyncio.run(PathOpenTool().execute({"path": "/not/here", "require_exists": False}))
        self.assertTrue(output.success)
        shell_open.assert_called_once_with("/not/here")
        self.assertEqual(output.data["type"], "unknown")


class TestWebHelpers(unittest.TestCase):

    def test_search_url(self):
        self.assertEqual(build_search_url("python asyncio", "https://s.test/?q="),
                         "https://s.test/?q=python+asyncio")

    def test_looks_like_url(self):
        self.assertTrue(looks_like_url("https://x.org"))
        self.assertFalse(looks_like_url("x.org"))


class TestSystemCommands(unittest.TestCase):

    def test_platform_tables(self):
        self.assertEqual(command_for("restart", "win32"), ["shutdown", "/r", "/t", "0"])
        self.assertEqual(command_for("suspend", "linux"), None)
        self.assertEqual(command_for("lock", "linux"), ["loginctl", "lock-session"])
        self.assertIsNone(command_for("hibernate", "darwin"))


class TestInstalledTerminals(unittest.TestCase):

    def test_linux_lists_binaries_on_path(self):
        found = {"konsole", "xterm"}
        with patch("navi.tools.system.terminal.shutil.which", side_effect=lambda b: b if b in found else None):
            self.assertEqual(installed_terminals("linux"), ["konsole", "xterm"])

    def test_windows_always_offers_powershell_and_cmd(self):
        with patch("navi.tools.system.terminal.shutil.which", side_effect=lambda b: b if b == "git" else None):
            self.assertEqual(installed_terminals("win32"), ["git-bash", "powershell", "cmd"])

    def test_macos_has_terminal_app(self):
        self.assertEqual(installed_terminals("darwin")[0], "Terminal")


class TestChatTool(unittest.TestCase):

    def run_with_handler(self, handler, text="boot my project"):
        real_client = httpx.AsyncClient

        def client_factory(**kwargs):
            return real_client(transport=httpx.MockTransport(handler), **kwargs)

        with patch("httpx.AsyncClient", side_effect=client_factory):
            return asyncio.run(ChatTool(endpoint="http://assistant.test/chat").execute({"text": text}))

    def test_unconfigured_endpoint_is_unavailable(self):
        output = asyncio.run(ChatTool(endpoint="").execute({"text": "hi"}))
        self.assertEqual(output.error_kind, ErrorKind.UNAVAILABLE)

    def test_reply_with_workflow(self):
        def handler(request):
            self.assertEqual(request.url.path, "/chat")
            return httpx.Response(200, json={
                "message": "Booting",
                "workflow": {"steps": [{"type": "open_terminal", "value": "shop"}]},
            })

        output = self.run_with_handler(handler)
        self.assertTrue(output.success)
        self.assertEqual(output.data["message"], "Booting")
        self.assertEqual(output.data["workflow"]["steps"][0]["value"], "shop")

    def test_http_error(self):
        output = self.run_with_handler(lambda request: httpx.Response(502))
        self.assertFalse(output.success)
        self.assertIn("502", output.error)

    def test_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        output = self.run_with_handler(handler)
        self.assertEqual(output.error_kind, ErrorKind.UNAVAILABLE)


class TestDesktopEntries(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, name, body):
        path = self.dir / name
        path.write_text(body, encoding="utf-8")
        return path

    def test_application_entry(self):
        path = self.write("code.desktop", "[Desktop Entry]\nType=Application\nName=Visual Studio Code\nExec=code %F\n")
        entry = parse_desktop_entry(path)
        self.assertEqual(entry.display_name, "Visual Studio Code")
        self.assertEqual(entry.action_key, str(path))
        self.assertEqual(entry.detail, "code %F")

    def test_hidden_and_malformed_entries(self):
        hidden = self.write("h.desktop", "[Desktop Entry]\nType=Application\nName=Hidden\nNoDisplay=true\n")
        link = self.write("l.desktop", "[Desktop Entry]\nType=Link\nName=Link\n")
        junk = self.write("j.desktop", "no sections here\n")
        for path in (hidden, link, junk):
            self.assertIsNone(parse_desktop_entry(path), path.name)


class TestInstalledAppCatalog(unittest.TestCase):

    def test_scan_is_cached_and_deduplicated(self):
        calls = []

        def scanner():
            calls.append(1)
            return [Candidate(display_name=n) for n in ("Code", "code", "Firefox", "Codium")]

        catalog = InstalledAppCatalog(ttl_seconds=300, scanner=scanner)
        self.assertEqual([a.display_name for a in catalog.all_apps()], ["Code", "Codium", "Firefox"])
        self.assertEqual([a.display_name for a in catalog.search("cod")], ["Code", "Codium"])
        self.assertEqual(catalog.find_best("codi").display_name, "Codium")
        self.assertEqual(len(calls), 1)

        catalog.refresh()
        self.assertEqual(len(calls), 2)


class TestRecentItemsReader(unittest.TestCase):

    def test_reads_xbel_newest_first(self):
        with tempfile.TemporaryDirectory() as tmp:
            folder = Path(tmp) / "proj"
            folder.mkdir()
            note = Path(tmp) / "note.txt"
            note.write_text("x", encoding="utf-8")
            xbel = Path(tmp) / "recently-used.xbel"
            xbel.write_text(
                '<?xml version="1.0"?>\n<xbel version="1.0">\n'
                f'<bookmark href="file://{note}" visited="2024-01-01T00:00:00Z"/>\n'
                f'<bookmark href="file://{folder}" visited="2024-06-01T00:00:00Z"/>\n'
                f'<bookmark href="file://{Path(tmp) / "gone.txt"}" visited="2024-07-01T00:00:00Z"/>\n'
                '<bookmark href="https://example.com" visited="2024-08-01T00:00:00Z"/>\n'
                '</xbel>\n',
                encoding="utf-8",
            )

            reader = RecentItemsReader(platform_name="linux", xbel_path=xbel)
            items = reader.list_items()
            self.assertEqual([i.name for i in items], ["proj", "note.txt"])
            self.assertTrue(items[0].is_folder)
            self.assertEqual([i.name for i in reader.list_items("files")], ["note.txt"])


if __name__ == "__main__":
    unittest.main()
