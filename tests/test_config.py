import json
import tempfile
import unittest
from pathlib import Path

from navi.config import Preferences, Project, Settings, load_preferences, save_preferences


class TestSettings(unittest.TestCase):

    def test_preferences_path_defaults_to_user_data_dir(self):
        config = Settings(user_data_dir=Path("/data/navi"))
        self.assertEqual(config.get_preferences_path(), Path("/data/navi/preferences.json"))

    def test_explicit_preferences_path(self):
        config = Settings(preferences_path=Path("/etc/navi.json"))
        self.assertEqual(config.get_preferences_path(), Path("/etc/navi.json"))


class TestPreferences(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "preferences.json"

    def tearDown(self):
        self.tmp.cleanup()

    def test_missing_file_gives_defaults(self):
        preferences = load_preferences(self.path)
        self.assertEqual(preferences.ide, "code")
        self.assertEqual(preferences.default_port, "3000")
        self.assertEqual(preferences.projects, [])

    def test_corrupt_file_gives_defaults(self):
        self.path.write_text("{not json", encoding="utf-8")
        self.assertEqual(load_preferences(self.path), Preferences())

    def test_non_object_root_gives_defaults(self):
        for payload in ("[]", '"code"', "42", "null"):
            self.path.write_text(payload, encoding="utf-8")
            self.assertEqual(load_preferences(self.path), Preferences(), payload)

    def test_malformed_legacy_entries_are_skipped(self):
        self.path.write_text(json.dumps({
            "pathNicknames": ["oops", {"nickname": "web", "path": "/work/web"}],
        }), encoding="utf-8")
        preferences = load_preferences(self.path)
        self.assertEqual([p.nickname for p in preferences.projects], ["web"])

    def test_legacy_nicknames_are_migrated(self):
        self.path.write_text(json.dumps({
            "ide": "cursor",
            "devServerCommand": "pnpm dev",
            "pathNicknames": [{"nickname": "api", "path": "/work/api"}],
        }), encoding="utf-8")

        preferences = load_preferences(self.path)
        self.assertEqual(preferences.ide, "cursor")
        self.assertEqual(len(preferences.projects), 1)
        project = preferences.projects[0]
        self.assertEqual((project.nickname, project.filepath, project.start_command),
                         ("api", "/work/api", "pnpm dev"))

    def test_save_drops_incomplete_projects_and_round_trips(self):
        preferences = Preferences(
            ide="webstorm",
            projects=[
                Project(nickname="shop", filepath="/work/shop", port="5173"),
                Project(nickname="", filepath="/work/nameless"),
                Project(nickname="ghost", filepath="  "),
            ],
        )
        save_preferences(preferences, self.path)

        raw = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertEqual(raw["projects"][0]["startCommand"], "npm run dev")

        loaded = load_preferences(self.path)
        self.assertEqual([p.nickname for p in loaded.projects], ["shop"])
        self.assertEqual(loaded.projects[0].port, "5173")
        self.assertEqual(loaded.ide, "webstorm")

    def test_resolve_project_is_case_insensitive(self):
        preferences = Preferences(projects=[Project(nickname="Shop", filepath="/work/shop")])
        self.assertEqual(preferences.resolve_project(" shop ").filepath, "/work/shop")
        self.assertIsNone(preferences.resolve_project("other"))
        self.assertIsNone(preferences.resolve_project(""))


if __name__ == "__main__":
    unittest.main()
