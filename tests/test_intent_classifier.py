import unittest

from navi.core.intent_classifier import classify, is_calculation, is_path, is_url
from navi.models import IntentType


class TestIntentClassifier(unittest.TestCase):

    def assertIntent(self, text, intent_type, value=None):
        intent = classify(text)
        self.assertEqual(intent.type, intent_type, f"{text!r} -> {intent}")
        if value is not None:
            self.assertEqual(intent.value, value)
        return intent

    def test_blank_input_is_unknown(self):
        for text in ("", "   ", "\t\n"):
            intent = self.assertIntent(text, IntentType.UNKNOWN, "")
            self.assertEqual(intent.confidence, 0.0)

    def test_quit_keyword(self):
        self.assertIntent("quit chrome", IntentType.QUIT, "chrome")
        self.assertIntent("QUIT", IntentType.QUIT, "")
        self.assertIntent("  quit   Slack  ", IntentType.QUIT, "Slack")

    def test_keyword_followed_by_tab(self):
        self.assertIntent("quit\tchrome", IntentType.QUIT, "chrome")
        self.assertIntent("sw\tcode", IntentType.SWITCH, "code")
        self.assertIntent("focus\t slack", IntentType.SWITCH, "slack")
        self.assertIntent("recent\tfiles", IntentType.RECENT, "files")

    def test_quit_wins_over_url(self):
        self.assertIntent("quit https://x.com", IntentType.QUIT, "https://x.com")

    def test_keyword_requires_word_boundary(self):
        # "quitter" is an app name, not a quit command
        self.assertIntent("quitter", IntentType.APP, "quitter")
        self.assertIntent("swift", IntentType.APP)

    def test_switch_keywords(self):
        self.assertIntent("sw code", IntentType.SWITCH, "code")
        self.assertIntent("switch", IntentType.SWITCH, "")
        self.assertIntent("focus terminal", IntentType.SWITCH, "terminal")

    def test_recent(self):
        self.assertIntent("recent", IntentType.RECENT, "")
        self.assertIntent("recent files", IntentType.RECENT, "files")
        self.assertIntent("recent folders proj", IntentType.RECENT, "folders proj")

    def test_urls(self):
        for text in ("https://github.com", "http://example.org/x", "github.com",
                     "www.python.org", "localhost:3000", "docs.python.org/3/"):
            self.assertIntent(text, IntentType.URL, text)

    def test_dotted_names_are_not_urls(self):
        self.assertFalse(is_url("file.txt"))
        self.assertFalse(is_url("notes.md"))
        self.assertFalse(is_url("localhostess"))

    def test_chat_prefix(self):
        self.assertIntent("/chat how are you", IntentType.CHAT, "how are you")
        self.assertIntent("/ai boot up my project", IntentType.CHAT, "boot up my project")
        self.assertIntent("/chat", IntentType.CHAT, "")

    def test_paths(self):
        for text in ("C:\\Users\\me", "/usr/local/bin", "./src/main.py", "../up", "\\\\server\\share"):
            self.assertIntent(text, IntentType.PATH, text)
        self.assertFalse(is_path("/"))
        self.assertFalse(is_path("src/main.py"))

    def test_calculation(self):
        self.assertIntent("2+2", IntentType.CALCULATE, "2+2")
        self.assertIntent("(3 * 4) / 2", IntentType.CALCULATE)
        self.assertTrue(is_calculation("10 / 4"))
        self.assertFalse(is_calculation("chrome"))

    def test_windows_path_keeps_value(self):
        intent = self.assertIntent("C:\\Users\\test\\file.txt", IntentType.PATH, "C:\\Users\\test\\file.txt")
        self.assertEqual(intent.confidence, 0.9)

    def test_pure_arithmetic_confidence(self):
        self.assertEqual(classify("2+2*3").confidence, 0.85)

    def test_app_verbs(self):
        self.assertIntent("open chrome", IntentType.APP, "chrome")
        self.assertIntent("launch Visual Studio Code", IntentType.APP, "Visual Studio Code")
        # verb with nothing after falls through to a plain app query
        self.assertIntent("open", IntentType.APP, "open")

    def test_long_search(self):
        text = "search for the best way to configure a python virtual environment on linux"
        intent = self.assertIntent(text, IntentType.SEARCH, text)
        self.assertEqual(intent.confidence, 0.7)

    def test_long_text_without_keyword_is_low_confidence_app(self):
        text = "this is a rather long sentence that mentions nothing special at all ok"
        intent = self.assertIntent(text, IntentType.APP)
        self.assertEqual(intent.confidence, 0.4)

    def test_short_text_is_app(self):
        intent = self.assertIntent("cod", IntentType.APP, "cod")
        self.assertEqual(intent.confidence, 0.6)

    def test_deterministic(self):
        for text in ("quit x", "github.com", "2*3", "cod", "/chat hi"):
            self.assertEqual(classify(text), classify(text))


if __name__ == "__main__":
    unittest.main()
