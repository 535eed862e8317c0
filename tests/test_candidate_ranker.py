import unittest

from navi.core.candidate_ranker import (
    filter_recent,
    is_gated,
    match_system_commands,
    parse_recent_query,
    rank,
    rank_apps,
    rank_processes,
    score,
)
from navi.core.intent_classifier import classify
from navi.models import Candidate, CandidateKind, Intent, IntentType, RecentItem


def apps(*names):
    return [Candidate(display_name=n, action_key=f"/apps/{n}") for n in names]


class TestScore(unittest.TestCase):

    def test_tiers(self):
        self.assertEqual(score("code", "Code"), 10000.0)
        self.assertGreater(score("cod", "Code"), 5000.0)
        self.assertGreater(score("code", "VS Code"), 3000.0)
        self.assertLess(score("code", "VS Code"), 5000.0)
        self.assertEqual(score("xyz", "Code"), 0.0)
        self.assertEqual(score("", "Code"), 0.0)

    def test_prefix_beats_contains(self):
        self.assertGreater(score("cod", "Codium"), score("cod", "Xcode"))

    def test_word_match_with_completeness_bonus(self):
        both = score("vis code", "Visual Studio Code")
        one = score("vis zzz", "Visual Studio Code")
        self.assertGreater(both, one)
        self.assertGreater(one, 0)

    def test_subsequence_fallback(self):
        s = score("vsc", "Visual Studio Code")
        self.assertGreater(s, 0)
        self.assertLessEqual(s, 300.0)

    def test_longer_prefix_never_scores_lower(self):
        name = "Codeblocks"
        previous = 0.0
        for end in range(1, len(name) + 1):
            current = score(name[:end], name)
            self.assertGreaterEqual(current, previous)
            previous = current


class TestRank(unittest.TestCase):

    def test_cod_orders_exact_prefix_then_contains(self):
        raw = apps("Xcode", "Code", "Codium", "Firefox")
        ranked = rank(classify("cod"), raw, "cod")
        names = [c.display_name for c in ranked]
        self.assertEqual(names[:2], ["Code", "Codium"])
        self.assertIn("Xcode", names)
        self.assertNotIn("Firefox", names)

    def test_cod_prefers_starts_with_over_word_match(self):
        raw = apps("Visual Studio Code", "Code::Blocks", "Notepad")
        names = [c.display_name for c in rank(classify("cod"), raw, "cod")]
        self.assertEqual(names, ["Code::Blocks", "Visual Studio Code"])

    def test_empty_query_returns_nothing(self):
        self.assertEqual(rank(classify(""), apps("Code"), ""), [])

    def test_limit_and_dedupe(self):
        raw = apps(*[f"App {i}" for i in range(20)]) + apps("App 1")
        ranked = rank_apps(raw, "app", limit=10)
        self.assertEqual(len(ranked), 10)
        keys = [c.display_name.lower() for c in ranked]
        self.assertEqual(len(keys), len(set(keys)))

    def test_idempotent(self):
        raw = apps("Slack", "Spotify", "Sublime Text")
        intent = classify("s")
        self.assertEqual(rank(intent, raw, "s"), rank(intent, raw, "s"))

    def test_system_commands_prepended(self):
        raw = apps("Restic Backup")
        ranked = rank(classify("rest"), raw, "rest")
        self.assertEqual(ranked[0].kind, CandidateKind.SYSTEM)
        self.assertEqual(ranked[0].action_key, "restart")
        self.assertEqual(ranked[1].display_name, "Restic Backup")

    def test_gated_intent_suppresses_apps(self):
        intent = classify("https://github.com")
        self.assertTrue(is_gated(intent))
        self.assertEqual(rank(intent, apps("GitHub Desktop"), "https://github.com"), [])

    def test_low_confidence_is_not_gated(self):
        self.assertFalse(is_gated(Intent(type=IntentType.URL, value="x", confidence=0.5)))

    def test_switch_uses_processes(self):
        procs = [Candidate(display_name=n, action_key=n) for n in ("firefox", "code", "code-insiders", "Xcode")]
        ranked = rank(classify("sw code"), procs, "sw code")
        self.assertEqual([c.display_name for c in ranked], ["code", "code-insiders", "Xcode"])
        self.assertTrue(all(c.kind == CandidateKind.SWITCH for c in ranked))

    def test_quit_without_term_lists_everything(self):
        procs = [Candidate(display_name=n, action_key=n) for n in ("b", "a")]
        ranked = rank_processes(procs, "", CandidateKind.QUIT)
        self.assertEqual([c.display_name for c in ranked], ["a", "b"])


class TestRecent(unittest.TestCase):

    def setUp(self):
        self.items = [
            RecentItem(name="notes.md", path="/home/me/notes.md").to_candidate(),
            RecentItem(name="project", path="/home/me/project", is_folder=True).to_candidate(),
            RecentItem(name="project.md", path="/home/me/project.md").to_candidate(),
        ]

    def test_parse_recent_query(self):
        self.assertEqual(parse_recent_query("files foo"), (CandidateKind.RECENT_FILE, "foo"))
        self.assertEqual(parse_recent_query("folders"), (CandidateKind.RECENT_FOLDER, ""))
        self.assertEqual(parse_recent_query("proj"), (None, "proj"))

    def test_filter_by_kind_and_term(self):
        names = [c.display_name for c in filter_recent(self.items, "files proj")]
        self.assertEqual(names, ["project.md"])
        names = [c.display_name for c in filter_recent(self.items, "folders")]
        self.assertEqual(names, ["project"])
        self.assertEqual(len(filter_recent(self.items, "")), 3)


class TestSystemCommands(unittest.TestCase):

    def test_matches_name_or_display(self):
        self.assertEqual([c.action_key for c in match_system_commands("lock")], ["lock"])
        self.assertEqual([c.action_key for c in match_system_commands("screen")], ["lock"])
        self.assertEqual(match_system_commands(""), [])


if __name__ == "__main__":
    unittest.main()
