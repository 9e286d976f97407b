import json
import os
import stat
import tempfile
import unittest

from PyLocalise.Extraction import ExtractedMessage
from PyLocalise.Helpers.Tests import log_input_expected_error, log_input_expected_result, log_test_name, read_text_file, write_text_file
from PyLocalise.LocaliseError import ExtractionStoreError, PersistenceError
from PyLocalise.TranslationEntry import TranslationEntry
from PyLocalise.TranslationStore import TranslationStore

class TestTranslationStore(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.temp_dir.name, "extraction.json")

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_UpsertLastWriteWins(self):
        log_test_name("Upsert last write wins")

        store = TranslationStore(self.path)
        store.UpsertMessages([ExtractedMessage("greeting", "Hello")], "src/A.tsx")
        store.UpsertMessages([ExtractedMessage("greeting", "Hi there"), ExtractedMessage("farewell", "Bye")], "src/B.tsx")

        entry = store.Get("greeting")
        log_input_expected_result("greeting", TranslationEntry("greeting", "Hi there", "src/B.tsx"), entry)
        self.assertEqual(entry, TranslationEntry("greeting", "Hi there", "src/B.tsx"))
        self.assertEqual(len(store), 2)
        self.assertIn("farewell", store)

    def test_UpsertSequence(self):
        log_test_name("Upsert sequence")

        sequence = [
            ("a", "one", "file1"),
            ("b", "two", "file1"),
            ("a", "three", "file2"),
            ("c", "four", "file3"),
            ("b", "five", "file3"),
        ]

        store = TranslationStore(self.path)
        for key, message, source in sequence:
            store.Upsert([TranslationEntry(key, message, source)])

        expected = {}
        for key, message, source in sequence:
            expected[key] = { 'defaultMessage': message, 'source': source }

        log_input_expected_result(sequence, expected, store.ToDict())
        self.assertEqual(store.ToDict(), expected)

    def test_UpsertMessagesReturnsCount(self):
        log_test_name("UpsertMessages count")

        store = TranslationStore(self.path)
        count = store.UpsertMessages([ExtractedMessage("a", "A"), ExtractedMessage("b", "B")], "file")
        log_input_expected_result("two messages", 2, count)
        self.assertEqual(count, 2)

        count = store.UpsertMessages([], "file")
        self.assertEqual(count, 0)
        self.assertEqual(len(store), 2)

    def test_PersistAndLoad(self):
        log_test_name("Persist then load")

        store = TranslationStore(self.path)
        store.UpsertMessages([ExtractedMessage("greeting", "Hello"), ExtractedMessage("accent", "Olá, señor")], "src/App.tsx")
        store.Persist()

        loaded = TranslationStore(self.path)
        loaded.Load()

        log_input_expected_result(self.path, store.ToDict(), loaded.ToDict())
        self.assertEqual(loaded.ToDict(), store.ToDict())
        self.assertEqual(loaded.entries, store.entries)

    def test_PersistFormat(self):
        log_test_name("Persist format")

        store = TranslationStore(self.path)
        store.UpsertMessages([ExtractedMessage("accent", "Olá")], "src/App.tsx")
        store.Persist()

        text = read_text_file(self.path)
        self.assertIn("Olá", text)
        self.assertIn('\n  "accent"', text)
        self.assertEqual(json.loads(text), { "accent": { "defaultMessage": "Olá", "source": "src/App.tsx" } })

        leftovers = [ name for name in os.listdir(self.temp_dir.name) if name != "extraction.json" ]
        log_input_expected_result("temporary files", [], leftovers)
        self.assertEqual(leftovers, [])

    def test_PersistOverwritesWholesale(self):
        log_test_name("Persist overwrites the file")

        write_text_file(self.temp_dir.name, "extraction.json", json.dumps({ "old": { "defaultMessage": "Old", "source": "x" } }))

        store = TranslationStore(self.path)
        store.Reset()
        store.UpsertMessages([ExtractedMessage("new", "New")], "y")
        store.Persist()

        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        log_input_expected_result("keys", ["new"], list(data.keys()))
        self.assertEqual(list(data.keys()), ["new"])

    @unittest.skipIf(os.name == 'nt', "POSIX file modes")
    def test_PersistKeepsFileMode(self):
        log_test_name("Persist keeps the file mode")

        for mode in (0o644, 0o640):
            with self.subTest(mode=oct(mode)):
                write_text_file(self.temp_dir.name, "extraction.json", json.dumps({ "old": { "defaultMessage": "Old", "source": "x" } }))
                os.chmod(self.path, mode)

                store = TranslationStore(self.path)
                store.Load()
                store.UpsertMessages([ExtractedMessage("new", "New")], "y")
                store.Persist()

                result = stat.S_IMODE(os.stat(self.path).st_mode)
                log_input_expected_result(oct(mode), oct(mode), oct(result))
                self.assertEqual(result, mode)

    @unittest.skipIf(os.name == 'nt', "POSIX file modes")
    def test_PersistNewFileMode(self):
        log_test_name("Persist new file uses the umask")

        umask = os.umask(0o022)
        try:
            store = TranslationStore(self.path)
            store.UpsertMessages([ExtractedMessage("a", "A")], "file")
            store.Persist()
        finally:
            os.umask(umask)

        result = stat.S_IMODE(os.stat(self.path).st_mode)
        log_input_expected_result("umask 022", oct(0o644), oct(result))
        self.assertEqual(result, 0o644)

    def test_PersistCreatesDirectory(self):
        log_test_name("Persist creates directory")

        path = os.path.join(self.temp_dir.name, "nested", "out", "extraction.json")
        store = TranslationStore(path)
        store.UpsertMessages([ExtractedMessage("a", "A")], "file")
        store.Persist()

        self.assertTrue(os.path.exists(path))

    def test_PersistFailure(self):
        log_test_name("Persist failure")

        # A directory where the file should be makes the final rename fail
        os.makedirs(self.path)
        store = TranslationStore(self.path)
        store.UpsertMessages([ExtractedMessage("a", "A")], "file")

        with self.assertRaises(PersistenceError) as context:
            store.Persist()

        log_input_expected_error(self.path, PersistenceError, context.exception)
        self.assertEqual(context.exception.path, self.path)

    def test_LoadMissingFile(self):
        log_test_name("Load missing file")

        store = TranslationStore(self.path)
        store.Load()
        log_input_expected_result(self.path, 0, len(store))
        self.assertEqual(len(store), 0)

    def test_LoadCorruptFile(self):
        log_test_name("Load corrupt file")

        corrupt_cases = [
            "{ not json",
            "[1, 2, 3]",
            json.dumps({ "key": "not an object" }),
            json.dumps({ "key": { "source": "no message" } }),
        ]

        for content in corrupt_cases:
            with self.subTest(content=content):
                write_text_file(self.temp_dir.name, "extraction.json", content)

                store = TranslationStore(self.path)
                with self.assertRaises(ExtractionStoreError) as context:
                    store.Load()

                log_input_expected_error(content, ExtractionStoreError, context.exception)

    def test_LoadCorruptFileWithReset(self):
        log_test_name("Load corrupt file with reset")

        write_text_file(self.temp_dir.name, "extraction.json", "{ not json")

        store = TranslationStore(self.path, reset_corrupt=True)
        store.UpsertMessages([ExtractedMessage("stale", "Stale")], "file")
        store.Load()

        log_input_expected_result("corrupt file", 0, len(store))
        self.assertEqual(len(store), 0)

    def test_LoadReplacesMemory(self):
        log_test_name("Load replaces entries in memory")

        write_text_file(self.temp_dir.name, "extraction.json", json.dumps({ "saved": { "defaultMessage": "Saved", "source": "a" } }))

        store = TranslationStore(self.path)
        store.UpsertMessages([ExtractedMessage("unsaved", "Unsaved")], "b")
        store.Load()

        log_input_expected_result("keys", ["saved"], store.keys)
        self.assertEqual(store.keys, ["saved"])

if __name__ == '__main__':
    unittest.main()
