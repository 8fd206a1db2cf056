import os
import tempfile
from pathlib import Path
from unittest import mock

from django.test import SimpleTestCase

from config.env import env_bool, env_files, env_int, env_list, load_env


class LoadEnvTests(SimpleTestCase):
    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.base_dir = Path(tmp.name)
        (self.base_dir / ".env").write_text("VENDOR_OPS_BASE=from-env\nVENDOR_OPS_SHARED=base\n")
        (self.base_dir / ".env.dev").write_text("VENDOR_OPS_DEV=from-dev\n")

    def test_dev_file_only_for_dev_environments(self):
        with mock.patch.dict(os.environ, {"DJANGO_ENV": "production"}):
            self.assertEqual(env_files(self.base_dir), [self.base_dir / ".env"])
        with mock.patch.dict(os.environ, {"DJANGO_ENV": "Local"}):
            self.assertEqual(env_files(self.base_dir)[-1], self.base_dir / ".env.dev")

    def test_process_environment_wins(self):
        with mock.patch.dict(os.environ, {"DJANGO_ENV": "dev", "VENDOR_OPS_SHARED": "process"}):
            loaded = load_env(self.base_dir)
            self.assertEqual(len(loaded), 2)
            self.assertEqual(os.environ["VENDOR_OPS_BASE"], "from-env")
            self.assertEqual(os.environ["VENDOR_OPS_DEV"], "from-dev")
            self.assertEqual(os.environ["VENDOR_OPS_SHARED"], "process")

    def test_missing_files_are_skipped(self):
        (self.base_dir / ".env").unlink()
        with mock.patch.dict(os.environ, {"DJANGO_ENV": ""}):
            self.assertEqual(load_env(self.base_dir), [])


class TypedLookupTests(SimpleTestCase):
    def test_bool(self):
        with mock.patch.dict(os.environ, {"FLAG_ON": " Yes ", "FLAG_OFF": "0"}):
            self.assertTrue(env_bool("FLAG_ON"))
            self.assertFalse(env_bool("FLAG_OFF", True))
            self.assertTrue(env_bool("FLAG_MISSING_XYZ", True))

    def test_int_falls_back_on_bad_input(self):
        with mock.patch.dict(os.environ, {"PAGE": "abc", "SIZE": "15"}):
            self.assertEqual(env_int("PAGE", 20), 20)
            self.assertEqual(env_int("SIZE", 20), 15)

    def test_list(self):
        with mock.patch.dict(os.environ, {"HOSTS": "a.example, ,b.example,"}):
            self.assertEqual(env_list("HOSTS"), ["a.example", "b.example"])
        self.assertEqual(env_list("HOSTS_MISSING_XYZ", "*"), ["*"])
