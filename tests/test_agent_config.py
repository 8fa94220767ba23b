"""Tests for the YAML agent config loader.

Run with:  python -m pytest tests/  or  python -m unittest discover tests/
"""

import os
import tempfile
import unittest
import unittest.mock as mock
from pathlib import Path

from patch_lag.config import agent_config
from patch_lag.config.agent_config import load_config


class _TempDirCase(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        # Keep the host's own agent.yaml and env var out of the tests
        patcher = mock.patch.object(
            agent_config, "_local_config_path", return_value=self.tmp / "missing.yaml",
        )
        patcher.start()
        self.addCleanup(patcher.stop)
        env = mock.patch.dict(os.environ, {}, clear=False)
        env.start()
        self.addCleanup(env.stop)
        os.environ.pop("PATCH_LAG_CONFIG", None)

    def tearDown(self):
        self._tmp.cleanup()

    def write(self, name: str, text: str) -> Path:
        p = self.tmp / name
        p.write_text(text, encoding="utf-8")
        return p


class TestDefaults(_TempDirCase):

    def test_defaults_without_any_file(self):
        config = load_config()
        self.assertEqual(config["fetch"]["timeout_seconds"], 30)
        self.assertEqual(config["fetch"]["origin"], "https://support.microsoft.com")
        self.assertEqual(config["catalog"], [])
        self.assertFalse(config["output"]["pretty"])


class TestExplicitPath(_TempDirCase):

    def test_deep_merge_keeps_other_defaults(self):
        p = self.write("agent.yaml", "fetch:\n  timeout_seconds: 10\n")
        config = load_config(str(p))
        self.assertEqual(config["fetch"]["timeout_seconds"], 10)
        self.assertIn("Mozilla", config["fetch"]["user_agent"])

    def test_missing_explicit_file(self):
        with self.assertRaises(FileNotFoundError):
            load_config(str(self.tmp / "nope.yaml"))

    def test_non_mapping_rejected(self):
        p = self.write("agent.yaml", "- just\n- a list\n")
        with self.assertRaises(ValueError):
            load_config(str(p))

    def test_bad_timeout_rejected(self):
        p = self.write("agent.yaml", "fetch:\n  timeout_seconds: 0\n")
        with self.assertRaises(ValueError):
            load_config(str(p))

    def test_catalog_must_be_list(self):
        p = self.write("agent.yaml", "catalog:\n  product_name: Windows 11\n")
        with self.assertRaises(ValueError):
            load_config(str(p))

    def test_empty_sections_rejected(self):
        for text in ("fetch:\n", "output:\n", "output:\nfetch:\n"):
            with self.subTest(text=text):
                p = self.write("agent.yaml", text)
                with self.assertRaises(ValueError):
                    load_config(str(p))

    def test_catalog_rows_loaded(self):
        p = self.write(
            "agent.yaml",
            "catalog:\n"
            "  - product_name: Windows 11\n"
            "    version_label: 25H2\n"
            "    initial_release_date: 2025-09-30\n"
            "    history_uri: https://support.example.test/25h2\n",
        )
        config = load_config(str(p))
        self.assertEqual(config["catalog"][0]["version_label"], "25H2")


class TestResolutionOrder(_TempDirCase):

    def test_env_var_used(self):
        p = self.write("env.yaml", "output:\n  pretty: true\n")
        with mock.patch.dict(os.environ, {"PATCH_LAG_CONFIG": str(p)}):
            self.assertTrue(load_config()["output"]["pretty"])

    def test_env_var_missing_file_falls_back_to_local(self):
        local = self.write("local.yaml", "fetch:\n  timeout_seconds: 12\n")
        with mock.patch.object(agent_config, "_local_config_path", return_value=local), \
             mock.patch.dict(os.environ, {"PATCH_LAG_CONFIG": str(self.tmp / "gone.yaml")}):
            config = load_config()
        self.assertEqual(config["fetch"]["timeout_seconds"], 12)

    def test_explicit_path_beats_env_var(self):
        env_p = self.write("env.yaml", "fetch:\n  timeout_seconds: 5\n")
        cli_p = self.write("cli.yaml", "fetch:\n  timeout_seconds: 7\n")
        with mock.patch.dict(os.environ, {"PATCH_LAG_CONFIG": str(env_p)}):
            self.assertEqual(load_config(str(cli_p))["fetch"]["timeout_seconds"], 7)


if __name__ == "__main__":
    unittest.main()
