"""Tests for KUIPER_LOG handling."""

import logging

from kuiper.log import configure_logging, level_from_env


class TestLevelFromEnv:
    def test_default_is_warning(self):
        assert level_from_env({}) == logging.WARNING

    def test_named_level(self):
        assert level_from_env({"KUIPER_LOG": "debug"}) == logging.DEBUG
        assert level_from_env({"KUIPER_LOG": " Info "}) == logging.INFO

    def test_unknown_falls_back(self):
        assert level_from_env({"KUIPER_LOG": "chatty"}) == logging.WARNING


class TestConfigureLogging:
    def test_verbose_forces_debug(self, monkeypatch):
        monkeypatch.setenv("KUIPER_LOG", "error")
        configure_logging(verbose=True)
        assert logging.getLogger("kuiper").level == logging.DEBUG

    def test_env_level_applied(self, monkeypatch):
        monkeypatch.setenv("KUIPER_LOG", "error")
        configure_logging()
        assert logging.getLogger("kuiper").level == logging.ERROR
