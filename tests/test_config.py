import logging
import unittest

from cpauth.config import Settings, configure_logging
from cpauth.errors import ParameterError
from cpauth.groups import I1024, TOY


class TestSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = Settings.from_env({})
        self.assertEqual(settings.group_name, "i1024")
        self.assertIs(settings.params, I1024)
        self.assertIsNone(settings.session_max_age)
        self.assertFalse(settings.expose_error_codes)

    def test_environment(self) -> None:
        settings = Settings.from_env(
            {
                "CPAUTH_GROUP": "toy",
                "CPAUTH_SESSION_MAX_AGE": "30",
                "CPAUTH_MAX_PENDING_SESSIONS": "100",
                "CPAUTH_EXPOSE_ERROR_CODES": "yes",
                "CPAUTH_LOG_LEVEL": "debug",
            }
        )
        self.assertIs(settings.params, TOY)
        self.assertEqual(settings.session_max_age, 30.0)
        self.assertEqual(settings.max_pending_sessions, 100)
        self.assertTrue(settings.expose_error_codes)
        self.assertEqual(settings.log_level, "DEBUG")

    def test_bad_values_fail_at_startup(self) -> None:
        self.assertRaises(ParameterError, Settings.from_env, {"CPAUTH_GROUP": "i512"})
        self.assertRaises(ValueError, Settings.from_env, {"CPAUTH_SESSION_MAX_AGE": "soon"})
        self.assertRaises(ValueError, Settings.from_env, {"CPAUTH_SESSION_MAX_AGE": "-1"})
        self.assertRaises(ValueError, Settings.from_env, {"CPAUTH_EXPOSE_ERROR_CODES": "maybe"})
        self.assertRaises(ValueError, Settings.from_env, {"CPAUTH_MAX_PENDING_SESSIONS": "5"})
        self.assertRaises(ValueError, Settings.from_env, {"CPAUTH_LOG_LEVEL": "chatty"})

    def test_build_coordinator(self) -> None:
        coordinator = Settings(group_name="toy", session_max_age=5).build_coordinator()
        self.assertIs(coordinator.params, TOY)
        self.assertEqual(coordinator.sessions.max_age, 5)


class TestConfigureLogging(unittest.TestCase):
    def setUp(self) -> None:
        root = logging.getLogger()
        self.addCleanup(root.setLevel, root.level)

    def test_level_takes_effect(self) -> None:
        configure_logging("debug")
        self.assertEqual(logging.getLogger().getEffectiveLevel(), logging.DEBUG)
        configure_logging("WARNING")
        self.assertEqual(logging.getLogger().getEffectiveLevel(), logging.WARNING)

    def test_module_loggers_follow_the_root_level(self) -> None:
        configure_logging("DEBUG")
        self.assertTrue(logging.getLogger("cpauth.sessions").isEnabledFor(logging.DEBUG))


if __name__ == "__main__":
    unittest.main()
