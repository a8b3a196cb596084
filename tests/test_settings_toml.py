import unittest
import tomllib
from datetime import timedelta
from pathlib import Path

from domain.enums import ConversionMode
from domain.models import RewriteOptions
from settings_service import SettingsService, reload_settings


class TestSettingsToml(unittest.TestCase):
    """Test suite to validate settings.toml structure and contents."""

    @classmethod
    def setUpClass(cls):
        """Load settings.toml once for all tests."""
        settings_path = Path(__file__).parent.parent / "settings.toml"
        with open(settings_path, "rb") as f:
            cls.settings = tomllib.load(f)

    def test_toml_file_can_be_loaded(self):
        """Test that settings.toml exists and can be parsed without errors."""
        settings_path = Path(__file__).parent.parent / "settings.toml"
        self.assertTrue(settings_path.exists(), "settings.toml file does not exist")
        self.assertIsInstance(self.settings, dict)

    def test_required_sections_exist(self):
        for section in ["env", "db_paths", "shopify", "link_conversion", "market_config"]:
            with self.subTest(section=section):
                self.assertIn(section, self.settings, f"{section} section is missing")

    def test_log_level_is_valid(self):
        self.assertIn(self.settings["env"]["log_level"], ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])

    def test_shop_settings_db_path(self):
        self.assertIn("shop_settings", self.settings["db_paths"])

    def test_link_conversion_defaults(self):
        """Conversion is off by default and the strategy is a known mode."""
        link_conversion = self.settings["link_conversion"]
        self.assertIs(link_conversion["enable_link_conversion"], False)
        ConversionMode.from_string(link_conversion["strategy"])
        for key in ["preserve_query_params", "preserve_anchors"]:
            with self.subTest(key=key):
                self.assertIsInstance(link_conversion[key], bool)

    def test_shopify_section(self):
        shopify = self.settings["shopify"]
        self.assertRegex(shopify["api_version"], r"^\d{4}-\d{2}$")
        self.assertGreater(shopify["request_timeout"], 0)
        self.assertGreater(shopify["markets_page_size"], 0)
        self.assertGreater(shopify["presences_page_size"], 0)


class TestSettingsService(unittest.TestCase):
    def setUp(self):
        reload_settings()

    def tearDown(self):
        reload_settings()

    def test_properties(self):
        settings = SettingsService()
        self.assertEqual(settings.env, self.settings_value("env", "env"))
        self.assertEqual(settings.api_version, self.settings_value("shopify", "api_version"))
        self.assertEqual(settings.market_config_max_age, timedelta(hours=24))
        self.assertIn("shop_settings", settings.db_paths)

    def test_defaults_build_rewrite_options(self):
        options = RewriteOptions.from_mapping(SettingsService().link_conversion_defaults)
        self.assertIs(options.strategy, ConversionMode.CONSERVATIVE)

    def test_custom_settings_file(self):
        import tempfile

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "settings.toml"
            path.write_text(
                '[env]\nenv = "test"\nlog_level = "DEBUG"\n'
                '[shopify]\napi_version = "2025-01"\n'
                '[market_config]\nmax_age_hours = 2\n',
                encoding="utf-8",
            )
            settings = SettingsService(path)
            self.assertEqual(settings.env, "test")
            self.assertEqual(settings.log_level, "DEBUG")
            self.assertEqual(settings.request_timeout, 30)
            self.assertEqual(settings.market_config_max_age, timedelta(hours=2))
            self.assertEqual(settings.link_conversion_defaults, {})

    def test_settings_are_cached_until_reload(self):
        first = SettingsService()
        self.assertIs(SettingsService().settings, first.settings)
        reload_settings()
        self.assertIsNot(SettingsService().settings, first.settings)

    @staticmethod
    def settings_value(section, key):
        with open(Path(__file__).parent.parent / "settings.toml", "rb") as f:
            return tomllib.load(f)[section][key]


if __name__ == "__main__":
    unittest.main()
