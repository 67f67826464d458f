import unittest
from pathlib import Path

from blkmarket_mcp.config import DEFAULT_BASE_URL, Settings


class TestSettings(unittest.TestCase):

    def test_defaults(self):
        """Test settings defaults with an empty environment."""
        settings = Settings.from_env({})
        self.assertIsNone(settings.base_url)
        self.assertIsNone(settings.catalog_path)
        self.assertEqual(settings.server_name, "blkmarket-mcp")
        self.assertEqual((settings.host, settings.port), ("0.0.0.0", 8080))
        self.assertEqual(settings.log_level, "INFO")

    def test_environment_overrides(self):
        """Test environment variables override the defaults."""
        settings = Settings.from_env({
            "BLKMARKET_BASE_URL": "http://localhost:9000",
            "BLKMARKET_CATALOG": "/etc/blkmarket/endpoints.yaml",
            "PORT": "9090",
            "LOG_LEVEL": "debug",
        })
        self.assertEqual(settings.base_url, "http://localhost:9000")
        self.assertEqual(settings.catalog_path, Path("/etc/blkmarket/endpoints.yaml"))
        self.assertEqual(settings.port, 9090)
        self.assertEqual(settings.log_level, "DEBUG")

    def test_invalid_port(self):
        """Test a non-numeric PORT raises ValueError."""
        with self.assertRaises(ValueError):
            Settings.from_env({"PORT": "eighty"})

    def test_base_url_resolution(self):
        """Test the configured base URL wins over the catalog's."""
        self.assertEqual(Settings().resolve_base_url(None), DEFAULT_BASE_URL)
        self.assertEqual(Settings().resolve_base_url("https://staging.blkmarket.ar"), "https://staging.blkmarket.ar")
        self.assertEqual(Settings(base_url="http://mock").resolve_base_url("https://blkmarket.ar"), "http://mock")

    def test_settings_are_immutable(self):
        """Test settings cannot be modified."""
        with self.assertRaises(AttributeError):
            Settings().port = 1


if __name__ == '__main__':
    unittest.main()
