import tempfile
import unittest
from pathlib import Path
from unittest import mock

from appconfig import ConfigRootUnavailableError, DirectoryCreateError, StoreSettings, resolve_config_path
from appconfig.paths import user_config_root


class ResolveConfigPathTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.settings = StoreSettings(config_root=str(self.root))

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_path_layout(self) -> None:
        path = resolve_config_path("my-app", self.settings)
        self.assertEqual(path, self.root / "my-app" / "config")
        self.assertTrue(path.parent.is_dir())
        self.assertFalse(path.exists())

    def test_app_dir_is_writable(self) -> None:
        path = resolve_config_path("my-app", self.settings)
        path.write_bytes(b"")
        self.assertTrue(path.is_file())

    def test_repeated_calls_are_idempotent(self) -> None:
        first = resolve_config_path("my-app", self.settings)
        second = resolve_config_path("my-app", self.settings)
        self.assertEqual(first, second)

    def test_custom_file_name(self) -> None:
        settings = StoreSettings(config_root=str(self.root), file_name="settings.yaml")
        path = resolve_config_path("my-app", settings)
        self.assertEqual(path.name, "settings.yaml")

    def test_platform_root_is_used_by_default(self) -> None:
        with mock.patch("appconfig.paths.user_config_dir", return_value=str(self.root)):
            path = resolve_config_path("my-app")
        self.assertEqual(path, self.root / "my-app" / "config")

    def test_relative_platform_root_is_rejected(self) -> None:
        with mock.patch("appconfig.paths.user_config_dir", return_value="~/.config"):
            with self.assertRaises(ConfigRootUnavailableError):
                user_config_root()

    def test_platform_lookup_failure(self) -> None:
        with mock.patch("appconfig.paths.user_config_dir", side_effect=KeyError("HOME")):
            with self.assertRaises(ConfigRootUnavailableError):
                resolve_config_path("my-app")

    def test_directory_create_failure(self) -> None:
        (self.root / "blocked").write_text("not a directory")
        with self.assertRaises(DirectoryCreateError) as ctx:
            resolve_config_path("blocked", self.settings)
        self.assertEqual(ctx.exception.path, self.root / "blocked")
        self.assertIsInstance(ctx.exception, OSError)


class StoreSettingsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = StoreSettings()
        self.assertIsNone(settings.config_root)
        self.assertEqual(settings.file_name, "config")
        self.assertEqual(settings.file_mode, 0o600)

    def test_file_name_must_be_bare(self) -> None:
        with self.assertRaises(ValueError):
            StoreSettings(file_name="nested/config")

    def test_unknown_keys_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            StoreSettings(config_dir="/tmp")


if __name__ == "__main__":
    unittest.main()
