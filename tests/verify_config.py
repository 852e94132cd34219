#!/usr/bin/env python3
"""
VERIFY CONFIGURATION SYSTEM
---------------------------
1. Defaults
2. Loading .kubesnap.yaml / .kubesnap/config.yaml
3. CLI overrides layered on top
4. Validation and `init`
"""
import shutil
import tempfile
import unittest
from pathlib import Path

from kubesnap.core.config import ConfigManager, write_default_config


class TestConfigManager(unittest.TestCase):
    def setUp(self):
        self.root = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.root, ignore_errors=True)

    def test_defaults(self):
        config = ConfigManager(self.root)
        self.assertIsNone(config.source)
        self.assertEqual(config.workers, 8)
        self.assertEqual(config.request_timeout, 30)
        self.assertEqual(config.output_format, "yaml")
        self.assertEqual(config.compression, "compressed")
        self.assertEqual(config.output_dir, Path("/tmp"))

        options = config.collection_options()
        self.assertFalse(options.include_secrets)
        self.assertIsNone(options.specific_crds)
        self.assertTrue(options.sanitize)

    def test_defaults_not_shared_between_instances(self):
        first = ConfigManager(self.root)
        first.apply_overrides(enable=["include_secrets"])
        self.assertFalse(ConfigManager(self.root).collection_options().include_secrets)

    def test_root_file_merged(self):
        (self.root / ".kubesnap.yaml").write_text(
            "collection:\n  include_events: true\n  crds: [widgets.example.com]\n"
            "runtime:\n  workers: 3\n",
            encoding="utf-8",
        )
        config = ConfigManager(self.root)
        options = config.collection_options()
        self.assertTrue(options.include_events)
        self.assertEqual(options.specific_crds, ("widgets.example.com",))
        self.assertEqual(config.workers, 3)
        # Untouched keys keep their defaults
        self.assertEqual(config.request_timeout, 30)
        self.assertEqual(config.config["collection"]["include_secrets"], False)

    def test_state_dir_preferred(self):
        (self.root / ".kubesnap").mkdir()
        (self.root / ".kubesnap" / "config.yaml").write_text("output:\n  format: json\n", encoding="utf-8")
        (self.root / ".kubesnap.yaml").write_text("output:\n  format: both\n", encoding="utf-8")
        config = ConfigManager(self.root)
        self.assertEqual(config.output_format, "json")
        self.assertEqual(config.source.name, "config.yaml")

    def test_broken_file_falls_back_to_defaults(self):
        (self.root / ".kubesnap.yaml").write_text("collection: [unclosed", encoding="utf-8")
        with self.assertLogs("kubesnap.config", level="WARNING"):
            config = ConfigManager(self.root)
        self.assertEqual(config.workers, 8)

    def test_cli_overrides(self):
        (self.root / ".kubesnap.yaml").write_text("collection:\n  include_leases: true\n", encoding="utf-8")
        config = ConfigManager(self.root)
        config.apply_overrides(
            enable=["include_secrets"],
            crds=["gadgets.example.com"],
            raw=True,
            workers=2,
            request_timeout=5,
            output_dir="/var/snapshots",
            output_format="both",
            compression="uncompressed",
        )
        options = config.collection_options()
        self.assertTrue(options.include_secrets)
        self.assertTrue(options.include_leases)
        self.assertEqual(options.specific_crds, ("gadgets.example.com",))
        self.assertFalse(options.sanitize)
        self.assertEqual(config.workers, 2)
        self.assertEqual(config.request_timeout, 5)
        self.assertEqual(config.output_dir, Path("/var/snapshots"))
        self.assertEqual(config.output_format, "both")
        self.assertEqual(config.compression, "uncompressed")

    def test_validation(self):
        for overrides in ({"workers": 0}, {"request_timeout": -1}, {"output_format": "xml"},
                          {"compression": "zip"}, {"enable": ["include_everything"]}):
            config = ConfigManager(self.root)
            with self.assertRaises(ValueError, msg=str(overrides)):
                config.apply_overrides(**overrides)

    def test_write_default_config(self):
        target = write_default_config(self.root)
        self.assertEqual(target.name, ".kubesnap.yaml")
        config = ConfigManager(self.root)
        self.assertEqual(config.source, target)
        self.assertEqual(config.config, ConfigManager.DEFAULT_CONFIG)

        with self.assertRaises(FileExistsError):
            write_default_config(self.root)
        write_default_config(self.root, force=True)


if __name__ == '__main__':
    unittest.main()
