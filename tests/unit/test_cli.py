"""
Unit tests for the tyl-config command line interface.
"""

import unittest
from pathlib import Path
from unittest.mock import patch

import yaml
from click.testing import CliRunner

from tyl_config import PostgresConfig, RedisConfig, register_section
from tyl_config.cli import cli, exit_code_for
from tyl_config.config.errors import (
    ConfigException, DeserializationError, EnvParseError, ExitCode, ValidationError
)
from tyl_config.config.plugin import unregister_section
from sample_sections import ApiSection

# Unset every built-in key so the host environment cannot leak into a run
CLEAN_ENV = {
    key: None
    for section in (PostgresConfig(), RedisConfig())
    for keys in section.env_keys().values()
    for key in keys
}


class TestCliCommands(unittest.TestCase):
    """Test cases for the CLI commands."""

    def setUp(self):
        """Set up test fixtures."""
        self.runner = CliRunner()
        patcher = patch('tyl_config.cli.setup_logging')
        self.setup_logging = patcher.start()
        self.addCleanup(patcher.stop)

    def _invoke(self, args, env=None, config=None):
        environment = dict(CLEAN_ENV)
        environment.update(env or {})
        with self.runner.isolated_filesystem():
            if config is not None:
                Path("config.yaml").write_text(yaml.dump(config))
            result = self.runner.invoke(cli, args, env=environment)
            written = {path.name: path.read_text() for path in Path(".").glob("*.yaml")}
        return result, written

    def test_validate_defaults(self):
        """Test validating the default configuration."""
        result, _ = self._invoke(['validate'])

        self.assertEqual(result.exit_code, ExitCode.SUCCESS)
        self.assertIn("Section 'postgres' valid", result.output)
        self.assertIn("Section 'redis' valid", result.output)

    def test_validate_reads_default_config_file(self):
        """Test that config.yaml in the working directory is picked up."""
        result, _ = self._invoke(['validate'], config={"postgres": {"port": 99999}})

        self.assertEqual(result.exit_code, ExitCode.VALIDATION_FAILED)
        self.assertIn("[postgres]", result.output)

    def test_validate_env_parse_failure(self):
        """Test the exit code for an unparsable environment value."""
        result, _ = self._invoke(['validate'], env={"TYL_POSTGRES_PORT": "not-a-number"})

        self.assertEqual(result.exit_code, ExitCode.ENV_PARSE_ERROR)
        self.assertIn("TYL_POSTGRES_PORT", result.output)

    def test_missing_explicit_config_file(self):
        """Test that an explicitly named file must exist."""
        result, _ = self._invoke(['-c', 'absent.yaml', 'validate'])

        self.assertEqual(result.exit_code, ExitCode.CONFIGURATION_ERROR)
        self.assertIn("absent.yaml", result.output)

    def test_unknown_section(self):
        """Test that an unknown --section is a usage error."""
        result, _ = self._invoke(['-s', 'kafka', 'validate'])

        self.assertEqual(result.exit_code, 2)
        self.assertIn("unknown section(s): kafka", result.output)

    def test_section_selection(self):
        """Test loading only the selected sections."""
        result, _ = self._invoke(['-s', 'redis', 'validate'])

        self.assertEqual(result.exit_code, 0)
        self.assertNotIn("postgres", result.output)
        self.assertIn("All 1 sections validated", result.output)

    def test_show_masks_secrets(self):
        """Test the value and source table with secrets hidden."""
        config = {"postgres": {"host": "yaml-host", "password": "s3cret"}}
        result, _ = self._invoke(['-s', 'postgres', 'show'], env={"PGPORT": "6000"}, config=config)

        self.assertEqual(result.exit_code, 0)
        self.assertIn("yaml-host", result.output)
        self.assertIn("6000", result.output)
        self.assertIn("environment", result.output)
        self.assertIn("default", result.output)
        self.assertIn("********", result.output)
        self.assertNotIn("s3cret", result.output)

    def test_show_secrets(self):
        """Test revealing secrets on request."""
        config = {"postgres": {"password": "s3cret"}}
        result, _ = self._invoke(['-s', 'postgres', 'show', '--show-secrets'], config=config)

        self.assertEqual(result.exit_code, 0)
        self.assertIn("s3cret", result.output)

    def test_generate_template(self):
        """Test writing a template for all known sections."""
        result, written = self._invoke(['-s', 'postgres', 'generate', '-o', 'out.yaml'],
                                       env={"TYL_POSTGRES_PORT": "5555"})

        self.assertEqual(result.exit_code, 0)
        self.assertIn("out.yaml", result.output)
        document = yaml.safe_load(written["out.yaml"])
        self.assertEqual(document["postgres"]["port"], 5555)
        self.assertIn("redis", document)

    def test_generate_registered_only(self):
        """Test restricting the template to the selected sections."""
        result, written = self._invoke(['-s', 'postgres', 'generate', '-o', 'out.yaml', '--registered-only'])

        self.assertEqual(result.exit_code, 0)
        self.assertEqual(list(yaml.safe_load(written["out.yaml"])), ["postgres"])

    def test_env_exports(self):
        """Test printing export lines without secrets."""
        result, _ = self._invoke(['env'], env={"REDIS_HOST": "cache.internal"})

        self.assertEqual(result.exit_code, 0)
        self.assertIn("export TYL_POSTGRES_PORT=5432", result.output)
        self.assertIn("export TYL_REDIS_HOST=cache.internal", result.output)
        self.assertNotIn("TYL_POSTGRES_PASSWORD", result.output)

    def test_env_exports_with_secrets(self):
        """Test including and quoting secret values."""
        result, _ = self._invoke(['-s', 'postgres', 'env', '--include-secrets'],
                                 env={"PGPASSWORD": "p@ss word"})

        self.assertEqual(result.exit_code, 0)
        self.assertIn("export TYL_POSTGRES_PASSWORD='p@ss word'", result.output)

    def test_section_without_defaults_is_skipped(self):
        """Test that a section with required fields does not break the CLI."""
        register_section(ApiSection)
        self.addCleanup(unregister_section, ApiSection.name)

        result, written = self._invoke(['generate', '-o', 'out.yaml'])

        self.assertEqual(result.exit_code, 0)
        document = yaml.safe_load(written["out.yaml"])
        self.assertEqual(document["api"]["api_key"], None)
        self.assertIn("postgres", document)

    def test_selected_section_without_defaults(self):
        """Test that selecting a section with required fields fails cleanly."""
        register_section(ApiSection)
        self.addCleanup(unregister_section, ApiSection.name)

        result, _ = self._invoke(['-s', 'api', 'validate'])

        self.assertEqual(result.exit_code, ExitCode.CONFIGURATION_ERROR)
        self.assertIn("[api]", result.output)

    def test_verbose_logging(self):
        """Test that --verbose switches logging to DEBUG."""
        self._invoke(['-v', 'validate'])
        self.setup_logging.assert_called_once_with("DEBUG")


class TestExitCodes(unittest.TestCase):
    """Test cases for error to exit code mapping."""

    def test_exit_code_for(self):
        """Test each error family's exit code."""
        self.assertEqual(exit_code_for(ValidationError("port", "out of range", "postgres")),
                         ExitCode.VALIDATION_FAILED)
        self.assertEqual(exit_code_for(EnvParseError("port", "K", "x", "an integer", "postgres")),
                         ExitCode.ENV_PARSE_ERROR)
        self.assertEqual(exit_code_for(DeserializationError("bad node", "redis")),
                         ExitCode.DESERIALIZATION_ERROR)
        self.assertEqual(exit_code_for(ConfigException("broken")), ExitCode.CONFIGURATION_ERROR)
        self.assertEqual(exit_code_for(FileNotFoundError("missing")), ExitCode.CONFIGURATION_ERROR)
        self.assertEqual(exit_code_for(RuntimeError("boom")), ExitCode.UNKNOWN_ERROR)


if __name__ == '__main__':
    unittest.main()
