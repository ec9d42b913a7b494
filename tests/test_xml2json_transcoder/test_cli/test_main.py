"""Tests for the CLI main module."""

import io
import json
import sys
from unittest.mock import patch

import pytest

from xml2json_transcoder.cli.main import (
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_OK,
    CLIConfig,
    cmd_convert,
    create_argument_parser,
    main,
    parse_type_kinds,
)
from xml2json_transcoder.shared.config import ConverterConfig
from xml2json_transcoder.shared.types import JSType


@pytest.fixture
def xml_file(tmp_path):
    path = tmp_path / "doc.xml"
    path.write_bytes(b'<doc id="7"><item>1</item><item>2</item><note>hi</note></doc>')
    return path


class TestCLIConfig:
    """Test CLI configuration management."""

    def test_default_config(self):
        """Test default configuration values."""
        config = CLIConfig()
        assert config.converter_config == ConverterConfig()
        assert config.verbose is False
        assert config.quiet is False

    def test_config_from_file(self, tmp_path):
        """Test loading configuration from file."""
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({
            "attribute_prefix": "-",
            "content_prefix": "#",
            "type_kinds": ["int"],
        }))

        config = CLIConfig.from_file(config_path)

        assert config.converter_config.attribute_prefix == "-"
        assert config.converter_config.content_key == "#content"
        assert config.converter_config.type_kinds == frozenset({JSType.INT})

    def test_config_from_nonexistent_file(self, tmp_path):
        """Test a missing config file is an error."""
        with pytest.raises(OSError):
            CLIConfig.from_file(tmp_path / "nonexistent.json")

    def test_config_from_invalid_json(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text("{not json")

        with pytest.raises(ValueError, match="Invalid configuration file"):
            CLIConfig.from_file(config_path)

    def test_config_must_be_object(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text("[1, 2]")

        with pytest.raises(ValueError, match="must hold a JSON object"):
            CLIConfig.from_file(config_path)

    def test_arguments_override_file(self):
        """Test command line options win over file settings and sets merge."""
        config = CLIConfig(ConverterConfig(
            attribute_prefix="@",
            excluded_attributes=frozenset({"version"}),
        ))
        args = create_argument_parser().parse_args([
            "--attr-prefix", "-",
            "--exclude-attr", "generator",
            "--array-key", "item",
            "--scalar-singletons",
            "--types", "int,bool",
            "--verbose",
        ])

        config.apply_arguments(args)

        converter_config = config.converter_config
        assert converter_config.attribute_prefix == "-"
        assert converter_config.excluded_attributes == frozenset({"version", "generator"})
        assert converter_config.force_array_keys == frozenset({"item"})
        assert converter_config.scalar_singletons
        assert converter_config.type_kinds == frozenset({JSType.INT, JSType.BOOL})
        assert config.verbose
        assert not config.quiet

    def test_no_arguments_keep_config(self):
        base = ConverterConfig.conventional()
        config = CLIConfig(base)

        config.apply_arguments(create_argument_parser().parse_args([]))

        assert config.converter_config == base


class TestArgumentParser:
    """Test command line parsing."""

    def test_defaults(self):
        args = create_argument_parser().parse_args([])

        assert args.input == "-"
        assert args.output == "-"
        assert args.config is None
        assert not args.force_arrays

    def test_verbose_and_quiet_exclusive(self):
        with pytest.raises(SystemExit):
            create_argument_parser().parse_args(["-v", "-q"])

    def test_parse_type_kinds(self):
        assert parse_type_kinds("int, float,,null") == frozenset(
            {JSType.INT, JSType.FLOAT, JSType.NULL}
        )

    def test_parse_type_kinds_unknown(self):
        with pytest.raises(ValueError):
            parse_type_kinds("int,number")


class TestMain:
    """Test the main entry point."""

    def test_file_to_stdout(self, xml_file, capsys):
        exit_code = main([str(xml_file), "--attr-prefix", "-"])

        captured = capsys.readouterr()
        assert exit_code == EXIT_OK
        assert captured.out == '{"doc":[{"-id":["7"],"item":["1","2"],"note":["hi"]}]}\n'

    def test_file_to_file(self, xml_file, tmp_path, capsys):
        output = tmp_path / "out.json"

        exit_code = main([str(xml_file), "-o", str(output), "--scalar-singletons", "--types", "int"])

        assert exit_code == EXIT_OK
        assert json.loads(output.read_text(encoding="utf-8")) == {
            "doc": {"id": 7, "item": [1, 2], "note": "hi"}
        }
        assert f"Results written to {output}" in capsys.readouterr().err

    def test_quiet_suppresses_summary(self, xml_file, tmp_path, capsys):
        output = tmp_path / "out.json"

        assert main([str(xml_file), "-o", str(output), "-q"]) == EXIT_OK
        assert capsys.readouterr().err == ""

    def test_stdin_input(self, monkeypatch, capsys):
        stdin = io.TextIOWrapper(io.BytesIO(b"<a>x</a>"), encoding="utf-8")
        monkeypatch.setattr(sys, "stdin", stdin)

        assert main([]) == EXIT_OK
        assert capsys.readouterr().out == '{"a":["x"]}\n'

    def test_config_file_option(self, xml_file, tmp_path, capsys):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"excluded_attributes": ["id"], "force_all_arrays": True}))

        assert main([str(xml_file), "--config", str(config_path)]) == EXIT_OK
        assert json.loads(capsys.readouterr().out) == {
            "doc": [{"item": ["1", "2"], "note": ["hi"]}]
        }

    def test_invalid_config_file(self, xml_file, tmp_path, capsys):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"unknown_option": 1}))

        assert main([str(xml_file), "-c", str(config_path)]) == EXIT_FAILURE
        assert "Unknown configuration keys: unknown_option" in capsys.readouterr().err

    def test_unknown_type_kind(self, xml_file, capsys):
        assert main([str(xml_file), "--types", "decimal"]) == EXIT_FAILURE
        assert "Unknown value kind" in capsys.readouterr().err

    def test_missing_input(self, tmp_path, capsys):
        missing = tmp_path / "missing.xml"

        assert main([str(missing)]) == EXIT_FAILURE
        assert f"cannot open {missing}" in capsys.readouterr().err

    def test_malformed_input(self, tmp_path, capsys):
        bad = tmp_path / "bad.xml"
        bad.write_text("<a><b></a>")

        assert main([str(bad)]) == EXIT_FAILURE
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "decode xml: XML syntax error" in captured.err

    def test_unwritable_output(self, xml_file, tmp_path, capsys):
        output = tmp_path / "no-such-dir" / "out.json"

        assert main([str(xml_file), "-o", str(output)]) == EXIT_FAILURE
        assert "Error writing output" in capsys.readouterr().err

    def test_keyboard_interrupt(self, xml_file, capsys):
        with patch("xml2json_transcoder.cli.main.cmd_convert", side_effect=KeyboardInterrupt):
            assert main([str(xml_file)]) == EXIT_INTERRUPTED
        assert "interrupted" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "0.1.0" in capsys.readouterr().out


class TestCmdConvert:
    """Test the convert command directly."""

    def test_convert_to_file(self, xml_file, tmp_path, capsys):
        output = tmp_path / "out.json"
        config = CLIConfig(ConverterConfig.conventional())
        config.quiet = True

        assert cmd_convert(config, str(xml_file), str(output)) == EXIT_OK
        assert output.read_bytes() == b'{"doc":[{"-id":["7"],"item":["1","2"],"note":["hi"]}]}'
        assert capsys.readouterr().err == ""
