#!/usr/bin/env python3

from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from service_model_generate.cli_utils import reconstruct_command_line
from service_model_generate.service_model_generate import cli, generate

TEST_DATA = Path(__file__).parent / "test_data"


class TestCliUtils:
    """Test cases for CLI utilities"""

    def test_reconstruct_command_line_without_context(self):
        """Test command reconstruction without active Click context (fallback)"""
        assert reconstruct_command_line(generate) == "service_model_generate"

    def test_reconstruct_command_line_with_context(self):
        @click.command()
        @click.option("--name", default=None)
        @click.option("--count", default=1, type=int)
        @click.option("--strict", is_flag=True, default=False)
        @click.option("--files/--no-files", default=True)
        def command(name, count, strict, files):
            click.echo(reconstruct_command_line(command))

        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(command, ["--name", "Widget", "--strict", "--no-files"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "service_model_generate --name Widget --strict --no-files"

    def test_existing_paths_are_shown_by_name(self, tmp_path):
        model_path = tmp_path / "model.json"
        model_path.write_text("{}")

        @click.command()
        @click.option("--model-path", type=click.Path(exists=True))
        def command(model_path):
            click.echo(reconstruct_command_line(command))

        result = CliRunner().invoke(command, ["--model-path", str(model_path)])
        assert result.output.strip() == "service_model_generate --model-path model.json"


class TestGenerateCommand:
    """Test cases for the generate command"""

    def test_generate(self, tmp_path):
        output = tmp_path / "out"
        result = CliRunner().invoke(
            cli,
            [
                "generate",
                "--model-path",
                str(TEST_DATA / "widget_service.json"),
                "--base-output-path",
                str(output),
                "--base-name",
                "Widget",
                "--model-override",
                str(TEST_DATA / "widget_override.json"),
                "--http-client-configuration",
                str(TEST_DATA / "widget_http_client.json"),
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Generated 18 files" in result.output
        assert (output / "WidgetClient" / "AWSWidgetClient.py").is_file()

        first_line = (output / "WidgetModel" / "WidgetModelErrors.py").read_text().splitlines()[0]
        assert "service_model_generate generate --model-path widget_service.json" in first_line
        assert "--base-name Widget" in first_line
        assert "--model-override widget_override.json" in first_line

    def test_generate_openapi_without_package_files(self, tmp_path):
        result = CliRunner().invoke(
            cli,
            [
                "generate",
                "-m",
                str(TEST_DATA / "pet_store.yaml"),
                "-o",
                str(tmp_path),
                "-n",
                "PetStore",
                "--model-format",
                "openapi",
                "--client-target",
                "api-gateway",
                "--generation-type",
                "client",
                "--no-package-files",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Generated 9 files" in result.output
        assert (tmp_path / "PetStoreClient" / "APIGatewayPetStoreClient.py").is_file()
        assert not (tmp_path / "PetStoreModel").exists()
        assert not (tmp_path / "pyproject.toml").exists()

    def test_config_file_and_target_names(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("client_configuration_type: generator\nasync_apis: false\nmodel_target_name: FromConfig\n")
        result = CliRunner().invoke(
            cli,
            [
                "generate",
                "-m",
                str(TEST_DATA / "widget_service.json"),
                "-o",
                str(tmp_path / "out"),
                "-n",
                "Widget",
                "--config",
                str(config),
                "--model-target-name",
                "Models",
            ],
        )
        assert result.exit_code == 0, result.output
        assert (tmp_path / "out" / "Models" / "WidgetModelErrors.py").is_file()
        assert (tmp_path / "out" / "WidgetClient" / "AWSWidgetClientGenerator.py").is_file()
        client = (tmp_path / "out" / "WidgetClient" / "AWSWidgetClient.py").read_text()
        assert "from Models import WidgetModelStructures as _structures" in client
        protocol = (tmp_path / "out" / "WidgetClient" / "WidgetClientProtocol.py").read_text()
        assert "_async" not in protocol

    def test_invalid_model_fails(self, tmp_path):
        model_path = tmp_path / "model.json"
        model_path.write_text('{"metadata": {}, "shapes": {}}')
        result = CliRunner().invoke(cli, ["generate", "-m", str(model_path), "-o", str(tmp_path / "out"), "-n", "Broken"])
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "protocol" in result.output
        assert not (tmp_path / "out").exists()

    def test_unparseable_model_fails(self, tmp_path):
        model_path = tmp_path / "model.json"
        model_path.write_text("{")
        result = CliRunner().invoke(cli, ["generate", "-m", str(model_path), "-o", str(tmp_path / "out"), "-n", "Broken"])
        assert result.exit_code == 1
        assert "Cannot parse" in result.output

    def test_strict_overrides_fail_on_unknown_targets(self, tmp_path):
        override = tmp_path / "override.json"
        override.write_text('{"nameOverrides": {"Gadget.name": "title"}}')
        result = CliRunner().invoke(
            cli,
            [
                "generate",
                "-m",
                str(TEST_DATA / "widget_service.json"),
                "-o",
                str(tmp_path / "out"),
                "-n",
                "Widget",
                "--model-override",
                str(override),
                "--strict-overrides",
            ],
        )
        assert result.exit_code == 1
        assert "nameOverrides:Gadget.name" in result.output

    def test_missing_model_file(self, tmp_path):
        result = CliRunner().invoke(cli, ["generate", "-m", str(tmp_path / "missing.json"), "-o", str(tmp_path), "-n", "Widget"])
        assert result.exit_code == 2


class TestOutputsCommand:
    """Test cases for the outputs command"""

    def test_outputs(self):
        result = CliRunner().invoke(cli, ["outputs", "-n", "Widget"])
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert len(lines) == 14
        assert lines[0] == str(Path("WidgetModel") / "WidgetModelErrors.py")
        assert str(Path("WidgetClient") / "AWSWidgetClient.py") in lines
        assert str(Path("WidgetClient") / "AWSWidgetClientConfiguration.py") in lines

    def test_outputs_for_api_gateway_generator_client(self):
        result = CliRunner().invoke(
            cli,
            [
                "outputs",
                "-n",
                "Widget",
                "--generation-type",
                "client",
                "--client-target",
                "api-gateway",
                "--client-configuration-type",
                "generator",
                "--client-target-name",
                "Clients",
            ],
        )
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert len(lines) == 9
        assert str(Path("Clients") / "APIGatewayWidgetClientGenerator.py") in lines
        assert all(line.startswith("Clients") for line in lines)


if __name__ == "__main__":
    pytest.main([__file__])
