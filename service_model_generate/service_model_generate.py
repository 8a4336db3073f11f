import logging
from pathlib import Path

import click

from .cli_utils import reconstruct_command_line
from .pipeline import (
    ApplicationDescription,
    ClientConfigurationType,
    ClientTarget,
    CodeGenerationCustomizations,
    GenerationType,
    HttpClientConfiguration,
    ModelFormat,
    ModelOverride,
    PipelineGenerator,
    ServiceModelGenerateError,
    declared_client_files,
    declared_model_files,
)
from .pipeline.model.loader import load_document


@click.group()
def cli():
    """Generate client libraries from service models."""


@cli.command()
@click.option("--model-path", "-m", required=True, type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("--base-output-path", "-o", required=True, type=click.Path(file_okay=False, resolve_path=True))
@click.option("--base-name", "-n", required=True, type=str)
@click.option("--generation-type", default="all", type=click.Choice([t.value for t in GenerationType]))
@click.option("--model-format", default="coral", type=click.Choice([f.value for f in ModelFormat]))
@click.option("--client-target", default="aws", type=click.Choice([t.value for t in ClientTarget]))
@click.option("--model-target-name", default=None, type=str, help="Name of the generated model package (default <base-name>Model)")
@click.option("--client-target-name", default=None, type=str, help="Name of the generated client package (default <base-name>Client)")
@click.option("--model-override", default=None, type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("--http-client-configuration", default=None, type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("--config", "-c", default=None, type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option(
    "--strict-overrides",
    is_flag=True,
    default=False,
    help="Fail when the model override references types, fields or operations the model does not declare",
)
@click.option("--package-files/--no-package-files", default=True, help="Write pyproject.toml, .gitignore and package __init__ files")
@click.option("--verbose", "-v", is_flag=True, default=False)
def generate(
    model_path,
    base_output_path,
    base_name,
    generation_type,
    model_format,
    client_target,
    model_target_name,
    client_target_name,
    model_override,
    http_client_configuration,
    config,
    strict_overrides,
    package_files,
    verbose,
):
    """Generate the model and client packages of a service."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        document = load_document(model_path)

        if config is not None:
            customizations = CodeGenerationCustomizations.from_dict(load_document(config))
        else:
            customizations = CodeGenerationCustomizations()

        # Command line options take precedence over the config file
        if model_target_name is not None:
            customizations.model_target_name = model_target_name
        if client_target_name is not None:
            customizations.client_target_name = client_target_name
        if http_client_configuration is not None:
            customizations.http_client_configuration = HttpClientConfiguration.from_dict(load_document(http_client_configuration))

        override = ModelOverride.from_dict(load_document(model_override)) if model_override is not None else None

        pipeline = PipelineGenerator(
            document,
            ApplicationDescription(base_name=base_name, base_file_path=base_output_path),
            customizations,
            model_format=ModelFormat(model_format),
            client_target=ClientTarget(client_target),
            model_override=override,
            strict_overrides=strict_overrides,
            generation_command=reconstruct_command_line(generate),
        )
        written = pipeline.generate(GenerationType(generation_type), package_files=package_files)
    except ServiceModelGenerateError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Generated {len(written)} files in {base_output_path}")


@cli.command()
@click.option("--base-name", "-n", required=True, type=str)
@click.option("--generation-type", default="all", type=click.Choice([t.value for t in GenerationType]))
@click.option("--client-target", default="aws", type=click.Choice([t.value for t in ClientTarget]))
@click.option(
    "--client-configuration-type",
    default="configurationObject",
    type=click.Choice([t.value for t in ClientConfigurationType]),
)
@click.option("--model-target-name", default=None, type=str)
@click.option("--client-target-name", default=None, type=str)
def outputs(base_name, generation_type, client_target, client_configuration_type, model_target_name, client_target_name):
    """Print the files the generate command writes, one path per line."""
    generation_type = GenerationType(generation_type)
    if generation_type in (GenerationType.MODEL, GenerationType.ALL):
        for file_name in declared_model_files(base_name):
            click.echo(str(Path(model_target_name or f"{base_name}Model") / file_name))
    if generation_type in (GenerationType.CLIENT, GenerationType.ALL):
        client_files = declared_client_files(
            base_name,
            ClientTarget(client_target).client_prefix,
            ClientConfigurationType(client_configuration_type),
        )
        for file_name in client_files:
            click.echo(str(Path(client_target_name or f"{base_name}Client") / file_name))
