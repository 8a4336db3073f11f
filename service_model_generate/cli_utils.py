"""
CLI utilities for command line reconstruction and introspection.
"""

from pathlib import Path

import click

PROGRAM_NAME = "service_model_generate"


def _format_value(value) -> str:
    # Existing paths are shown by file name so generated files do not embed local directories
    if isinstance(value, (str, Path)):
        path_obj = Path(str(value))
        return path_obj.name if path_obj.exists() else str(value)
    if hasattr(value, "value"):
        return str(value.value)
    return str(value)


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Reconstruct the command line of the running subcommand using Click introspection.

    Options left at their default value are omitted. Boolean flags are shown
    by their flag alone (``--strict-overrides``), or by their secondary name
    when switched off (``--no-package-files``).

    Args:
        click_command: Click command object for introspection

    Returns:
        Reconstructed command line string, or the program name when no
        Click context is active
    """
    try:
        ctx = click.get_current_context()
    except RuntimeError:
        return PROGRAM_NAME

    cmd_parts = [PROGRAM_NAME]
    if ctx.parent is not None and ctx.info_name:
        cmd_parts.append(ctx.info_name)

    cli_args = ctx.params
    arguments = []
    options = []
    for param in click_command.params:
        if param.name not in cli_args:
            continue
        value = cli_args[param.name]
        if value is None or value == ():
            continue

        if isinstance(param, click.Argument):
            arguments.append(_format_value(value))
            continue
        if not isinstance(param, click.Option) or value == param.default:
            continue

        if param.is_flag and isinstance(value, bool):
            if value:
                options.append(param.opts[0])
            elif param.secondary_opts:
                options.append(param.secondary_opts[0])
            continue
        flag = param.opts[0] if param.opts else f"--{param.name}"
        options.extend([flag, _format_value(value)])

    cmd_parts.extend(arguments)
    cmd_parts.extend(options)
    return " ".join(cmd_parts)
