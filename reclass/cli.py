"""
ReClass CLI

Command line tool for inspecting and tidying project files
"""

import json
from typing import Any, Dict, Optional, Tuple

import click
import yaml

from . import __version__
from .config import (
    ReClassConfig,
    get_default_config,
    load_config_from_file,
    load_env_overrides,
    merge_configs,
    validate_config,
)
from .core.project import ReClassProject
from .core.nodes import (
    BaseNode,
    BaseTextNode,
    BaseWrapperArrayNode,
    BaseWrapperNode,
    BitFieldNode,
    ClassInstanceNode,
    ClassNode,
    FunctionNode,
    VTableNode,
)
from .exchange.constants import FILE_VERSION, XML_PLATFORM_ATTRIBUTE, XML_VERSION_ATTRIBUTE
from .exchange.reader import load_project, read_document
from .exchange.writer import save_project
from .utils.logging import StandardLogger, configure_logging, get_logger

log = get_logger(__name__)


def node_to_dict(node: BaseNode) -> Dict[str, Any]:
    """Structural summary of a node"""
    data: Dict[str, Any] = {
        "type": type(node).__name__,
        "name": node.name,
        "offset": node.offset,
        "size": node.memory_size,
    }
    if node.comment:
        data["comment"] = node.comment
    if node.is_hidden:
        data["hidden"] = True

    if isinstance(node, ClassInstanceNode):
        if node.inner_node is not None:
            data["reference"] = node.inner_node.name
    elif isinstance(node, BaseWrapperNode) and node.inner_node is not None:
        data["inner"] = node_to_dict(node.inner_node)

    if isinstance(node, VTableNode):
        data["methods"] = [m.name for m in node.nodes]
    elif isinstance(node, BaseWrapperArrayNode):
        data["count"] = node.count
    elif isinstance(node, BaseTextNode):
        data["length"] = node.length
    elif isinstance(node, BitFieldNode):
        data["bits"] = node.bits
    elif isinstance(node, FunctionNode):
        data["signature"] = node.signature
        if node.belongs_to_class is not None:
            data["belongs_to"] = node.belongs_to_class.name
    return data


def class_to_dict(class_node: ClassNode) -> Dict[str, Any]:
    return {
        "uuid": str(class_node.uuid),
        "name": class_node.name,
        "comment": class_node.comment,
        "address": class_node.address_formula,
        "size": class_node.memory_size,
        "nodes": [node_to_dict(n) for n in class_node.nodes],
    }


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "-c", "config_path",
    type=click.Path(exists=True),
    help="Configuration file (YAML or JSON)"
)
@click.option("--log-level", help="Override the configured log level")
@click.pass_context
def cli(ctx, config_path: Optional[str], log_level: Optional[str]):
    """
    ReClass - inspect and tidy project files

    Settings come from the defaults or --config, then RECLASS_* environment
    variables, then --log-level.
    """
    config = load_config_from_file(config_path) if config_path else get_default_config()
    try:
        config = merge_configs(config, load_env_overrides())
    except ValueError as e:
        raise click.UsageError(str(e))
    if log_level:
        config.log_level = log_level

    issues = validate_config(config)
    if issues:
        raise click.UsageError("; ".join(issues))

    level = "DEBUG" if config.debug else config.log_level
    configure_logging(level, config.log_format, config.use_structlog)
    ctx.obj = config


@cli.command()
@click.argument("project_file", type=click.Path())
@click.option(
    "--class", "class_names",
    multiple=True,
    help="Name of a class to create (repeatable)"
)
@click.pass_obj
def new(config: ReClassConfig, project_file: str, class_names: Tuple[str, ...]):
    """Create a project file with placeholder classes"""
    with ReClassProject() as project:
        for name in class_names or ("N0000000",):
            project.add_class(ClassNode.create(name, config.default_class_node_count))
        save_project(project, project_file, StandardLogger(__name__), config=config)

        log.info("created project", classes=len(project), target=project_file)
        click.echo(f"{len(project)} classes written to: {project_file}")


@cli.command()
@click.argument("project_file", type=click.Path(exists=True))
@click.pass_obj
def info(config: ReClassConfig, project_file: str):
    """Show a summary of a project file"""
    root = read_document(project_file)
    project = load_project(project_file, StandardLogger(__name__), config=config)

    click.echo(f"File:      {project_file}")
    click.echo(f"Version:   {root.get(XML_VERSION_ATTRIBUTE)} (supported: {FILE_VERSION})")
    click.echo(f"Platform:  {root.get(XML_PLATFORM_ATTRIBUTE)}")
    click.echo(f"Classes:   {len(project)}")
    click.echo(f"Nodes:     {sum(len(c.nodes) for c in project.classes)}")
    click.echo(f"Data keys: {len(project.custom_data)}")


@cli.command()
@click.argument("project_file", type=click.Path(exists=True))
@click.option(
    "--format", "fmt",
    type=click.Choice(["json", "yaml"]),
    default="json",
    help="Output format"
)
@click.option("--output", "-o", type=click.Path(), help="Write the dump to a file")
@click.pass_obj
def dump(config: ReClassConfig, project_file: str, fmt: str, output: Optional[str]):
    """Dump the classes of a project file"""
    project = load_project(project_file, StandardLogger(__name__), config=config)
    data = {
        "classes": [class_to_dict(c) for c in project.classes],
        "custom_data": dict(project.custom_data),
    }

    if fmt == "json":
        output_str = json.dumps(data, indent=2, ensure_ascii=False)
    else:
        output_str = yaml.safe_dump(data, allow_unicode=True, sort_keys=False)

    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(output_str)
        click.echo(f"Dump written to: {output}")
    else:
        click.echo(output_str)


@cli.command()
@click.argument("project_file", type=click.Path(exists=True))
@click.option("--output", "-o", type=click.Path(), help="Save to another file")
@click.pass_obj
def prune(config: ReClassConfig, project_file: str, output: Optional[str]):
    """Remove unreferenced classes holding only placeholder nodes"""
    sink = StandardLogger(__name__)
    project = load_project(project_file, sink, config=config)

    removed = project.remove_unused_classes()
    target = output or project_file
    save_project(project, target, sink, config=config)

    log.info("pruned project", removed=len(removed), target=target)
    for class_node in removed:
        click.echo(f"Removed {class_node.name or class_node.uuid}")
    click.echo(f"{len(removed)} classes removed, saved to: {target}")


def main():
    cli()


if __name__ == "__main__":
    main()
