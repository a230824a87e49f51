"""Command-line entry point: ``databasin <resource> <action> ...``."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

import yaml

from databasin import __version__
from databasin.client import (
    ConfigurationClient,
    ConnectorsClient,
    DatabasinClient,
    PipelinesClient,
    parse_bulk_ids,
)
from databasin.enrichment.templates import (
    VARIABLE_HINTS,
    generate_from_template,
    get_template,
    list_templates,
)
from databasin.errors import DatabasinError, ValidationError, format_error
from databasin.settings import Settings

logger = logging.getLogger("databasin.cli")


def load_draft(path: Path) -> dict[str, Any]:
    """Read a pipeline draft from a YAML or JSON file."""
    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ValidationError(f"Cannot parse {path}: {exc}", field="file") from exc
    if not isinstance(data, dict):
        raise ValidationError(
            f"{path} must contain a mapping of pipeline fields",
            field="file",
            suggestions=["See 'databasin pipelines enrich --help' for the expected fields"],
        )
    return data


def parse_variables(assignments: list[str] | None) -> dict[str, str]:
    """Turn ``NAME=value`` pairs from ``--var`` into a mapping."""
    variables: dict[str, str] = {}
    for assignment in assignments or []:
        name, sep, value = assignment.partition("=")
        if not sep or not name.strip():
            raise ValidationError(
                f"Invalid variable assignment: {assignment!r}",
                field="variables",
                suggestions=["Use --var NAME=value, e.g. --var SOURCE_ID=101"],
            )
        variables[name.strip()] = value
    return variables


# -- handlers ----------------------------------------------------------------


async def _pipelines_enrich(args: argparse.Namespace, settings: Settings) -> Any:
    async with DatabasinClient(settings) as client:
        payload = await PipelinesClient(client).enrich(load_draft(args.file))
    return payload.to_wire()


async def _pipelines_create(args: argparse.Namespace, settings: Settings) -> Any:
    async with DatabasinClient(settings) as client:
        return await PipelinesClient(client).create(load_draft(args.file))


async def _pipelines_run(args: argparse.Namespace, settings: Settings) -> Any:
    async with DatabasinClient(settings) as client:
        return await PipelinesClient(client).run(args.id)


async def _pipelines_get(args: argparse.Namespace, settings: Settings) -> Any:
    ids = parse_bulk_ids(args.ids)
    async with DatabasinClient(settings) as client:
        pipelines = PipelinesClient(client)
        if len(ids) == 1:
            return await pipelines.get_by_id(ids[0])
        return [asdict(r) for r in await pipelines.get_many(ids)]


async def _templates_list(args: argparse.Namespace, settings: Settings) -> Any:
    return [
        {
            "name": t.name,
            "source": t.source_type,
            "target": t.target_type,
            "description": t.description,
        }
        for t in list_templates(args.type)
    ]


async def _templates_show(args: argparse.Namespace, settings: Settings) -> Any:
    template = get_template(args.name)
    shown = template.to_dict()
    shown["variables"] = {name: VARIABLE_HINTS.get(name, "") for name in template.variables}
    return shown


async def _templates_generate(args: argparse.Namespace, settings: Settings) -> Any:
    draft = generate_from_template(args.name, parse_variables(args.var))
    if args.output is None:
        return draft
    with open(args.output, "w", encoding="utf-8") as f:
        if args.output.suffix in (".yaml", ".yml"):
            yaml.safe_dump(draft, f, sort_keys=False)
        else:
            json.dump(draft, f, indent=2)
    logger.info("Draft written to %s", args.output)
    return None


async def _connectors_get(args: argparse.Namespace, settings: Settings) -> Any:
    ids = parse_bulk_ids(args.ids)
    async with DatabasinClient(settings) as client:
        connectors = ConnectorsClient(client)
        if len(ids) == 1:
            return await connectors.get_by_id(ids[0])
        return [asdict(r) for r in await connectors.get_many(ids)]


async def _connectors_discovery(args: argparse.Namespace, settings: Settings) -> Any:
    async with ConfigurationClient(settings) as configs:
        flow, findings = await configs.get_discovery_flow(args.name)
    for warning in findings.warnings:
        logger.warning("%s", warning.message)
    return {
        **flow.to_dict(),
        "errors": [e.message for e in findings.errors],
        "warnings": [w.message for w in findings.warnings],
    }


# -- parser ------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="databasin", description="Databasin platform CLI")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    resources = parser.add_subparsers(dest="resource", required=True)

    pipelines = resources.add_parser("pipelines", help="Manage pipelines")
    actions = pipelines.add_subparsers(dest="action", required=True)

    enrich = actions.add_parser("enrich", help="Print the full creation payload for a draft")
    enrich.add_argument("file", type=Path, help="Pipeline draft (YAML or JSON)")
    enrich.set_defaults(handler=_pipelines_enrich)

    create = actions.add_parser("create", help="Enrich a draft and create the pipeline")
    create.add_argument("file", type=Path, help="Pipeline draft (YAML or JSON)")
    create.set_defaults(handler=_pipelines_create)

    run = actions.add_parser("run", help="Trigger a manual pipeline run")
    run.add_argument("id", help="Pipeline ID")
    run.set_defaults(handler=_pipelines_run)

    get = actions.add_parser("get", help="Fetch one or more pipelines")
    get.add_argument("ids", nargs="+", help="Pipeline IDs (space or comma separated)")
    get.set_defaults(handler=_pipelines_get)

    template = actions.add_parser("template", help="Generate pipeline drafts from templates")
    template_actions = template.add_subparsers(dest="template_action", required=True)

    listing = template_actions.add_parser("list", help="List the built-in templates")
    listing.add_argument("--type", help="Only templates whose source or target matches")
    listing.set_defaults(handler=_templates_list)

    show = template_actions.add_parser("show", help="Show a template and its variables")
    show.add_argument("name", help="Template name")
    show.set_defaults(handler=_templates_show)

    generate = template_actions.add_parser("generate", help="Fill in a template")
    generate.add_argument("name", help="Template name")
    generate.add_argument(
        "--var",
        action="append",
        metavar="NAME=VALUE",
        help="Variable value (repeatable)",
    )
    generate.add_argument(
        "-o", "--output", type=Path, help="Write the draft here (.yaml/.yml or JSON)"
    )
    generate.set_defaults(handler=_templates_generate)

    connectors = resources.add_parser("connectors", help="Inspect connectors")
    actions = connectors.add_subparsers(dest="action", required=True)

    get = actions.add_parser("get", help="Fetch one or more connectors")
    get.add_argument("ids", nargs="+", help="Connector IDs (space or comma separated)")
    get.set_defaults(handler=_connectors_get)

    discovery = actions.add_parser("discovery", help="Show a connector type's discovery workflow")
    discovery.add_argument("name", help="Connector name, e.g. Postgres or Databricks")
    discovery.set_defaults(handler=_connectors_discovery)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI using settings from environment / .env file."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    if args.debug:
        settings.debug = True

    logging.basicConfig(level=settings.effective_log_level)
    logger.debug("databasin v%s (api=%s)", __version__, settings.api_url)

    try:
        result = asyncio.run(args.handler(args, settings))
    except DatabasinError as exc:
        print(format_error(exc), file=sys.stderr)
        return exc.exit_code
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if result is not None:
        print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
