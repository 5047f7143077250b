"""
Insomnia Generator - Main Entry Point

Without arguments this runs as a protoc plugin (``protoc-gen-insomniaenv``).
Given a descriptor set it writes the exports directly:

    protoc --include_imports --include_source_info \\
        --descriptor_set_out=service.pb service.proto
    python -m insomnia_generator --descriptor-set service.pb --output-dir out/
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from google.protobuf import descriptor_pb2
from google.protobuf.message import DecodeError

from insomnia_generator.builder import ResourceGraphBuilder
from insomnia_generator.config import GeneratorConfig
from insomnia_generator.exceptions import InsomniaGeneratorException, SchemaException
from insomnia_generator.plugin import run
from insomnia_generator.registry import TypeRegistry

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL_ENV = "INSOMNIAENV_LOG_LEVEL"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="protoc-gen-insomniaenv",
        description="Generate Insomnia workspace exports from protobuf services",
    )

    parser.add_argument(
        "--descriptor-set",
        type=str,
        help="Serialized FileDescriptorSet; omit to run as a protoc plugin",
    )
    parser.add_argument(
        "--output-dir", type=str, default=".", help="Directory to write exports to"
    )
    parser.add_argument(
        "--file",
        action="append",
        dest="files",
        help="Proto file to export (repeatable, default: every file with services)",
    )

    # Configuration
    config_group = parser.add_mutually_exclusive_group()
    config_group.add_argument("--config", type=str, help="YAML or JSON configuration file")
    config_group.add_argument("--parameter", type=str, help="JSON configuration payload")

    # Logging
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level",
    )

    return parser


def load_descriptor_set(path: str) -> descriptor_pb2.FileDescriptorSet:
    descriptor_set = descriptor_pb2.FileDescriptorSet()
    try:
        with open(path, "rb") as f:
            descriptor_set.ParseFromString(f.read())
    except (OSError, DecodeError) as e:
        raise SchemaException(f"Cannot read descriptor set {path}: {e}")
    return descriptor_set


def export_descriptor_set(
    descriptor_set: descriptor_pb2.FileDescriptorSet,
    output_dir: Path,
    config: GeneratorConfig,
    files: Optional[List[str]] = None,
) -> List[Path]:
    """
    Write one export per selected file that declares a service.

    Returns:
        Paths of the written exports
    """
    registry = TypeRegistry(descriptor_set.file)
    builder = ResourceGraphBuilder(registry)

    if files:
        selected = []
        for name in files:
            file = registry.file(name)
            if file is None:
                raise SchemaException(f"File {name} not in descriptor set", file_name=name)
            selected.append(file)
    else:
        selected = list(descriptor_set.file)

    rendered = [builder.render(file, config) for file in selected]

    written = []
    for generated in rendered:
        if generated is None:
            continue
        path = output_dir / generated.name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(generated.content, encoding="utf-8")
        logger.info(f"Generated: {path}")
        written.append(path)
    return written


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for protoc-gen-insomniaenv."""
    args = build_parser().parse_args(argv)

    # stdout carries the plugin protocol, so logs always go to stderr
    level = args.log_level or os.getenv(LOG_LEVEL_ENV, "WARNING")
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    try:
        if not args.descriptor_set:
            run(sys.stdin.buffer, sys.stdout.buffer)
            return 0

        if args.config:
            config = GeneratorConfig.from_file(args.config)
        else:
            config = GeneratorConfig.from_parameter(args.parameter)

        descriptor_set = load_descriptor_set(args.descriptor_set)
        written = export_descriptor_set(
            descriptor_set, Path(args.output_dir), config, args.files
        )
        logger.info(f"Wrote {len(written)} export(s) to {args.output_dir}")
        return 0
    except InsomniaGeneratorException as e:
        logger.error(f"Failed to generate exports: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
