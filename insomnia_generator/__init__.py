"""
Insomnia Workspace Generator

Generates Insomnia workspace exports from protobuf service definitions:
- One workspace per .proto file that declares services
- Base, localhost and configurable environments
- One request group per service, one request per RPC method
- Reproducible example request bodies synthesized from the input messages

Usage:
    protoc --insomniaenv_out=. service.proto

    from insomnia_generator import ResourceGraphBuilder, TypeRegistry

    builder = ResourceGraphBuilder(TypeRegistry(request.proto_file))
    export = builder.build(file, GeneratorConfig.from_parameter(param))
"""

from insomnia_generator.builder import GeneratedFile, ResourceGraphBuilder
from insomnia_generator.config import GeneratorConfig
from insomnia_generator.exceptions import (
    ConfigurationException,
    InsomniaGeneratorException,
    PluginException,
    SchemaException,
)
from insomnia_generator.mock import MAX_DEPTH, MockValueSynthesizer, seeded_random
from insomnia_generator.registry import TypeRegistry

__all__ = [
    "ResourceGraphBuilder",
    "GeneratedFile",
    "GeneratorConfig",
    "MockValueSynthesizer",
    "TypeRegistry",
    "seeded_random",
    "MAX_DEPTH",
    "InsomniaGeneratorException",
    "ConfigurationException",
    "SchemaException",
    "PluginException",
]
