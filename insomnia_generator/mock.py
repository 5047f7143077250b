"""
Mock Value Synthesizer

Walks a message definition and fabricates one structurally valid JSON
instance of it. Values are pseudo-random but reproducible: every method gets
its own ``random.Random`` seeded from the method name, so adding, removing or
reordering methods never changes the example bodies of the others.

Usage:
    synthesizer = MockValueSynthesizer(registry)
    rng = seeded_random("SayHello")
    text = synthesizer.synthesize(registry.message_definition(".pkg.Req"), 0, rng)
"""

import hashlib
import logging
import random
import string
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, Optional

from google.protobuf import descriptor_pb2

from insomnia_generator.naming import json_name, qualify
from insomnia_generator.registry import MessageDefinition, TypeRegistry

logger = logging.getLogger(__name__)

FieldDescriptorProto = descriptor_pb2.FieldDescriptorProto

MAX_DEPTH = 25
REPEATED_COUNT = 3
STRING_LENGTH = 10

TIMESTAMP_TYPE = ".google.protobuf.Timestamp"
DURATION_TYPE = ".google.protobuf.Duration"
STRUCT_TYPE = ".google.protobuf.Struct"

# Unix seconds, 1973-01-01 plus up to ~31 years
TIMESTAMP_OFFSET = 94608000
TIMESTAMP_RANGE = 1000000000

LETTERS = string.ascii_lowercase + string.ascii_uppercase
INDENT = "\t"


class FieldKind(Enum):
    """Value categories the synthesizer distinguishes."""

    FLOAT = "float"
    SIGNED = "signed"
    UNSIGNED = "unsigned"
    BOOL = "bool"
    STRING = "string"
    MESSAGE = "message"
    ENUM = "enum"
    UNKNOWN = "unknown"


_KINDS: Dict[int, FieldKind] = {
    FieldDescriptorProto.TYPE_DOUBLE: FieldKind.FLOAT,
    FieldDescriptorProto.TYPE_FLOAT: FieldKind.FLOAT,
    FieldDescriptorProto.TYPE_INT32: FieldKind.SIGNED,
    FieldDescriptorProto.TYPE_INT64: FieldKind.SIGNED,
    FieldDescriptorProto.TYPE_SINT32: FieldKind.SIGNED,
    FieldDescriptorProto.TYPE_SINT64: FieldKind.SIGNED,
    FieldDescriptorProto.TYPE_SFIXED32: FieldKind.SIGNED,
    FieldDescriptorProto.TYPE_SFIXED64: FieldKind.SIGNED,
    FieldDescriptorProto.TYPE_UINT32: FieldKind.UNSIGNED,
    FieldDescriptorProto.TYPE_UINT64: FieldKind.UNSIGNED,
    FieldDescriptorProto.TYPE_FIXED32: FieldKind.UNSIGNED,
    FieldDescriptorProto.TYPE_FIXED64: FieldKind.UNSIGNED,
    FieldDescriptorProto.TYPE_BOOL: FieldKind.BOOL,
    FieldDescriptorProto.TYPE_STRING: FieldKind.STRING,
    FieldDescriptorProto.TYPE_MESSAGE: FieldKind.MESSAGE,
    FieldDescriptorProto.TYPE_BYTES: FieldKind.MESSAGE,
    FieldDescriptorProto.TYPE_ENUM: FieldKind.ENUM,
}


def field_kind(field: FieldDescriptorProto) -> FieldKind:
    return _KINDS.get(field.type, FieldKind.UNKNOWN)


def seeded_random(method_name: str) -> random.Random:
    """Generator seeded from the first 8 bytes of the MD5 of ``method_name``."""
    digest = hashlib.md5(method_name.encode("utf-8")).digest()
    return random.Random(int.from_bytes(digest[:8], "big"))


def quote(text: str) -> str:
    return f'"{text}"'


def random_string(rng: random.Random, length: int = STRING_LENGTH) -> str:
    return "".join(rng.choice(LETTERS) for _ in range(length))


def random_timestamp(rng: random.Random) -> str:
    seconds = rng.randrange(TIMESTAMP_RANGE) + TIMESTAMP_OFFSET
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def random_duration(rng: random.Random) -> str:
    return f"{rng.randrange(1000)}.{rng.randrange(100):03d}s"


def struct_placeholder(field: FieldDescriptorProto) -> str:
    return (
        f'{{"this field named {field.name} contains": "a dynamically typed map.", '
        f'"As input,": "you can pass any JSON object"}}'
    )


class MockValueSynthesizer:
    """
    Builds example JSON text for protobuf messages.

    The output is assembled as text rather than through ``json.dumps`` so
    that fields keep their declared order and nested objects are indented
    with tabs relative to the depth they appear at.
    """

    def __init__(self, registry: TypeRegistry, max_depth: int = MAX_DEPTH):
        self.registry = registry
        self.max_depth = max_depth
        self._scalars: Dict[FieldKind, Callable[[random.Random], str]] = {
            FieldKind.FLOAT: lambda rng: f"{rng.random() * 1000 - 500:.4f}",
            FieldKind.SIGNED: lambda rng: str(rng.randrange(1000) - 500),
            FieldKind.UNSIGNED: lambda rng: str(rng.randrange(1000)),
            FieldKind.BOOL: lambda rng: "false" if rng.random() < 0.5 else "true",
            FieldKind.STRING: lambda rng: quote(random_string(rng)),
        }

    def synthesize(
        self,
        definition: MessageDefinition,
        depth: int = 0,
        rng: Optional[random.Random] = None,
    ) -> str:
        """
        Synthesize one instance of ``definition`` as JSON object text.

        Args:
            definition: Message to synthesize
            depth: Nesting level; sets the indentation of the closing brace
            rng: Generator driving the values (a fresh unseeded one if None)

        Returns:
            Brace-delimited JSON object text
        """
        rng = rng or random.Random()
        fields = definition.descriptor.field
        last = len(fields) - 1

        lines = ["{\n"]
        for idx, field in enumerate(fields):
            separator = ",\n" if idx != last else "\n"
            key = quote(field.json_name or json_name(field.name))

            if field.label == FieldDescriptorProto.LABEL_REPEATED:
                lines.append(INDENT * (depth + 1) + key + ": [\n")
                for i in range(REPEATED_COUNT):
                    lines.append(INDENT * (depth + 2))
                    lines.append(self.synthesize_field(definition, field, depth + 1, rng))
                    lines.append(",\n" if i < REPEATED_COUNT - 1 else "\n")
                lines.append(INDENT * (depth + 1) + "]" + separator)
            else:
                lines.append(INDENT * (depth + 1) + key + ": ")
                lines.append(self.synthesize_field(definition, field, depth, rng))
                lines.append(separator)

        lines.append(INDENT * depth + "}")
        return "".join(lines)

    def synthesize_field(
        self,
        definition: MessageDefinition,
        field: FieldDescriptorProto,
        depth: int,
        rng: random.Random,
    ) -> str:
        """Synthesize a single (non-repeated) value for ``field``."""
        # Self-referential messages would otherwise recurse forever
        if depth >= self.max_depth:
            return quote(
                f"Max request depth of {self.max_depth} reached. "
                f"This may indicate a recursive message definition"
            )

        type_name = field.type_name
        if type_name == TIMESTAMP_TYPE:
            return quote(random_timestamp(rng))
        if type_name == DURATION_TYPE:
            return quote(random_duration(rng))
        if type_name == STRUCT_TYPE:
            return struct_placeholder(field)

        kind = field_kind(field)
        if kind in self._scalars:
            return self._scalars[kind](rng)
        if kind == FieldKind.MESSAGE:
            return self._synthesize_message(type_name, depth, rng)
        if kind == FieldKind.ENUM:
            return self.synthesize_enum(definition, field, rng)

        logger.warning(f"Unsupported type {field.type} for field {field.name}")
        return quote("PARSE_ERROR")

    def _synthesize_message(
        self, type_name: str, depth: int, rng: random.Random
    ) -> str:
        message = self.registry.message_definition(type_name)
        if message is None:
            logger.warning(f"Message {type_name} could not be found")
            return quote(f"Message {type_name} could not be found")
        return self.synthesize(message, depth + 1, rng)

    def synthesize_enum(
        self,
        definition: MessageDefinition,
        field: FieldDescriptorProto,
        rng: random.Random,
    ) -> str:
        """
        Pick a value of the field's enum.

        Enums nested in the current message are checked first, then enums
        declared at the top level of the message's file. Enums defined
        anywhere else fall back to the type name.
        """
        message_name = definition.full_name
        for enum in definition.descriptor.enum_type:
            if field.type_name == f"{message_name}.{enum.name}" and enum.value:
                return quote(rng.choice(enum.value).name)

        file = definition.file
        for enum in file.enum_type:
            if field.type_name == qualify(file.package, enum.name) and enum.value:
                return quote(rng.choice(enum.value).name)

        logger.debug(f"Enum {field.type_name} not resolvable from {message_name}")
        return quote(field.type_name)
