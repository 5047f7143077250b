"""
Insomnia Generator - Test Configuration

Fixtures build descriptors directly with descriptor_pb2 so no protoc is needed.
"""

import sys
from pathlib import Path

import pytest
from google.protobuf import descriptor_pb2

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from insomnia_generator.naming import json_name  # noqa: E402
from insomnia_generator.registry import TypeRegistry  # noqa: E402

FieldDescriptorProto = descriptor_pb2.FieldDescriptorProto


def make_field(
    name,
    number,
    field_type,
    type_name="",
    repeated=False,
):
    """Build a field descriptor the way protoc fills it in."""
    return FieldDescriptorProto(
        name=name,
        number=number,
        type=field_type,
        type_name=type_name,
        json_name=json_name(name),
        label=(
            FieldDescriptorProto.LABEL_REPEATED
            if repeated
            else FieldDescriptorProto.LABEL_OPTIONAL
        ),
    )


def make_enum(name, *values):
    enum = descriptor_pb2.EnumDescriptorProto(name=name)
    for number, value in enumerate(values):
        enum.value.add(name=value, number=number)
    return enum


def make_service(name, *methods):
    """``methods`` are (name, input_type) pairs."""
    service = descriptor_pb2.ServiceDescriptorProto(name=name)
    for method_name, input_type in methods:
        service.method.add(
            name=method_name, input_type=input_type, output_type=input_type
        )
    return service


def add_method_comment(file, service_index, method_index, text):
    location = file.source_code_info.location.add()
    location.path.extend([6, service_index, 2, method_index])
    location.leading_comments = text


@pytest.fixture
def greeter_file():
    """helloworld.proto: Greeter.SayHello(HelloRequest{name, count})"""
    file = descriptor_pb2.FileDescriptorProto(
        name="helloworld.proto", package="helloworld", syntax="proto3"
    )
    request = file.message_type.add(name="HelloRequest")
    request.field.extend(
        [
            make_field("name", 1, FieldDescriptorProto.TYPE_STRING),
            make_field("count", 2, FieldDescriptorProto.TYPE_INT32),
        ]
    )
    file.service.append(make_service("Greeter", ("SayHello", ".helloworld.HelloRequest")))
    add_method_comment(file, 0, 0, " Sends a greeting\n")
    return file


@pytest.fixture
def well_known_file():
    """google/protobuf/{timestamp,duration,struct}.proto, collapsed into one file."""
    file = descriptor_pb2.FileDescriptorProto(
        name="google/protobuf/well_known.proto", package="google.protobuf"
    )
    timestamp = file.message_type.add(name="Timestamp")
    timestamp.field.extend(
        [
            make_field("seconds", 1, FieldDescriptorProto.TYPE_INT64),
            make_field("nanos", 2, FieldDescriptorProto.TYPE_INT32),
        ]
    )
    duration = file.message_type.add(name="Duration")
    duration.field.extend(
        [
            make_field("seconds", 1, FieldDescriptorProto.TYPE_INT64),
            make_field("nanos", 2, FieldDescriptorProto.TYPE_INT32),
        ]
    )
    file.message_type.add(name="Struct")
    return file


@pytest.fixture
def catalog_file():
    """A richer schema exercising every field kind, enums and recursion."""
    file = descriptor_pb2.FileDescriptorProto(name="shop/catalog.proto", package="shop")
    file.enum_type.append(make_enum("Color", "RED", "GREEN", "BLUE"))

    item = file.message_type.add(name="Item")
    item.enum_type.append(make_enum("Size", "SMALL", "LARGE"))
    item.field.extend(
        [
            make_field("price", 1, FieldDescriptorProto.TYPE_DOUBLE),
            make_field("weight", 2, FieldDescriptorProto.TYPE_FLOAT),
            make_field("stock", 3, FieldDescriptorProto.TYPE_UINT32),
            make_field("in_sale", 4, FieldDescriptorProto.TYPE_BOOL),
            make_field("color", 5, FieldDescriptorProto.TYPE_ENUM, ".shop.Color"),
            make_field("size", 6, FieldDescriptorProto.TYPE_ENUM, ".shop.Item.Size"),
            make_field("tags", 7, FieldDescriptorProto.TYPE_STRING, repeated=True),
            make_field(
                "created_at", 8, FieldDescriptorProto.TYPE_MESSAGE,
                ".google.protobuf.Timestamp",
            ),
            make_field(
                "ttl", 9, FieldDescriptorProto.TYPE_MESSAGE, ".google.protobuf.Duration"
            ),
            make_field(
                "attributes", 10, FieldDescriptorProto.TYPE_MESSAGE,
                ".google.protobuf.Struct",
            ),
        ]
    )

    category = file.message_type.add(name="Category")
    category.field.extend(
        [
            make_field("title", 1, FieldDescriptorProto.TYPE_STRING),
            make_field("parent", 2, FieldDescriptorProto.TYPE_MESSAGE, ".shop.Category"),
            make_field(
                "items", 3, FieldDescriptorProto.TYPE_MESSAGE, ".shop.Item", repeated=True
            ),
        ]
    )

    broken = file.message_type.add(name="Broken")
    broken.field.extend(
        [
            make_field("missing", 1, FieldDescriptorProto.TYPE_MESSAGE, ".shop.Missing"),
            make_field("foreign", 2, FieldDescriptorProto.TYPE_ENUM, ".other.Mode"),
        ]
    )

    file.service.append(
        make_service(
            "Catalog",
            ("PutItem", ".shop.Item"),
            ("AddCategory", ".shop.Category"),
            ("Break", ".shop.Broken"),
        )
    )
    file.service.append(make_service("Inventory", ("Count", ".shop.Item")))
    return file


@pytest.fixture
def registry(greeter_file, well_known_file, catalog_file):
    return TypeRegistry([well_known_file, greeter_file, catalog_file])
