"""
protoc Plugin Transport

protoc writes a serialized ``CodeGeneratorRequest`` to the plugin's stdin and
reads a ``CodeGeneratorResponse`` from its stdout. Errors are reported through
the response's ``error`` field, which makes protoc fail the invocation.
"""

import logging
from typing import BinaryIO

from google.protobuf.compiler import plugin_pb2
from google.protobuf.message import DecodeError

from insomnia_generator.builder import ResourceGraphBuilder
from insomnia_generator.config import GeneratorConfig
from insomnia_generator.exceptions import InsomniaGeneratorException, PluginException
from insomnia_generator.registry import TypeRegistry, files_to_generate

logger = logging.getLogger(__name__)


def generate(
    request: plugin_pb2.CodeGeneratorRequest,
) -> plugin_pb2.CodeGeneratorResponse:
    """
    Produce one export per requested file that declares a service.

    Any failure aborts the whole response; protoc then writes no files.
    """
    response = plugin_pb2.CodeGeneratorResponse()
    response.supported_features = plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL

    try:
        config = GeneratorConfig.from_parameter(request.parameter)
        builder = ResourceGraphBuilder(TypeRegistry(request.proto_file))

        generated = []
        for file in files_to_generate(request):
            rendered = builder.render(file, config)
            if rendered is not None:
                generated.append(rendered)
    except InsomniaGeneratorException as e:
        logger.error(f"Generation failed: {e}")
        response.error = e.message
        return response

    for rendered in generated:
        out = response.file.add()
        out.name = rendered.name
        out.content = rendered.content
        logger.info(f"Generated: {rendered.name}")

    return response


def read_request(stream: BinaryIO) -> plugin_pb2.CodeGeneratorRequest:
    request = plugin_pb2.CodeGeneratorRequest()
    try:
        request.ParseFromString(stream.read())
    except DecodeError as e:
        raise PluginException(f"Cannot parse CodeGeneratorRequest: {e}")
    return request


def run(stdin: BinaryIO, stdout: BinaryIO) -> None:
    """Read a request from ``stdin`` and write the response to ``stdout``."""
    request = read_request(stdin)
    response = generate(request)
    stdout.write(response.SerializeToString())
    stdout.flush()
