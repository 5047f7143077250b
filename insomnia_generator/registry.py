"""
Type Registry

Indexes the messages of every file in a descriptor set by fully-qualified
name, and looks up source comments for methods.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2

from insomnia_generator.exceptions import SchemaException
from insomnia_generator.naming import qualify

logger = logging.getLogger(__name__)

# FileDescriptorProto.service = 6, ServiceDescriptorProto.method = 2
_SERVICE_PATH = 6
_METHOD_PATH = 2


@dataclass
class MessageDefinition:
    """A message together with the file and messages that enclose it."""

    descriptor: descriptor_pb2.DescriptorProto
    file: descriptor_pb2.FileDescriptorProto
    lineage: List[descriptor_pb2.DescriptorProto] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        """Fully-qualified name with a leading dot, e.g. ``.pkg.Outer.Inner``."""
        names = [parent.name for parent in self.lineage]
        names.append(self.descriptor.name)
        return qualify(self.file.package, *names)


@dataclass
class Comments:
    leading: str = ""


class TypeRegistry:
    """
    Resolves type names across all files handed to the plugin.

    Example:
        registry = TypeRegistry(request.proto_file)
        msg = registry.message_definition(".twitch.example.Hat")
    """

    def __init__(self, files: Iterable[descriptor_pb2.FileDescriptorProto]):
        self._files: Dict[str, descriptor_pb2.FileDescriptorProto] = {}
        self._messages: Dict[str, MessageDefinition] = {}

        for file in files:
            self._files[file.name] = file
            for message in file.message_type:
                self._register(file, message, [])

        logger.debug(
            f"Registered {len(self._messages)} messages from {len(self._files)} files"
        )

    def _register(
        self,
        file: descriptor_pb2.FileDescriptorProto,
        message: descriptor_pb2.DescriptorProto,
        lineage: List[descriptor_pb2.DescriptorProto],
    ) -> None:
        definition = MessageDefinition(descriptor=message, file=file, lineage=lineage)
        self._messages[definition.full_name] = definition
        for nested in message.nested_type:
            self._register(file, nested, lineage + [message])

    def message_definition(self, type_name: str) -> Optional[MessageDefinition]:
        """Return the definition for a fully-qualified type name, or None."""
        return self._messages.get(type_name)

    def file(self, name: str) -> Optional[descriptor_pb2.FileDescriptorProto]:
        return self._files.get(name)

    def method_comments(
        self,
        file: descriptor_pb2.FileDescriptorProto,
        service: descriptor_pb2.ServiceDescriptorProto,
        method: descriptor_pb2.MethodDescriptorProto,
    ) -> Comments:
        """
        Look up the comments attached to a method.

        Files compiled without source info have no comments; an empty
        ``Comments`` is returned in that case.
        """
        path = _method_path(file, service, method)
        if path is None:
            return Comments()

        for location in file.source_code_info.location:
            if tuple(location.path) == path:
                return Comments(leading=location.leading_comments)
        return Comments()


def _method_path(
    file: descriptor_pb2.FileDescriptorProto,
    service: descriptor_pb2.ServiceDescriptorProto,
    method: descriptor_pb2.MethodDescriptorProto,
) -> Optional[Tuple[int, ...]]:
    for service_index, candidate in enumerate(file.service):
        if candidate.name != service.name:
            continue
        for method_index, m in enumerate(candidate.method):
            if m.name == method.name:
                return (_SERVICE_PATH, service_index, _METHOD_PATH, method_index)
    return None


def files_to_generate(
    request: plugin_pb2.CodeGeneratorRequest,
) -> List[descriptor_pb2.FileDescriptorProto]:
    """
    Return the files protoc asked the plugin to generate, in request order.

    Raises:
        SchemaException: if a requested file is missing from ``proto_file``
    """
    by_name = {file.name: file for file in request.proto_file}
    files = []
    for name in request.file_to_generate:
        if name not in by_name:
            raise SchemaException(
                f"File {name} was requested but not provided", file_name=name
            )
        files.append(by_name[name])
    return files
