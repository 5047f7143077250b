"""
Resource Graph Builder

Assembles the Insomnia export for one schema file: a workspace, the
environment chain, and one request group per service holding one example
request per method.
"""

import json
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from google.protobuf import descriptor_pb2

from insomnia_generator.config import (
    BASE_ENVIRONMENT_ID,
    LOCALHOST_HTTP_ID,
    LOCALHOST_HTTPS_ID,
    GeneratorConfig,
)
from insomnia_generator.exceptions import ConfigurationException
from insomnia_generator.mock import MockValueSynthesizer, quote, seeded_random
from insomnia_generator.naming import output_file_name, path_prefix, workspace_name
from insomnia_generator.registry import TypeRegistry
from insomnia_generator.resources import (
    JSON_MIME_TYPE,
    Environment,
    InsomniaExport,
    Request,
    RequestBody,
    RequestGroup,
    Resource,
    Workspace,
)

logger = logging.getLogger(__name__)


@dataclass
class GeneratedFile:
    """A rendered export document and the name to write it under."""

    name: str
    content: str


class ResourceGraphBuilder:
    """
    Builds export documents for schema files.

    Example:
        builder = ResourceGraphBuilder(TypeRegistry(request.proto_file))
        export = builder.build(file, GeneratorConfig.from_parameter(param))
    """

    def __init__(
        self,
        registry: TypeRegistry,
        synthesizer: Optional[MockValueSynthesizer] = None,
    ):
        self.registry = registry
        self.synthesizer = synthesizer or MockValueSynthesizer(registry)

    def build(
        self,
        file: descriptor_pb2.FileDescriptorProto,
        config: Optional[GeneratorConfig] = None,
    ) -> Optional[InsomniaExport]:
        """
        Build the export for ``file``.

        Args:
            file: Schema file to export
            config: Generator configuration (defaults if None)

        Returns:
            The export, or None if the file declares no services
        """
        if not file.service:
            logger.debug(f"Skipping {file.name}: no services")
            return None

        config = config or GeneratorConfig()

        workspace = build_workspace(file)
        check_environment_names(file, workspace.id, config)

        resources: List[Resource] = [workspace]
        resources.extend(build_environments(workspace.id, config))
        resources.extend(self.build_services(workspace.id, file))

        logger.info(f"Built {len(resources)} resources for {file.name}")
        return InsomniaExport(
            export_format=config.export_format,
            export_source=config.export_source,
            resources=resources,
        )

    def render(
        self,
        file: descriptor_pb2.FileDescriptorProto,
        config: Optional[GeneratorConfig] = None,
    ) -> Optional[GeneratedFile]:
        """Build and serialize the export for ``file``."""
        config = config or GeneratorConfig()
        export = self.build(file, config)
        if export is None:
            return None

        content = json.dumps(export.to_dict(), indent=config.indent, ensure_ascii=False)
        return GeneratedFile(name=output_file_name(file.name), content=content)

    def build_services(
        self, workspace_id: str, file: descriptor_pb2.FileDescriptorProto
    ) -> List[Resource]:
        resources: List[Resource] = []
        for service in file.service:
            group_id = request_group_id(service)
            resources.append(
                RequestGroup(
                    id=group_id,
                    parent_id=workspace_id,
                    name=service.name,
                    environment={
                        service.name: "{{ base_url }}"
                        + path_prefix(file.package, service.name)
                    },
                )
            )

            requests = [
                self.build_request(group_id, file, service, method)
                for method in service.method
            ]
            # Sorted by ID so regenerated exports diff cleanly
            requests.sort(key=lambda request: request.id)
            resources.extend(requests)

        return resources

    def build_request(
        self,
        group_id: str,
        file: descriptor_pb2.FileDescriptorProto,
        service: descriptor_pb2.ServiceDescriptorProto,
        method: descriptor_pb2.MethodDescriptorProto,
    ) -> Request:
        comments = self.registry.method_comments(file, service, method)

        return Request(
            id=request_id(service, method),
            parent_id=group_id,
            name=method.name,
            method="POST",
            url=f"{{{{{service.name}}}}}{method.name}",
            headers=[{"name": "Content-Type", "value": JSON_MIME_TYPE}],
            body=RequestBody(mime_type=JSON_MIME_TYPE, text=self.mock_body(method)),
            description=comments.leading,
        )

    def mock_body(self, method: descriptor_pb2.MethodDescriptorProto) -> str:
        """Example request body, reproducible for a given method name."""
        rng = seeded_random(method.name)
        message = self.registry.message_definition(method.input_type)
        if message is None:
            logger.warning(
                f"Input type {method.input_type} of {method.name} could not be found"
            )
            return quote(f"Message {method.input_type} could not be found")

        logger.debug(f"Synthesizing {message.full_name} for {method.name}")
        return self.synthesizer.synthesize(message, 0, rng)


def build_workspace(file: descriptor_pb2.FileDescriptorProto) -> Workspace:
    # File name alone collides across packages
    return Workspace(
        id=f"workspace-{file.name}-{file.package}",
        parent_id=None,
        name=workspace_name(file.name),
    )


def request_group_id(service: descriptor_pb2.ServiceDescriptorProto) -> str:
    return f"request_group-{service.name}"


def request_id(
    service: descriptor_pb2.ServiceDescriptorProto,
    method: descriptor_pb2.MethodDescriptorProto,
) -> str:
    return f"request-{service.name}-{method.name}"


def check_environment_names(
    file: descriptor_pb2.FileDescriptorProto,
    workspace_id: str,
    config: GeneratorConfig,
) -> None:
    """
    Reject configured environments whose name is the ID of another resource
    in the export.

    Raises:
        ConfigurationException: on the first clashing name
    """
    taken = {workspace_id}
    for service in file.service:
        taken.add(request_group_id(service))
        for method in service.method:
            taken.add(request_id(service, method))

    for name in config.environments:
        if name in taken:
            raise ConfigurationException(
                f"Environment name {name!r} clashes with a resource ID in {file.name}",
                config_key=f"environments.{name}",
            )


def build_environments(
    workspace_id: str, config: GeneratorConfig
) -> List[Environment]:
    """Base environment, configured environments, then the localhost ones."""
    environments = [
        Environment(
            id=BASE_ENVIRONMENT_ID,
            parent_id=workspace_id,
            name="Base",
            data={},
        )
    ]

    for name, url in config.environments.items():
        environments.append(
            Environment(
                id=name,
                parent_id=BASE_ENVIRONMENT_ID,
                name=name,
                data={"base_url": url},
            )
        )

    localhost: List[Tuple[str, str, str]] = [
        (LOCALHOST_HTTPS_ID, "Localhost - Https", config.localhost_https_url),
        (LOCALHOST_HTTP_ID, "Localhost - Http", config.localhost_http_url),
    ]
    for env_id, name, url in localhost:
        environments.append(
            Environment(
                id=env_id,
                parent_id=BASE_ENVIRONMENT_ID,
                name=name,
                data={"base_url": url},
            )
        )

    return environments
