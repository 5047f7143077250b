"""
Insomnia Export Resources

The export is a flat, ordered list of resources linked by ``parentId``.
Each dataclass knows how to render itself with the key names and key order
Insomnia expects.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

EXPORT_TYPE = "export"
JSON_MIME_TYPE = "application/json"


@dataclass
class Resource:
    """Common fields of every Insomnia resource."""

    id: str
    parent_id: Optional[str]
    name: str

    type: str = field(default="", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_type": self.type,
            "_id": self.id,
            "parentId": self.parent_id,
            "name": self.name,
        }


@dataclass
class Workspace(Resource):
    """Root container, one per schema file."""

    def __post_init__(self):
        self.type = "workspace"


@dataclass
class Environment(Resource):
    """Variables available to requests, inherited down the parent chain."""

    data: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.type = "environment"

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["data"] = dict(self.data)
        return result


@dataclass
class RequestGroup(Resource):
    """Folder holding the requests of one service."""

    environment: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.type = "request_group"

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["environment"] = dict(self.environment)
        return result


@dataclass
class RequestBody:
    mime_type: str
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"mimeType": self.mime_type, "text": self.text}


@dataclass
class Request(Resource):
    """Example request for one RPC method."""

    method: str = "POST"
    url: str = ""
    headers: List[Dict[str, str]] = field(default_factory=list)
    body: Optional[RequestBody] = None
    description: str = ""

    def __post_init__(self):
        self.type = "request"

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update(
            {
                "method": self.method,
                "url": self.url,
                "headers": [dict(header) for header in self.headers],
                "body": self.body.to_dict() if self.body else {},
                "description": self.description,
            }
        )
        return result


@dataclass
class InsomniaExport:
    """Export document envelope."""

    export_format: int
    export_source: str
    resources: List[Resource] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_type": EXPORT_TYPE,
            "__export_format": self.export_format,
            "__export_source": self.export_source,
            "resources": [resource.to_dict() for resource in self.resources],
        }
