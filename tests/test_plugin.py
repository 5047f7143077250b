"""
Tests for the protoc plugin transport and the command line entry point.
"""

import io
import json

import pytest
from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2

from insomnia_generator.__main__ import export_descriptor_set, main
from insomnia_generator.config import GeneratorConfig
from insomnia_generator.exceptions import PluginException, SchemaException
from insomnia_generator.plugin import generate, read_request, run


@pytest.fixture
def request_proto(greeter_file, well_known_file, catalog_file):
    return plugin_pb2.CodeGeneratorRequest(
        file_to_generate=["helloworld.proto", "google/protobuf/well_known.proto"],
        proto_file=[well_known_file, greeter_file, catalog_file],
    )


class TestGenerate:
    """Test CodeGeneratorRequest handling."""

    def test_files_with_services_only(self, request_proto):
        response = generate(request_proto)

        assert not response.error
        assert [f.name for f in response.file] == ["helloworld-insomnia-env.json"]

    def test_content_is_export(self, request_proto):
        response = generate(request_proto)
        document = json.loads(response.file[0].content)

        assert document["_type"] == "export"
        assert document["resources"][-1]["_id"] == "request-Greeter-SayHello"

    def test_parameter_environments(self, request_proto):
        request_proto.parameter = '{"environments": {"Staging": "http://staging.example.com"}}'
        document = json.loads(generate(request_proto).file[0].content)

        names = [r["name"] for r in document["resources"] if r["_type"] == "environment"]
        assert names == ["Base", "Staging", "Localhost - Https", "Localhost - Http"]

    def test_malformed_parameter_aborts(self, request_proto):
        request_proto.parameter = "{not json"
        response = generate(request_proto)

        assert response.error.startswith("Invalid configuration parameter")
        assert len(response.file) == 0

    def test_environment_clashing_with_request_group_aborts(self, request_proto):
        request_proto.parameter = '{"environments": {"request_group-Greeter": "http://x"}}'
        response = generate(request_proto)

        assert "request_group-Greeter" in response.error
        assert len(response.file) == 0

    def test_proto3_optional_supported(self, request_proto):
        response = generate(request_proto)
        assert response.supported_features & plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL

    def test_unknown_file(self, request_proto):
        request_proto.file_to_generate.append("missing.proto")
        response = generate(request_proto)

        assert "missing.proto" in response.error
        assert len(response.file) == 0


class TestRun:
    """Test the stdin/stdout round trip."""

    def test_run(self, request_proto):
        stdin = io.BytesIO(request_proto.SerializeToString())
        stdout = io.BytesIO()

        run(stdin, stdout)

        response = plugin_pb2.CodeGeneratorResponse()
        response.ParseFromString(stdout.getvalue())
        assert [f.name for f in response.file] == ["helloworld-insomnia-env.json"]

    def test_garbage_input(self):
        with pytest.raises(PluginException):
            read_request(io.BytesIO(b"\xff\xff\xff"))


class TestCommandLine:
    """Test descriptor-set mode."""

    @pytest.fixture
    def descriptor_set_path(self, tmp_path, greeter_file, well_known_file, catalog_file):
        descriptor_set = descriptor_pb2.FileDescriptorSet(
            file=[well_known_file, greeter_file, catalog_file]
        )
        path = tmp_path / "schema.pb"
        path.write_bytes(descriptor_set.SerializeToString())
        return path

    def test_exports_every_file_with_services(self, tmp_path, descriptor_set_path):
        out = tmp_path / "out"
        code = main(["--descriptor-set", str(descriptor_set_path), "--output-dir", str(out)])

        assert code == 0
        assert (out / "helloworld-insomnia-env.json").exists()
        assert (out / "shop" / "catalog-insomnia-env.json").exists()
        assert not (out / "google").exists()

    def test_selected_file_with_config(self, tmp_path, descriptor_set_path):
        config = tmp_path / "envs.yaml"
        config.write_text("environments:\n  Staging: http://staging.example.com\n")
        out = tmp_path / "out"

        code = main(
            [
                "--descriptor-set", str(descriptor_set_path),
                "--output-dir", str(out),
                "--config", str(config),
                "--file", "helloworld.proto",
            ]
        )

        assert code == 0
        assert [p.name for p in out.iterdir()] == ["helloworld-insomnia-env.json"]
        document = json.loads((out / "helloworld-insomnia-env.json").read_text())
        assert document["resources"][2]["data"] == {"base_url": "http://staging.example.com"}

    def test_bad_parameter_exit_code(self, tmp_path, descriptor_set_path):
        code = main(
            [
                "--descriptor-set", str(descriptor_set_path),
                "--output-dir", str(tmp_path),
                "--parameter", "{broken",
            ]
        )
        assert code == 1
        assert not list(tmp_path.glob("*.json"))

    def test_unknown_selected_file(self, tmp_path, greeter_file):
        descriptor_set = descriptor_pb2.FileDescriptorSet(file=[greeter_file])
        with pytest.raises(SchemaException):
            export_descriptor_set(descriptor_set, tmp_path, GeneratorConfig(), ["x.proto"])

    def test_missing_descriptor_set(self, tmp_path):
        assert main(["--descriptor-set", str(tmp_path / "absent.pb")]) == 1
