"""
Naming Helpers

Name conversions shared by the registry, the synthesizer and the builder.
"""

import re
from pathlib import PurePosixPath

PROTO_FILE_EXTENSION = ".proto"
OUTPUT_FILE_SUFFIX = "-insomnia-env.json"

_WORD_START = re.compile(r"(^|[^0-9A-Za-z_])([a-z])")


def camel_case(name: str) -> str:
    """
    Convert a protobuf identifier to CamelCase the way protoc-gen-go does.

    A leading underscore becomes ``X``, an underscore followed by a lower-case
    letter is dropped and the letter capitalized, digits are kept as-is.
    """
    if not name:
        return ""

    out = []
    i = 0
    if name[0] == "_":
        out.append("X")
        i = 1

    while i < len(name):
        c = name[i]
        if c == "_" and i + 1 < len(name) and name[i + 1].islower():
            i += 1
            continue
        if c.isdigit():
            out.append(c)
            i += 1
            continue
        out.append(c.upper() if c.islower() else c)
        # Accept the lower-case run that follows
        while i + 1 < len(name) and name[i + 1].islower():
            i += 1
            out.append(name[i])
        i += 1

    return "".join(out)


def json_name(field_name: str) -> str:
    """lowerCamelCase JSON name, as protoc computes ``json_name``."""
    out = []
    capitalize_next = False
    for c in field_name:
        if c == "_":
            capitalize_next = True
        elif capitalize_next:
            out.append(c.upper())
            capitalize_next = False
        else:
            out.append(c)
    return "".join(out)


def title_case(text: str) -> str:
    """Upper-case the first letter of every word."""
    return _WORD_START.sub(lambda m: m.group(1) + m.group(2).upper(), text)


def trim_suffix(text: str, suffix: str) -> str:
    if suffix and text.endswith(suffix):
        return text[: -len(suffix)]
    return text


def trim_extension(file_name: str) -> str:
    """Drop the final extension of a slash-separated file name."""
    path = PurePosixPath(file_name)
    if not path.suffix:
        return file_name
    return file_name[: -len(path.suffix)]


def workspace_name(file_name: str) -> str:
    return title_case(trim_suffix(file_name, PROTO_FILE_EXTENSION))


def output_file_name(file_name: str) -> str:
    """e.g. ``rpc/haberdasher.proto`` -> ``rpc/haberdasher-insomnia-env.json``"""
    return f"{trim_extension(file_name)}{OUTPUT_FILE_SUFFIX}"


def full_service_name(package: str, service_name: str) -> str:
    name = camel_case(service_name)
    if package:
        name = f"{package}.{name}"
    return name


def path_prefix(package: str, service_name: str) -> str:
    """
    Base path for all methods of a service, with a trailing slash
    (for example ``/twirp/twitch.example.Haberdasher/``).
    """
    return f"/twirp/{full_service_name(package, service_name)}/"


def qualify(*parts: str) -> str:
    """Join non-empty name segments into a leading-dot fully-qualified name."""
    return "." + ".".join(part for part in parts if part)
