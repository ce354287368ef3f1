"""
Parsing of service descriptor files.

A descriptor is a small TOML document describing one linked service:

    name = "Jellyfin"
    url = "http://media.lan:8096"
    description = "Films and TV"

Bad descriptors are expected (they are hand-edited while the dashboard is
open), so a failure is returned as a value rather than raised.
"""

import tomllib

from pydantic import ValidationError

from home_services.models import ParseFailure, ServiceRecord


def _describe_validation_error(error: ValidationError) -> str:
    problems = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "<document>"
        problems.append(f"{location}: {detail['msg']}")
    return "; ".join(problems)


def parse_descriptor(text: str, source: str) -> ServiceRecord | ParseFailure:
    """
    Parse the text of one descriptor file.

    :param str text: The full contents of the descriptor file.
    :param str source: Identifies the descriptor in failure messages,
        usually its path.
    :return ServiceRecord | ParseFailure: The parsed record, or a failure
        carrying the source and the underlying cause.
    """
    try:
        document = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        return ParseFailure(source=source, cause=f"invalid TOML: {e}")

    try:
        return ServiceRecord.model_validate(document)
    except ValidationError as e:
        return ParseFailure(source=source, cause=_describe_validation_error(e))
