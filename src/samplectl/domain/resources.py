"""Resource path templates.

Cloud APIs address resources by slash-separated paths such as
``projects/my-proj/locations/us-central1/inputs/in-1``. A template names the
variable segments in braces; every variable matches exactly one segment.
"""

from __future__ import annotations

import re

from samplectl.domain.errors import InvalidArgument

_VARIABLE = re.compile(r"\{([a-z_][a-z0-9_]*)\}")


class ResourceTemplate:
    """A path pattern like ``projects/{project}/locations/{location}``."""

    def __init__(self, pattern: str) -> None:
        if not pattern or pattern.startswith("/") or pattern.endswith("/"):
            raise ValueError(f"Invalid resource template: {pattern!r}")
        self.pattern = pattern
        self.variables: tuple[str, ...] = tuple(_VARIABLE.findall(pattern))
        if len(set(self.variables)) != len(self.variables):
            raise ValueError(f"Duplicate variable in resource template: {pattern!r}")
        regex = ""
        pos = 0
        for match in _VARIABLE.finditer(pattern):
            regex += re.escape(pattern[pos : match.start()])
            regex += f"(?P<{match.group(1)}>[^/]+)"
            pos = match.end()
        regex += re.escape(pattern[pos:])
        self._regex = re.compile(f"^{regex}$")

    def __repr__(self) -> str:
        return f"ResourceTemplate({self.pattern!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ResourceTemplate) and other.pattern == self.pattern

    def __hash__(self) -> int:
        return hash(self.pattern)

    def render(self, **params: str | int) -> str:
        """Fill the template, e.g. ``render(project="p", location="l")``.

        Raises:
            InvalidArgument: A variable is missing, empty, contains ``/``,
                or an unknown variable is supplied.
        """
        unknown = sorted(set(params) - set(self.variables))
        if unknown:
            raise InvalidArgument(
                f"Unknown path variables for {self.pattern}: {', '.join(unknown)}",
                detail={"template": self.pattern, "unknown": unknown},
            )
        values: dict[str, str] = {}
        for name in self.variables:
            if name not in params:
                raise InvalidArgument(
                    f"Missing path variable '{name}' for {self.pattern}",
                    detail={"template": self.pattern, "variable": name},
                )
            value = str(params[name])
            if not value or "/" in value:
                raise InvalidArgument(
                    f"Path variable '{name}' must be a single non-empty segment, got {value!r}",
                    detail={"template": self.pattern, "variable": name, "value": value},
                )
            values[name] = value
        return _VARIABLE.sub(lambda m: values[m.group(1)], self.pattern)

    def matches(self, path: str) -> bool:
        """Whether *path* is an instance of this template."""
        return self._regex.match(path) is not None

    def parse(self, path: str) -> dict[str, str]:
        """Extract variable values from *path*.

        Raises:
            InvalidArgument: *path* does not match the template.
        """
        m = self._regex.match(path)
        if m is None:
            raise InvalidArgument(
                f"Resource path {path!r} does not match {self.pattern}",
                detail={"template": self.pattern, "resource": path},
            )
        return m.groupdict()


# --- Well-known templates used by the sample catalog ---

PROJECT = ResourceTemplate("projects/{project}")
LOCATION = ResourceTemplate("projects/{project}/locations/{location}")
ORGANIZATION = ResourceTemplate("organizations/{organization}")
PROPERTY = ResourceTemplate("properties/{property}")
INPUT = ResourceTemplate("projects/{project}/locations/{location}/inputs/{input}")
CHANNEL = ResourceTemplate("projects/{project}/locations/{location}/channels/{channel}")
JOB = ResourceTemplate("projects/{project}/locations/{location}/jobs/{job}")
INSTANCE = ResourceTemplate("projects/{project}/instances/{instance}")
DATABASE = ResourceTemplate("projects/{project}/instances/{instance}/databases/{database}")
TOPIC = ResourceTemplate("projects/{project}/topics/{topic}")

WELL_KNOWN_TEMPLATES: dict[str, ResourceTemplate] = {
    "project": PROJECT,
    "location": LOCATION,
    "organization": ORGANIZATION,
    "property": PROPERTY,
    "input": INPUT,
    "channel": CHANNEL,
    "job": JOB,
    "instance": INSTANCE,
    "database": DATABASE,
    "topic": TOPIC,
}
