"""
Media type parsing and comparison for rest_core.

A MediaType describes the content of a body (``type/subtype`` plus
parameters such as ``charset``). Converters declare the media types
they support, and the registry compares them against the declared
request type or the observed response type to pick a codec.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .exceptions import MalformedMediaTypeError

WILDCARD = "*"


@dataclass(frozen=True, eq=False)
class MediaType:
    """
    Immutable media type value.

    Type, subtype and parameter names are stored lowercase, so
    comparisons are case-insensitive. Parameters keep insertion order
    for re-serialization.
    """

    type: str
    subtype: str
    parameters: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Normalize and validate after initialization."""
        object.__setattr__(self, "type", self.type.strip().lower())
        object.__setattr__(self, "subtype", self.subtype.strip().lower())
        object.__setattr__(
            self,
            "parameters",
            {name.strip().lower(): value for name, value in self.parameters.items()},
        )

        if not self.type:
            raise MalformedMediaTypeError(self._raw(), "type must not be empty")
        if not self.subtype:
            raise MalformedMediaTypeError(self._raw(), "subtype must not be empty")
        if self.type == WILDCARD and self.subtype != WILDCARD:
            raise MalformedMediaTypeError(
                self._raw(), "wildcard type is legal only in '*/*'"
            )

    def _raw(self) -> str:
        return f"{self.type}/{self.subtype}"

    @classmethod
    def parse(cls, value: Union[str, bytes]) -> "MediaType":
        """
        Parse a header value such as ``application/json; charset=UTF-8``.

        Args:
            value: The header value, as str or bytes

        Returns:
            New MediaType instance

        Raises:
            MalformedMediaTypeError: If the value cannot be parsed
        """
        if isinstance(value, bytes):
            value = value.decode("latin-1")

        if value is None or not value.strip():
            raise MalformedMediaTypeError(str(value), "must not be empty")

        parts = value.split(";")
        full_type = parts[0].strip()

        # some clients send a bare '*' in Accept
        if full_type == WILDCARD:
            full_type = "*/*"

        slash = full_type.find("/")
        if slash == -1:
            raise MalformedMediaTypeError(value, "does not contain '/'")
        if slash == len(full_type) - 1:
            raise MalformedMediaTypeError(value, "does not contain subtype after '/'")

        type_, subtype = full_type[:slash], full_type[slash + 1:]
        if "/" in subtype:
            raise MalformedMediaTypeError(value, "contains more than one '/'")
        if any(ch.isspace() for ch in full_type):
            raise MalformedMediaTypeError(value, "contains whitespace in type")

        parameters: Dict[str, str] = {}
        for parameter in parts[1:]:
            eq = parameter.find("=")
            if eq == -1:
                continue
            name = parameter[:eq].strip()
            param_value = parameter[eq + 1:].strip()
            if not name:
                raise MalformedMediaTypeError(value, "parameter name must not be empty")
            if len(param_value) >= 2 and param_value[0] == param_value[-1] == '"':
                param_value = param_value[1:-1]
            parameters[name] = param_value

        return cls(type=type_, subtype=subtype, parameters=parameters)

    @property
    def charset(self) -> Optional[str]:
        """Get the charset parameter, if any."""
        return self.parameters.get("charset")

    @property
    def quality_value(self) -> float:
        """Get the ``q`` parameter, defaulting to 1.0."""
        try:
            return float(self.parameters.get("q", "1"))
        except ValueError:
            return 0.0

    @property
    def is_wildcard_type(self) -> bool:
        return self.type == WILDCARD

    @property
    def is_wildcard_subtype(self) -> bool:
        """True for ``*`` and for suffix wildcards such as ``*+json``."""
        return self.subtype == WILDCARD or self.subtype.startswith("*+")

    @property
    def is_concrete(self) -> bool:
        return not self.is_wildcard_type and not self.is_wildcard_subtype

    @property
    def subtype_suffix(self) -> Optional[str]:
        """Get the structured syntax suffix (``json`` for ``hal+json``)."""
        plus = self.subtype.rfind("+")
        return self.subtype[plus + 1:] if plus != -1 else None

    def includes(self, other: Optional["MediaType"]) -> bool:
        """
        Check whether this media type is a wildcard superset of other.

        ``text/*`` includes ``text/plain``; ``*/*`` includes everything;
        ``application/*+json`` includes ``application/hal+json``. This is
        not symmetric: ``text/plain`` does not include ``text/*``.
        """
        if other is None:
            return False
        if self.is_wildcard_type:
            return True
        if self.type != other.type:
            return False
        if self.subtype == other.subtype or self.subtype == WILDCARD:
            return True
        if self.subtype.startswith("*+"):
            suffix = self.subtype_suffix
            if other.subtype == suffix:
                return True
            return other.subtype_suffix == suffix
        return False

    def is_compatible_with(self, other: Optional["MediaType"]) -> bool:
        """Check whether either media type includes the other."""
        if other is None:
            return False
        return self.includes(other) or other.includes(self)

    def with_charset(self, charset: str) -> "MediaType":
        """Create a new media type with a different charset parameter."""
        parameters = dict(self.parameters)
        parameters["charset"] = charset
        return MediaType(type=self.type, subtype=self.subtype, parameters=parameters)

    def specificity_key(self) -> Tuple[int, float, int]:
        """
        Sort key placing more specific media types first.

        Concrete types sort before wildcard subtypes, which sort before
        ``*/*``; then higher quality; then more parameters.
        """
        if self.is_wildcard_type:
            wildcards = 2
        elif self.is_wildcard_subtype:
            wildcards = 1
        else:
            wildcards = 0
        parameter_count = len([name for name in self.parameters if name != "q"])
        return (wildcards, -self.quality_value, -parameter_count)

    def to_header_value(self) -> str:
        """Serialize as ``type/subtype; name=value`` in parameter insertion order."""
        value = f"{self.type}/{self.subtype}"
        for name, param_value in self.parameters.items():
            value += f"; {name}={param_value}"
        return value

    def __str__(self) -> str:
        return self.to_header_value()

    def _comparable_parameters(self) -> Dict[str, str]:
        parameters = dict(self.parameters)
        if "charset" in parameters:
            parameters["charset"] = parameters["charset"].lower()
        return parameters

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MediaType):
            return NotImplemented
        return (
            self.type == other.type
            and self.subtype == other.subtype
            and self._comparable_parameters() == other._comparable_parameters()
        )

    def __hash__(self) -> int:
        return hash(
            (self.type, self.subtype, frozenset(self._comparable_parameters().items()))
        )


def sort_by_specificity(media_types: Iterable[MediaType]) -> List[MediaType]:
    """Return media types ordered most specific first (stable for ties)."""
    return sorted(media_types, key=lambda media_type: media_type.specificity_key())


def parse_media_types(value: Union[str, bytes, None]) -> List[MediaType]:
    """Parse a comma-separated list such as an ``Accept`` header value."""
    if isinstance(value, bytes):
        value = value.decode("latin-1")
    if not value or not value.strip():
        return []
    return [MediaType.parse(part) for part in value.split(",") if part.strip()]


def to_header_value(media_types: Iterable[MediaType]) -> str:
    """Serialize a list of media types as a comma-separated header value."""
    return ", ".join(media_type.to_header_value() for media_type in media_types)


ALL = MediaType("*", "*")
APPLICATION_JSON = MediaType("application", "json")
APPLICATION_JSON_SUFFIX = MediaType("application", "*+json")
APPLICATION_FORM_URLENCODED = MediaType("application", "x-www-form-urlencoded")
APPLICATION_OCTET_STREAM = MediaType("application", "octet-stream")
TEXT_PLAIN = MediaType("text", "plain")
