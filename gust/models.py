from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .time_utils import parse_rfc3339, format_timestamp


@dataclass(frozen=True)
class Credential:
    """API credential issued by a successful login.

    Immutable: a new login produces a new Credential. The calling layer
    decides whether and where to persist it, using to_dict() / from_dict().
    """

    api_key: str
    server_url: str
    issued_at: datetime
    principal: str

    def __repr__(self) -> str:
        return "Credential(principal=%r, server_url=%r, issued_at=%s, api_key=%r)" % (
            self.principal,
            self.server_url,
            format_timestamp(self.issued_at),
            self.masked_key(),
        )

    def masked_key(self) -> str:
        """Return the API key with all but its last 4 characters hidden."""
        if len(self.api_key) <= 4:
            return '*' * len(self.api_key)
        return '*' * (len(self.api_key) - 4) + self.api_key[-4:]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted auth JSON layout."""
        return {
            'api_key': self.api_key,
            'server_url': self.server_url,
            'last_auth': format_timestamp(self.issued_at),
            'github_user': self.principal,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Credential":
        """Deserialize from the persisted auth JSON layout.

        Raises:
            ValueError: if a field is missing or malformed.
        """
        try:
            return cls(
                api_key=data['api_key'],
                server_url=data['server_url'],
                issued_at=parse_rfc3339(data['last_auth']),
                principal=data['github_user'],
            )
        except KeyError as e:
            raise ValueError("credential is missing field %s" % (e,))


@dataclass(frozen=True)
class City:
    name: str
    lat: float
    lon: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "City":
        """
        Build a City from an API object.

        Missing or null fields take their zero value, extra fields are ignored.

        Raises:
            ValueError: if the object or one of its fields has the wrong type.
        """
        if not isinstance(data, dict):
            raise ValueError("city should be an object, got %s" % (type(data).__name__,))
        name = data.get('name')
        if name is None:
            name = ''
        if not isinstance(name, str):
            raise ValueError("invalid city: name should be a string, got %s" % (type(name).__name__,))
        return cls(name=name, lat=_coordinate(data, 'lat'), lon=_coordinate(data, 'lon'))


def _coordinate(data: Dict[str, Any], key: str) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    # bool is an int subclass but never a coordinate.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("invalid city: %s should be a number, got %r" % (key, value))
    return float(value)


@dataclass
class WeatherResponse:
    """Weather for one city. The weather payload is passed through as-is."""

    city: City
    weather: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeatherResponse":
        if not isinstance(data, dict):
            raise ValueError("weather response should be an object")
        if 'city' not in data:
            raise ValueError("weather response is missing field 'city'")
        weather = data.get('weather')
        if weather is None:
            weather = {}
        if not isinstance(weather, dict):
            raise ValueError("weather payload should be an object")
        return cls(city=City.from_dict(data['city']), weather=weather)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)
