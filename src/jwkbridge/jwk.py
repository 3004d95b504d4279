"""JSON Web Key (RFC 7517) record and key set."""

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from joserfc.errors import JoseError
from joserfc.jwk import ECKey, OctKey, RSAKey

from jwkbridge.errors import (
    InvalidArgumentError,
    InvalidKeyMaterialError,
    NotSupportedError,
)

if TYPE_CHECKING:
    from jwkbridge.keys import SecurityKey

# (attribute, wire member) for every registered member this record models
_MEMBERS = (
    ("kty", "kty"),
    ("kid", "kid"),
    ("use", "use"),
    ("alg", "alg"),
    ("key_ops", "key_ops"),
    ("n", "n"),
    ("e", "e"),
    ("d", "d"),
    ("p", "p"),
    ("q", "q"),
    ("dp", "dp"),
    ("dq", "dq"),
    ("qi", "qi"),
    ("k", "k"),
    ("crv", "crv"),
    ("x", "x"),
    ("y", "y"),
    ("x5c", "x5c"),
    ("x5t", "x5t"),
    ("x5t_s256", "x5t#S256"),
    ("x5u", "x5u"),
)
_WIRE_NAMES = {wire for _, wire in _MEMBERS}
_PRIVATE_MEMBERS = ("d", "p", "q", "dp", "dq", "qi", "k")

# RFC 7638 section 3.2 required members, and the joserfc key class to use
_THUMBPRINT_KEYS = {
    "RSA": (RSAKey, ("e", "kty", "n")),
    "EC": (ECKey, ("crv", "kty", "x", "y")),
    "oct": (OctKey, ("k", "kty")),
}


@dataclass
class JsonWebKey:
    """A JWK as a mutable field record.

    ``converted_key`` caches the security key this JWK was last built from
    or reconstructed into. It is not invalidated when fields change, so a
    JWK mutated after caching keeps returning the old key.
    """

    kty: str | None = None
    kid: str | None = None
    use: str | None = None
    alg: str | None = None
    key_ops: list[str] | None = None
    n: str | None = None
    e: str | None = None
    d: str | None = None
    p: str | None = None
    q: str | None = None
    dp: str | None = None
    dq: str | None = None
    qi: str | None = None
    k: str | None = None
    crv: str | None = None
    x: str | None = None
    y: str | None = None
    x5c: list[str] = field(default_factory=list)
    x5t: str | None = None
    x5t_s256: str | None = None
    x5u: str | None = None
    additional_data: dict[str, Any] = field(default_factory=dict)
    converted_key: "SecurityKey | None" = field(default=None, compare=False)

    def __repr__(self) -> str:
        # Never render private members
        return (
            f"JsonWebKey(kty={self.kty!r}, kid={self.kid!r}, "
            f"x5t={self.x5t!r}, private={self.has_private_key})"
        )

    @property
    def has_private_key(self) -> bool:
        return any(getattr(self, name) for name in _PRIVATE_MEMBERS)

    # -----------------------------------------------------------------------
    # Wire mapping
    # -----------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict) -> "JsonWebKey":
        """Create a JWK from a decoded JSON object.

        Unregistered members are kept in ``additional_data``.

        Raises:
            InvalidArgumentError: If ``data`` is not an object or ``x5c``
                is not an array.
        """
        if not isinstance(data, dict):
            raise InvalidArgumentError(
                f"JWK must be a JSON object, got {type(data).__name__}"
            )
        kwargs = {attr: data[wire] for attr, wire in _MEMBERS if wire in data}
        x5c = kwargs.get("x5c")
        if x5c is None:
            kwargs.pop("x5c", None)
        elif not isinstance(x5c, list):
            raise InvalidArgumentError("JWK 'x5c' must be an array")
        else:
            kwargs["x5c"] = list(x5c)
        extra = {name: value for name, value in data.items() if name not in _WIRE_NAMES}
        return cls(**kwargs, additional_data=extra)

    @classmethod
    def from_json(cls, text: str | bytes) -> "JsonWebKey":
        if text is None:
            raise InvalidArgumentError("JWK JSON must not be None")
        return cls.from_dict(json.loads(text))

    def to_dict(self) -> dict:
        """Return the wire form, omitting absent members."""
        data = dict(self.additional_data)
        for attr, wire in _MEMBERS:
            value = getattr(self, attr)
            if value is None or (attr == "x5c" and not value):
                continue
            data[wire] = list(value) if isinstance(value, list) else value
        return data

    def to_json(self, **kwargs) -> str:
        return json.dumps(self.to_dict(), **kwargs)

    # -----------------------------------------------------------------------
    # RFC 7638 thumbprint
    # -----------------------------------------------------------------------

    def compute_thumbprint(self) -> str:
        """Compute the RFC 7638 SHA-256 thumbprint (base64url).

        Raises:
            NotSupportedError: If ``kty`` has no thumbprint mapping.
            InvalidArgumentError: If a required member is missing.
            InvalidKeyMaterialError: If the members do not form a key.
        """
        entry = _THUMBPRINT_KEYS.get(self.kty) if isinstance(self.kty, str) else None
        if entry is None:
            raise NotSupportedError(f"Cannot compute a thumbprint for kty {self.kty!r}")
        key_cls, required = entry
        members = {name: getattr(self, name) for name in required}
        missing = [name for name, value in members.items() if not value]
        if missing:
            raise InvalidArgumentError(
                f"JWK is missing thumbprint members: {', '.join(missing)}"
            )
        try:
            key = key_cls.import_key(members)
        except (JoseError, KeyError, TypeError, ValueError) as exc:
            raise InvalidKeyMaterialError(f"Cannot import JWK: {exc}") from exc
        return key.thumbprint()


@dataclass
class JsonWebKeySet:
    """A JWK Set (RFC 7517 section 5)."""

    keys: list[JsonWebKey] = field(default_factory=list)
    additional_data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "JsonWebKeySet":
        if not isinstance(data, dict) or "keys" not in data:
            raise InvalidArgumentError("JWK set must be an object with a 'keys' member")
        if not isinstance(data["keys"], list):
            raise InvalidArgumentError("JWK set 'keys' must be an array")
        keys = [JsonWebKey.from_dict(entry) for entry in data["keys"]]
        extra = {name: value for name, value in data.items() if name != "keys"}
        return cls(keys=keys, additional_data=extra)

    @classmethod
    def from_json(cls, text: str | bytes) -> "JsonWebKeySet":
        if text is None:
            raise InvalidArgumentError("JWK set JSON must not be None")
        return cls.from_dict(json.loads(text))

    def to_dict(self) -> dict:
        return {**self.additional_data, "keys": [key.to_dict() for key in self.keys]}

    def to_json(self, **kwargs) -> str:
        return json.dumps(self.to_dict(), **kwargs)

    def get_signing_keys(self) -> list["SecurityKey"]:
        """Reconstruct every key usable for signatures.

        Keys whose ``use`` is set to something other than "sig" are ignored.
        Keys that cannot be reconstructed are skipped.
        """
        from jwkbridge.converter import try_convert_to_security_key

        signing_keys = []
        for jwk in self.keys:
            if jwk.use not in (None, "sig"):
                continue
            key, found = try_convert_to_security_key(jwk)
            if found:
                signing_keys.append(key)
        return signing_keys
