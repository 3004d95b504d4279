"""Security-key variants: RSA, symmetric, X.509 certificate, and elliptic curve.

Each variant knows how to build itself from the members of a JSON Web Key
(``from_jwk``). Construction failures surface as ``InvalidKeyMaterialError``.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from jwkbridge._b64 import b64url_decode, bytes_to_int, int_to_bytes
from jwkbridge.errors import InvalidArgumentError, InvalidKeyMaterialError
from jwkbridge.x509 import certificate_thumbprint, certificate_x5t, load_x5c_entry

if TYPE_CHECKING:
    from jwkbridge.jwk import JsonWebKey

# JWK "crv" names and their cryptography curve classes
CURVES: dict[str, type[ec.EllipticCurve]] = {
    "P-256": ec.SECP256R1,
    "P-384": ec.SECP384R1,
    "P-521": ec.SECP521R1,
    "secp256k1": ec.SECP256K1,
}


class SecurityKey:
    """Base class for key material that can be represented as a JWK."""

    def __init__(self, key_id: str | None = None) -> None:
        self.key_id = key_id


# ---------------------------------------------------------------------------
# RSA
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RsaParameters:
    """Big-endian RSA components. Private components may be absent."""

    modulus: bytes | None = None
    exponent: bytes | None = None
    d: bytes | None = None
    p: bytes | None = None
    q: bytes | None = None
    dp: bytes | None = None
    dq: bytes | None = None
    qi: bytes | None = None

    def __repr__(self) -> str:
        size = len(self.modulus) * 8 if self.modulus else 0
        return f"RsaParameters(modulus_bits={size}, private={self.d is not None})"


class RsaKey(SecurityKey):
    """An RSA key held either as a live key object or as raw parameters."""

    def __init__(
        self,
        rsa_key: rsa.RSAPrivateKey | rsa.RSAPublicKey | None = None,
        *,
        parameters: RsaParameters | None = None,
        key_id: str | None = None,
    ) -> None:
        if (rsa_key is None) == (parameters is None):
            raise InvalidArgumentError("Provide exactly one of rsa_key or parameters")
        super().__init__(key_id)
        self.rsa = rsa_key
        self.parameters = parameters

    @property
    def has_private_key(self) -> bool:
        return self.export_parameters().d is not None

    def export_parameters(self) -> RsaParameters:
        """Return the key's components, including private ones when held."""
        if self.rsa is None:
            return self.parameters
        if isinstance(self.rsa, rsa.RSAPrivateKey):
            numbers = self.rsa.private_numbers()
            pub = numbers.public_numbers
            return RsaParameters(
                modulus=int_to_bytes(pub.n),
                exponent=int_to_bytes(pub.e),
                d=int_to_bytes(numbers.d),
                p=int_to_bytes(numbers.p),
                q=int_to_bytes(numbers.q),
                dp=int_to_bytes(numbers.dmp1),
                dq=int_to_bytes(numbers.dmq1),
                qi=int_to_bytes(numbers.iqmp),
            )
        pub = self.rsa.public_numbers()
        return RsaParameters(modulus=int_to_bytes(pub.n), exponent=int_to_bytes(pub.e))

    @classmethod
    def from_jwk(cls, jwk: "JsonWebKey") -> "RsaKey":
        """Build a key from the ``n``/``e`` members and any private members.

        Missing primes are recovered from ``d`` and missing CRT values are
        derived from the primes.

        Raises:
            InvalidKeyMaterialError: On missing ``n``/``e``, malformed
                base64url, or numbers that do not form an RSA key.
        """
        if not jwk.n or not jwk.e:
            raise InvalidKeyMaterialError("RSA JWK requires both 'n' and 'e'")
        try:
            n = bytes_to_int(b64url_decode(jwk.n))
            e = bytes_to_int(b64url_decode(jwk.e))
            public_numbers = rsa.RSAPublicNumbers(e, n)
            if not jwk.d:
                return cls(public_numbers.public_key(), key_id=jwk.kid)

            d = bytes_to_int(b64url_decode(jwk.d))
            if jwk.p and jwk.q:
                p = bytes_to_int(b64url_decode(jwk.p))
                q = bytes_to_int(b64url_decode(jwk.q))
            else:
                p, q = rsa.rsa_recover_prime_factors(n, e, d)
            dp = _decode_or(jwk.dp, lambda: rsa.rsa_crt_dmp1(d, p))
            dq = _decode_or(jwk.dq, lambda: rsa.rsa_crt_dmq1(d, q))
            qi = _decode_or(jwk.qi, lambda: rsa.rsa_crt_iqmp(p, q))
            private_numbers = rsa.RSAPrivateNumbers(p, q, d, dp, dq, qi, public_numbers)
            return cls(private_numbers.private_key(), key_id=jwk.kid)
        except (ValueError, TypeError) as exc:
            raise InvalidKeyMaterialError(f"Invalid RSA key material: {exc}") from exc

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RsaKey):
            return NotImplemented
        return (
            self.key_id == other.key_id
            and self.export_parameters() == other.export_parameters()
        )

    __hash__ = None

    def __repr__(self) -> str:
        return f"RsaKey(key_id={self.key_id!r}, {self.export_parameters()!r})"


def _decode_or(member: str | None, derive) -> int:
    if member:
        return bytes_to_int(b64url_decode(member))
    return derive()


# ---------------------------------------------------------------------------
# Symmetric
# ---------------------------------------------------------------------------


class SymmetricKey(SecurityKey):
    """Raw secret key bytes (JWK ``kty`` "oct")."""

    def __init__(self, key: bytes, key_id: str | None = None) -> None:
        if not key:
            raise InvalidKeyMaterialError("Symmetric key material must not be empty")
        super().__init__(key_id)
        self.key = bytes(key)

    @property
    def key_size(self) -> int:
        """Key size in bits."""
        return len(self.key) * 8

    @classmethod
    def from_jwk(cls, jwk: "JsonWebKey") -> "SymmetricKey":
        try:
            raw = b64url_decode(jwk.k or "")
        except (ValueError, TypeError) as e:
            raise InvalidKeyMaterialError(f"Invalid symmetric key material: {e}") from e
        return cls(raw, key_id=jwk.kid)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SymmetricKey):
            return NotImplemented
        return self.key_id == other.key_id and self.key == other.key

    __hash__ = None

    def __repr__(self) -> str:
        return f"SymmetricKey(key_id={self.key_id!r}, key_size={self.key_size})"


# ---------------------------------------------------------------------------
# X.509 certificate
# ---------------------------------------------------------------------------


class CertificateKey(SecurityKey):
    """A key carried by an X.509 certificate.

    ``key_id`` defaults to the upper-case hex SHA-1 thumbprint and ``x5t``
    to its base64url form.
    """

    def __init__(
        self,
        certificate: x509.Certificate,
        key_id: str | None = None,
        x5t: str | None = None,
    ) -> None:
        super().__init__(key_id or certificate_thumbprint(certificate))
        self.certificate = certificate
        self.x5t = x5t or certificate_x5t(certificate)

    @property
    def raw_data(self) -> bytes:
        """DER encoding of the certificate."""
        return self.certificate.public_bytes(serialization.Encoding.DER)

    @property
    def public_key(self):
        return self.certificate.public_key()

    @classmethod
    def from_jwk(cls, jwk: "JsonWebKey") -> "CertificateKey":
        """Build a key from the leaf (first) ``x5c`` entry.

        Only the first certificate carries the key (RFC 7517 section 4.7);
        the rest of the chain is not interpreted here.
        """
        if not jwk.x5c:
            raise InvalidKeyMaterialError("JWK has no 'x5c' certificate")
        try:
            certificate = load_x5c_entry(jwk.x5c[0])
        except (ValueError, TypeError) as e:
            raise InvalidKeyMaterialError(f"Invalid x5c certificate: {e}") from e
        return cls(certificate, key_id=jwk.kid, x5t=jwk.x5t)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CertificateKey):
            return NotImplemented
        return self.key_id == other.key_id and self.raw_data == other.raw_data

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"CertificateKey(key_id={self.key_id!r}, "
            f"subject={self.certificate.subject.rfc4514_string()!r})"
        )


# ---------------------------------------------------------------------------
# Elliptic curve
# ---------------------------------------------------------------------------


class EllipticCurveKey(SecurityKey):
    """An EC public or private key on one of the JWK-named curves."""

    def __init__(
        self,
        ec_key: ec.EllipticCurvePrivateKey | ec.EllipticCurvePublicKey,
        key_id: str | None = None,
    ) -> None:
        super().__init__(key_id)
        self.ec_key = ec_key
        self.curve_name = curve_name_for(ec_key.curve)

    @property
    def has_private_key(self) -> bool:
        return isinstance(self.ec_key, ec.EllipticCurvePrivateKey)

    @property
    def coordinate_size(self) -> int:
        """Octet length of a coordinate (and of ``d``) on this curve."""
        return (self.ec_key.curve.key_size + 7) // 8

    def _public_numbers(self) -> ec.EllipticCurvePublicNumbers:
        if self.has_private_key:
            return self.ec_key.private_numbers().public_numbers
        return self.ec_key.public_numbers()

    @property
    def x(self) -> bytes:
        return int_to_bytes(self._public_numbers().x, self.coordinate_size)

    @property
    def y(self) -> bytes:
        return int_to_bytes(self._public_numbers().y, self.coordinate_size)

    @property
    def d(self) -> bytes | None:
        if not self.has_private_key:
            return None
        value = self.ec_key.private_numbers().private_value
        return int_to_bytes(value, self.coordinate_size)

    @classmethod
    def from_jwk(cls, jwk: "JsonWebKey") -> "EllipticCurveKey":
        """Build a key from ``crv``, ``x``, ``y`` and the optional ``d``.

        Raises:
            InvalidKeyMaterialError: On an unknown curve, malformed base64url,
                or a point that is not on the curve.
        """
        curve_cls = CURVES.get(jwk.crv) if isinstance(jwk.crv, str) else None
        if curve_cls is None:
            raise InvalidKeyMaterialError(f"Unsupported curve: {jwk.crv!r}")
        try:
            x = bytes_to_int(b64url_decode(jwk.x))
            y = bytes_to_int(b64url_decode(jwk.y))
            public_numbers = ec.EllipticCurvePublicNumbers(x, y, curve_cls())
            if jwk.d:
                d = bytes_to_int(b64url_decode(jwk.d))
                ec_key = ec.EllipticCurvePrivateNumbers(d, public_numbers).private_key()
            else:
                ec_key = public_numbers.public_key()
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise InvalidKeyMaterialError(f"Invalid EC key material: {e}") from e
        return cls(ec_key, key_id=jwk.kid)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EllipticCurveKey):
            return NotImplemented
        return (
            self.key_id == other.key_id
            and self.curve_name == other.curve_name
            and self.x == other.x
            and self.y == other.y
            and self.d == other.d
        )

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"EllipticCurveKey(key_id={self.key_id!r}, crv={self.curve_name!r}, "
            f"private={self.has_private_key})"
        )


def curve_name_for(curve: ec.EllipticCurve) -> str:
    """Map a cryptography curve to its JWK ``crv`` name."""
    for name, curve_cls in CURVES.items():
        if isinstance(curve, curve_cls):
            return name
    raise InvalidKeyMaterialError(f"Curve {curve.name} has no JWK name")
