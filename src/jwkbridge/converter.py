"""Convert between security keys and JSON Web Keys.

Projection (security key to JWK) is strict: unsupported input raises.
Reconstruction (JWK to security key) is best-effort: it never raises, and
failed candidates are logged and skipped so a caller can walk a
heterogeneous key set past entries it cannot use.
"""

import logging
from typing import NamedTuple

from jwkbridge._b64 import b64url_encode
from jwkbridge.errors import (
    InvalidArgumentError,
    InvalidKeyMaterialError,
    NotSupportedError,
)
from jwkbridge.jwk import JsonWebKey
from jwkbridge.keys import (
    CertificateKey,
    EllipticCurveKey,
    RsaKey,
    SecurityKey,
    SymmetricKey,
)
from jwkbridge.x509 import cert_to_x5c

logger = logging.getLogger(__name__)

KTY_RSA = "RSA"
KTY_EC = "EC"
KTY_OCT = "oct"


class Reconstruction(NamedTuple):
    """Outcome of a reconstruction attempt."""

    key: SecurityKey | None
    found: bool


_NOT_FOUND = Reconstruction(None, False)


# ---------------------------------------------------------------------------
# Security key -> JWK
# ---------------------------------------------------------------------------


def convert_from_security_key(key: SecurityKey) -> JsonWebKey:
    """Convert any supported security key into a JWK.

    Raises:
        InvalidArgumentError: If ``key`` is None.
        NotSupportedError: If ``key`` is not an RSA, symmetric, certificate
            or elliptic-curve key.
    """
    if key is None:
        raise InvalidArgumentError("key must not be None")

    if isinstance(key, RsaKey):
        return convert_from_rsa_security_key(key)
    if isinstance(key, SymmetricKey):
        return convert_from_symmetric_security_key(key)
    if isinstance(key, CertificateKey):
        return convert_from_x509_security_key(key)
    if isinstance(key, EllipticCurveKey):
        return convert_from_ec_security_key(key)

    key_type = type(key)
    raise NotSupportedError(
        f"Unable to convert {key_type.__module__}.{key_type.__qualname__} "
        "to a JsonWebKey"
    )


def convert_from_rsa_security_key(key: RsaKey) -> JsonWebKey:
    """Convert an RSA key. Absent components stay absent on the JWK."""
    if key is None:
        raise InvalidArgumentError("key must not be None")

    params = key.export_parameters()
    return JsonWebKey(
        kty=KTY_RSA,
        kid=key.key_id,
        n=_encode_optional(params.modulus),
        e=_encode_optional(params.exponent),
        d=_encode_optional(params.d),
        p=_encode_optional(params.p),
        q=_encode_optional(params.q),
        dp=_encode_optional(params.dp),
        dq=_encode_optional(params.dq),
        qi=_encode_optional(params.qi),
        converted_key=key,
    )


def convert_from_x509_security_key(key: CertificateKey) -> JsonWebKey:
    """Convert a certificate key into an RSA JWK with a one-entry ``x5c``."""
    if key is None:
        raise InvalidArgumentError("key must not be None")

    jwk = JsonWebKey(
        kty=KTY_RSA,
        kid=key.key_id,
        x5t=key.x5t,
        converted_key=key,
    )
    if key.raw_data:
        jwk.x5c.extend(cert_to_x5c([key.certificate]))
    return jwk


def convert_from_symmetric_security_key(key: SymmetricKey) -> JsonWebKey:
    if key is None:
        raise InvalidArgumentError("key must not be None")

    return JsonWebKey(
        kty=KTY_OCT,
        kid=key.key_id,
        k=b64url_encode(key.key),
        converted_key=key,
    )


def convert_from_ec_security_key(key: EllipticCurveKey) -> JsonWebKey:
    if key is None:
        raise InvalidArgumentError("key must not be None")

    return JsonWebKey(
        kty=KTY_EC,
        kid=key.key_id,
        crv=key.curve_name,
        x=b64url_encode(key.x),
        y=b64url_encode(key.y),
        d=_encode_optional(key.d),
        converted_key=key,
    )


def _encode_optional(value: bytes | None) -> str | None:
    return b64url_encode(value) if value is not None else None


# ---------------------------------------------------------------------------
# JWK -> security key
# ---------------------------------------------------------------------------


def try_convert_to_security_key(jwk: JsonWebKey | None) -> Reconstruction:
    """Reconstruct the security key a JWK describes.

    For ``kty`` "RSA" the ``x5c`` certificate is tried before the raw
    ``n``/``e`` parameters; "EC" and "oct" have a single candidate. Any
    other ``kty`` yields ``found=False`` without logging.

    On success the key is cached in ``jwk.converted_key``. Never raises.

    Candidates run in order and each one only recognises its own cached
    variant, so a JWK whose ``x5c`` failed and fell back to ``n``/``e``
    re-parses (and re-logs) the certificate on every call before the RSA
    candidate returns the cached key.
    """
    if jwk is None:
        return _NOT_FOUND

    if jwk.kty == KTY_RSA:
        result = try_convert_to_x509_security_key(jwk)
        if not result.found:
            result = try_create_to_rsa_security_key(jwk)
    elif jwk.kty == KTY_EC:
        result = try_convert_to_ec_security_key(jwk)
    elif jwk.kty == KTY_OCT:
        result = try_convert_to_symmetric_security_key(jwk)
    else:
        return _NOT_FOUND

    if result.found:
        jwk.converted_key = result.key
    return result


def try_convert_to_x509_security_key(jwk: JsonWebKey) -> Reconstruction:
    if isinstance(jwk.converted_key, CertificateKey):
        return Reconstruction(jwk.converted_key, True)

    if not jwk.x5c:
        return _NOT_FOUND

    try:
        return Reconstruction(CertificateKey.from_jwk(jwk), True)
    except InvalidKeyMaterialError as exc:
        leaf = jwk.x5c[0]
        logger.warning(
            "Unable to create a certificate key from JWK (kid=%r, x5t=%r, "
            "x5c[0] length=%s): %s",
            jwk.kid,
            jwk.x5t,
            len(leaf) if isinstance(leaf, str) else type(leaf).__name__,
            exc,
        )
    return _NOT_FOUND


def try_create_to_rsa_security_key(jwk: JsonWebKey) -> Reconstruction:
    if isinstance(jwk.converted_key, RsaKey):
        return Reconstruction(jwk.converted_key, True)

    if _is_blank(jwk.e) and _is_blank(jwk.n):
        return _NOT_FOUND

    try:
        return Reconstruction(RsaKey.from_jwk(jwk), True)
    except InvalidKeyMaterialError as exc:
        logger.warning(
            "Unable to create an RSA key from JWK (kid=%r, e=%r, n=%r): %s",
            jwk.kid,
            jwk.e,
            _abbreviate(jwk.n),
            exc,
        )
    return _NOT_FOUND


def try_convert_to_ec_security_key(jwk: JsonWebKey) -> Reconstruction:
    if isinstance(jwk.converted_key, EllipticCurveKey):
        return Reconstruction(jwk.converted_key, True)

    if not jwk.crv or not jwk.x or not jwk.y:
        return _NOT_FOUND

    try:
        return Reconstruction(EllipticCurveKey.from_jwk(jwk), True)
    except InvalidKeyMaterialError as exc:
        logger.warning(
            "Unable to create an EC key from JWK (kid=%r, crv=%r): %s",
            jwk.kid,
            jwk.crv,
            exc,
        )
    return _NOT_FOUND


def try_convert_to_symmetric_security_key(jwk: JsonWebKey) -> Reconstruction:
    if isinstance(jwk.converted_key, SymmetricKey):
        return Reconstruction(jwk.converted_key, True)

    if not jwk.k:
        return _NOT_FOUND

    try:
        return Reconstruction(SymmetricKey.from_jwk(jwk), True)
    except InvalidKeyMaterialError as exc:
        logger.warning(
            "Unable to create a symmetric key from JWK (kid=%r, k length=%s): %s",
            jwk.kid,
            len(jwk.k) if isinstance(jwk.k, str) else type(jwk.k).__name__,
            exc,
        )
    return _NOT_FOUND


def _is_blank(value: str | None) -> bool:
    return not isinstance(value, str) or not value.strip()


def _abbreviate(value: str | None, limit: int = 16) -> str | None:
    if not isinstance(value, str) or len(value) <= limit:
        return value
    return f"{value[:limit]}...({len(value)} chars)"
