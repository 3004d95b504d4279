"""jwkbridge - convert between security keys and JSON Web Keys.

Usage:
    from jwkbridge import convert_from_security_key, try_convert_to_security_key

    jwk = convert_from_security_key(RsaKey(private_key, key_id="k1"))
    key, found = try_convert_to_security_key(JsonWebKey.from_json(text))
"""

from jwkbridge.converter import (
    Reconstruction,
    convert_from_ec_security_key,
    convert_from_rsa_security_key,
    convert_from_security_key,
    convert_from_symmetric_security_key,
    convert_from_x509_security_key,
    try_convert_to_security_key,
)
from jwkbridge.errors import (
    InvalidArgumentError,
    InvalidKeyMaterialError,
    JwkConversionError,
    NotSupportedError,
)
from jwkbridge.jwk import JsonWebKey, JsonWebKeySet
from jwkbridge.keys import (
    CertificateKey,
    EllipticCurveKey,
    RsaKey,
    RsaParameters,
    SecurityKey,
    SymmetricKey,
)

__all__ = [
    # Security keys
    "SecurityKey",
    "RsaKey",
    "RsaParameters",
    "SymmetricKey",
    "CertificateKey",
    "EllipticCurveKey",
    # JWK
    "JsonWebKey",
    "JsonWebKeySet",
    # Conversion
    "convert_from_security_key",
    "convert_from_rsa_security_key",
    "convert_from_x509_security_key",
    "convert_from_symmetric_security_key",
    "convert_from_ec_security_key",
    "try_convert_to_security_key",
    "Reconstruction",
    # Errors
    "JwkConversionError",
    "InvalidArgumentError",
    "NotSupportedError",
    "InvalidKeyMaterialError",
]
