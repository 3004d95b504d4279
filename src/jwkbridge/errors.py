"""Exceptions raised by JWK conversion."""


class JwkConversionError(Exception):
    """Base class for all jwkbridge errors."""


class InvalidArgumentError(JwkConversionError, ValueError):
    """Raised when a required input is ``None`` or structurally unusable."""


class NotSupportedError(JwkConversionError, TypeError):
    """Raised when a key variant or key type has no JWK mapping."""


class InvalidKeyMaterialError(JwkConversionError, ValueError):
    """Raised when key material cannot be turned into a usable key.

    Covers malformed base64, missing numeric components, invalid certificate
    DER, and curves the cryptographic backend does not know.
    """
