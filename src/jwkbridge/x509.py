"""X.509 certificate helpers for the JWK ``x5c`` and ``x5t`` members."""

import hashlib

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization

from jwkbridge._b64 import b64_decode, b64_encode, b64url_encode


def cert_to_x5c(cert_chain: list[x509.Certificate]) -> list[str]:
    """Convert a certificate chain to x5c format (base64 DER strings).

    Args:
        cert_chain: List of certificates, leaf first.

    Returns:
        List of base64-encoded DER certificates.
    """
    return [
        b64_encode(cert.public_bytes(serialization.Encoding.DER))
        for cert in cert_chain
    ]


def load_x5c_entry(entry: str) -> x509.Certificate:
    """Parse a single base64 DER x5c entry."""
    return x509.load_der_x509_certificate(b64_decode(entry))


def load_certificate(data: bytes) -> x509.Certificate:
    """Load a certificate from PEM or DER bytes."""
    if b"-----BEGIN CERTIFICATE-----" in data:
        return x509.load_pem_x509_certificate(data)
    return x509.load_der_x509_certificate(data)


def certificate_thumbprint(cert: x509.Certificate) -> str:
    """Upper-case hex SHA-1 thumbprint of the DER encoding."""
    der = cert.public_bytes(serialization.Encoding.DER)
    return hashlib.sha1(der).hexdigest().upper()


def certificate_x5t(cert: x509.Certificate) -> str:
    """The ``x5t`` value: base64url SHA-1 digest of the DER encoding."""
    return b64url_encode(cert.fingerprint(hashes.SHA1()))
