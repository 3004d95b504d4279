"""Shared fixtures for jwkbridge tests."""

import datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID


def _self_signed_certificate(private_key, subject: str, days: int = 365) -> x509.Certificate:
    """Build a throwaway self-signed certificate for ``private_key``."""
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, subject)])
    now = datetime.datetime.now(datetime.timezone.utc)
    builder = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=days))
    )
    return builder.sign(private_key, algorithm=hashes.SHA256())


@pytest.fixture(scope="session")
def make_certificate():
    """Factory for self-signed certificates over RSA or EC keys."""
    return _self_signed_certificate


# ---------------------------------------------------------------------------
# RSA fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def rsa_private_key():
    """A 2048-bit RSA private key shared by the whole session."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_public_key(rsa_private_key):
    return rsa_private_key.public_key()


@pytest.fixture(scope="session")
def rsa_certificate(rsa_private_key):
    """Self-signed certificate wrapping the session RSA key."""
    return _self_signed_certificate(rsa_private_key, subject="jwkbridge test")


# ---------------------------------------------------------------------------
# EC fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def p256_private_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def p384_private_key():
    return ec.generate_private_key(ec.SECP384R1())


# ---------------------------------------------------------------------------
# Symmetric fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def secret_bytes():
    """A fixed 256-bit secret."""
    return bytes(range(32))
