"""Command-line interface for JWK conversion.

CLI Usage:
    jwkbridge --help
    jwkbridge export --input key.pem --kid signing-1
    jwkbridge inspect --input jwks.json
    jwkbridge thumbprint --input key.jwk
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from jwkbridge.converter import convert_from_security_key, try_convert_to_security_key
from jwkbridge.errors import JwkConversionError, NotSupportedError
from jwkbridge.jwk import JsonWebKey, JsonWebKeySet
from jwkbridge.keys import (
    CertificateKey,
    EllipticCurveKey,
    RsaKey,
    SecurityKey,
    SymmetricKey,
)
from jwkbridge.x509 import load_certificate

logger = logging.getLogger(__name__)

KINDS = ("auto", "rsa", "ec", "cert", "oct")


def load_security_key(
    data: bytes,
    kind: str = "auto",
    *,
    key_id: str | None = None,
    public_only: bool = False,
) -> SecurityKey:
    """Load a security key from file contents.

    Args:
        data: PEM key, PEM/DER certificate, or raw secret bytes.
        kind: One of ``KINDS``. "auto" detects certificates and PEM keys.
        key_id: Key identifier to attach.
        public_only: Drop the private half of an asymmetric key.

    Raises:
        ValueError: If the data cannot be parsed as the requested kind.
        NotSupportedError: If the key algorithm has no JWK mapping here.
    """
    if kind == "oct":
        return SymmetricKey(data, key_id=key_id)

    if kind == "cert" or (kind == "auto" and b"-----BEGIN CERTIFICATE-----" in data):
        return CertificateKey(load_certificate(data), key_id=key_id)

    if b"PRIVATE KEY-----" in data:
        loaded = serialization.load_pem_private_key(data, password=None)
        if public_only:
            loaded = loaded.public_key()
    elif b"-----BEGIN" in data:
        loaded = serialization.load_pem_public_key(data)
    else:
        raise ValueError("Input is neither a PEM key nor a PEM certificate")

    if isinstance(loaded, (rsa.RSAPrivateKey, rsa.RSAPublicKey)) and kind in (
        "auto",
        "rsa",
    ):
        return RsaKey(loaded, key_id=key_id)
    if isinstance(
        loaded, (ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey)
    ) and kind in ("auto", "ec"):
        return EllipticCurveKey(loaded, key_id=key_id)
    raise NotSupportedError(
        f"{type(loaded).__name__} cannot be exported as kind {kind!r}"
    )


def _load_key_set(path: str) -> JsonWebKeySet:
    """Read a JWK set, or a single JWK wrapped as a one-key set."""
    data = json.loads(Path(path).read_text())
    if isinstance(data, dict) and "keys" in data:
        return JsonWebKeySet.from_dict(data)
    return JsonWebKeySet(keys=[JsonWebKey.from_dict(data)])


def _describe(index: int, jwk: JsonWebKey) -> tuple[str, bool]:
    key, found = try_convert_to_security_key(jwk)
    variant = type(key).__name__ if found else "unresolved"
    try:
        thumbprint = jwk.compute_thumbprint()
    except JwkConversionError:
        thumbprint = "-"
    return f"{index}\tkid={jwk.kid}\tkty={jwk.kty}\t{variant}\t{thumbprint}", found


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for JWK conversion."""
    parser = argparse.ArgumentParser(
        prog="jwkbridge",
        description="Convert between PEM keys/certificates and JSON Web Keys",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  jwkbridge export --input key.pem --kid signing-1 --output key.jwk
  jwkbridge export --input cert.pem --kind cert
  jwkbridge inspect --input jwks.json
  jwkbridge thumbprint --input key.jwk
        """,
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--verbose", "-v", action="store_true", help="Log reconstruction details"
    )
    verbosity.add_argument(
        "--quiet", "-q", action="store_true", help="Only log errors"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # export subcommand
    exp_parser = subparsers.add_parser(
        "export",
        help="Export a key or certificate as a JWK",
        description="Project a PEM key, certificate, or raw secret into a JWK.",
    )
    exp_parser.add_argument("--input", "-i", required=True, help="Input key file")
    exp_parser.add_argument(
        "--kind",
        "-k",
        choices=KINDS,
        default="auto",
        help="Input kind. Default: auto",
    )
    exp_parser.add_argument("--kid", help="Key identifier to set on the JWK")
    exp_parser.add_argument(
        "--public-only",
        action="store_true",
        help="Export only the public part of a private key",
    )
    exp_parser.add_argument("--output", "-o", help="Output JWK file (default: stdout)")

    # inspect subcommand
    ins_parser = subparsers.add_parser(
        "inspect",
        help="Reconstruct every key in a JWK or JWK set",
        description="Show which key type each JWK resolves to.",
    )
    ins_parser.add_argument("--input", "-i", required=True, help="JWK or JWKS file")

    # thumbprint subcommand
    thumb_parser = subparsers.add_parser(
        "thumbprint",
        help="Print the RFC 7638 thumbprint of a JWK",
    )
    thumb_parser.add_argument("--input", "-i", required=True, help="JWK file")

    args = parser.parse_args(argv)

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "export":
        data = Path(args.input).read_bytes()
        try:
            key = load_security_key(
                data, args.kind, key_id=args.kid, public_only=args.public_only
            )
        except (ValueError, NotSupportedError) as e:
            print(f"Unable to load key: {e}", file=sys.stderr)
            return 1

        output = convert_from_security_key(key).to_json(indent=2)
        if args.output:
            Path(args.output).write_text(output)
            print(f"JWK written to {args.output}", file=sys.stderr)
        else:
            print(output)

    elif args.command == "inspect":
        try:
            key_set = _load_key_set(args.input)
        except (ValueError, JwkConversionError) as e:
            print(f"Unable to read JWK input: {e}", file=sys.stderr)
            return 1

        resolved = 0
        for index, jwk in enumerate(key_set.keys):
            line, found = _describe(index, jwk)
            resolved += found
            print(line)
        logger.debug("Resolved %d of %d keys", resolved, len(key_set.keys))
        if not resolved:
            return 1

    elif args.command == "thumbprint":
        try:
            jwk = JsonWebKey.from_json(Path(args.input).read_text())
            print(jwk.compute_thumbprint())
        except (ValueError, JwkConversionError) as e:
            print(f"Unable to compute thumbprint: {e}", file=sys.stderr)
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
