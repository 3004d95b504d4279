"""Tests for the JsonWebKey record, JWK sets, and RFC 7638 thumbprints."""

import json

import pytest
from joserfc.jwk import ECKey, OctKey, RSAKey

from jwkbridge.converter import convert_from_security_key
from jwkbridge.errors import (
    InvalidArgumentError,
    InvalidKeyMaterialError,
    NotSupportedError,
)
from jwkbridge.jwk import JsonWebKey, JsonWebKeySet
from jwkbridge.keys import CertificateKey, EllipticCurveKey, RsaKey, SymmetricKey

# RFC 7638 section 3.1 example key and its thumbprint
RFC7638_N = (
    "0vx7agoebGcQSuuPiLJXZptN9nndrQmbXEps2aiAFbWhM78LhWx4cbbfAAtVT86zwu1RK7aPFFxuhDR1L6tSoc"
    "_BJECPebWKRXjBZCiFV4n3oknjhMstn64tZ_2W-5JsGY4Hc5n9yBXArwl93lqt7_RN5w6Cf0h4QyQ5v-65YGjQR0"
    "_FDW2QvzqY368QQMicAtaSqzs8KJZgnYb9c7d0zgdAZHzu6qMQvRL5hajrn1n91CbOpbISD08qNLyrdkt-bFTWhAI"
    "4vMQFh6WeZu0fM4lFd2NcRwr3XPksINHaQ-G_xBniIqbw0Ls1jF44-csFCur-kEgU8awapJzKnqDKgw"
)
RFC7638_THUMBPRINT = "NzbLsXh8uDCcd-6MNwXF4W_7noWXFZAfHkxZsRGC9Xs"


class TestWireMapping:
    def test_from_dict_maps_members(self):
        jwk = JsonWebKey.from_dict(
            {
                "kty": "RSA",
                "kid": "2011-04-29",
                "use": "sig",
                "alg": "RS256",
                "n": RFC7638_N,
                "e": "AQAB",
                "x5t#S256": "abc",
            }
        )
        assert jwk.kty == "RSA"
        assert jwk.kid == "2011-04-29"
        assert jwk.alg == "RS256"
        assert jwk.x5t_s256 == "abc"
        assert jwk.x5c == []
        assert jwk.converted_key is None

    def test_unknown_members_roundtrip(self):
        data = {"kty": "oct", "k": "AAEC", "ext": True, "vendor": {"a": 1}}
        jwk = JsonWebKey.from_dict(data)
        assert jwk.additional_data == {"ext": True, "vendor": {"a": 1}}
        assert jwk.to_dict() == data

    def test_to_dict_omits_absent_members(self):
        jwk = JsonWebKey(kty="EC", crv="P-256", x="AA", y="BB")
        assert jwk.to_dict() == {"kty": "EC", "crv": "P-256", "x": "AA", "y": "BB"}

    def test_to_json_and_back(self):
        jwk = JsonWebKey(kty="RSA", kid="k", x5c=["MIIB"], x5t="t")
        assert JsonWebKey.from_json(jwk.to_json()) == jwk

    def test_rejects_non_object(self):
        with pytest.raises(InvalidArgumentError, match="list"):
            JsonWebKey.from_dict([])

    def test_rejects_non_array_x5c(self):
        with pytest.raises(InvalidArgumentError, match="x5c"):
            JsonWebKey.from_dict({"kty": "RSA", "x5c": "MIIB"})

    def test_from_json_none(self):
        with pytest.raises(InvalidArgumentError):
            JsonWebKey.from_json(None)

    def test_converted_key_not_serialised_or_compared(self, secret_bytes):
        jwk = convert_from_security_key(SymmetricKey(secret_bytes))
        plain = JsonWebKey.from_dict(jwk.to_dict())
        assert "converted_key" not in jwk.to_json()
        assert plain == jwk
        assert plain.converted_key is None

    def test_repr_hides_private_members(self):
        jwk = JsonWebKey(kty="oct", k="c2VjcmV0")
        assert "c2VjcmV0" not in repr(jwk)
        assert "private=True" in repr(jwk)


class TestThumbprint:
    def test_rfc7638_example(self):
        jwk = JsonWebKey(kty="RSA", kid="2011-04-29", alg="RS256", n=RFC7638_N, e="AQAB")
        assert jwk.compute_thumbprint() == RFC7638_THUMBPRINT

    def test_ignores_private_and_optional_members(self, rsa_private_key):
        full = convert_from_security_key(RsaKey(rsa_private_key, key_id="a"))
        public = JsonWebKey(kty="RSA", n=full.n, e=full.e)
        assert full.compute_thumbprint() == public.compute_thumbprint()

    def test_ec_and_oct(self, p256_private_key, secret_bytes):
        ec_jwk = convert_from_security_key(EllipticCurveKey(p256_private_key))
        oct_jwk = convert_from_security_key(SymmetricKey(secret_bytes))
        assert len(ec_jwk.compute_thumbprint()) == 43
        assert len(oct_jwk.compute_thumbprint()) == 43

    def test_missing_member(self):
        with pytest.raises(InvalidArgumentError, match="n"):
            JsonWebKey(kty="RSA", e="AQAB").compute_thumbprint()

    def test_unsupported_kty(self):
        with pytest.raises(NotSupportedError, match="OKP"):
            JsonWebKey(kty="OKP", crv="Ed25519", x="AA").compute_thumbprint()


class TestJsonWebKeySet:
    def test_parse(self, rsa_certificate, secret_bytes):
        jwks = JsonWebKeySet(
            keys=[
                convert_from_security_key(CertificateKey(rsa_certificate)),
                convert_from_security_key(SymmetricKey(secret_bytes, key_id="s")),
            ]
        )
        parsed = JsonWebKeySet.from_json(jwks.to_json())
        assert [k.kty for k in parsed.keys] == ["RSA", "oct"]
        assert parsed.keys[1].kid == "s"

    def test_requires_keys_member(self):
        with pytest.raises(InvalidArgumentError, match="keys"):
            JsonWebKeySet.from_dict({"kty": "RSA"})

    def test_keys_must_be_array(self):
        with pytest.raises(InvalidArgumentError, match="array"):
            JsonWebKeySet.from_json(json.dumps({"keys": {}}))

    def test_get_signing_keys_skips_unresolved(self, rsa_public_key, caplog):
        rsa_jwk = convert_from_security_key(RsaKey(rsa_public_key, key_id="r"))
        data = {
            "keys": [
                rsa_jwk.to_dict(),
                {"kty": "EC", "crv": "P-999", "x": "AA", "y": "AA", "kid": "bad"},
                {"kty": "OKP", "crv": "Ed25519", "x": "AA"},
                {"kty": "oct", "k": "AAEC", "use": "enc"},
            ]
        }
        keys = JsonWebKeySet.from_dict(data).get_signing_keys()
        assert keys == [RsaKey(rsa_public_key, key_id="r")]
        assert len(caplog.records) == 1
        assert "P-999" in caplog.records[0].getMessage()

    def test_get_signing_keys_survives_non_string_members(self, secret_bytes):
        good = convert_from_security_key(SymmetricKey(secret_bytes, key_id="s")).to_dict()
        data = {
            "keys": [
                {"kty": "EC", "crv": {"n": 1}, "x": "AA", "y": "AA"},
                {"kty": "RSA", "n": 12345, "e": "AQAB", "x5c": [42]},
                {"kty": "oct", "k": ["AQID"]},
                good,
            ]
        }
        keys = JsonWebKeySet.from_dict(data).get_signing_keys()
        assert keys == [SymmetricKey(secret_bytes, key_id="s")]


class TestThumbprintErrors:
    def test_unknown_curve(self):
        jwk = JsonWebKey(kty="EC", crv="P-999", x="AA", y="AA")
        with pytest.raises(InvalidKeyMaterialError):
            jwk.compute_thumbprint()

    def test_non_string_kty(self):
        with pytest.raises(NotSupportedError):
            JsonWebKey(kty=["RSA"], n="AQAB", e="AQAB").compute_thumbprint()

    def test_non_string_member(self):
        with pytest.raises(InvalidKeyMaterialError):
            JsonWebKey(kty="EC", crv=["P-256"], x="AA", y="AA").compute_thumbprint()


class TestJoserfcInterop:
    """Projected private JWKs import into joserfc as the same key."""

    def test_rsa(self, rsa_private_key):
        jwk = convert_from_security_key(RsaKey(rsa_private_key, key_id="r"))
        key = RSAKey.import_key(jwk.to_dict())
        assert key.is_private
        assert key.private_key.private_numbers() == rsa_private_key.private_numbers()
        assert key.thumbprint() == jwk.compute_thumbprint()

    def test_ec(self, p384_private_key):
        jwk = convert_from_security_key(EllipticCurveKey(p384_private_key, key_id="e"))
        key = ECKey.import_key(jwk.to_dict())
        assert key.is_private
        assert key.private_key.private_numbers() == p384_private_key.private_numbers()
        assert key.thumbprint() == jwk.compute_thumbprint()

    def test_oct(self, secret_bytes):
        jwk = convert_from_security_key(SymmetricKey(secret_bytes, key_id="s"))
        key = OctKey.import_key(jwk.to_dict())
        assert key.raw_value == secret_bytes
        assert key.thumbprint() == jwk.compute_thumbprint()
