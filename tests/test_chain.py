import datetime
import ipaddress

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.x509.verification import PolicyBuilder, Store, VerificationError

from dummycert import chain as chainmod
from dummycert.chain import createChain
from dummycert.common.errors import ChainError, KeyGenerationError, SigningError, ReparseError, PersistenceError
from dummycert.crypto.keys import generateKey
from dummycert.crypto.pki import loadPemCert, loadPemPrivateKey, verifySignature, verifyCert
from dummycert.crypto.signer import signTemplate, reparseCertificate
from dummycert.crypto.templates import Position, buildTemplate
from tests.chainutil import NOT_BEFORE, NOT_AFTER, make_config, make_spec

VERIFY_AT = NOT_BEFORE + datetime.timedelta(minutes=1)


@pytest.fixture(scope="module")
def certs(chain_dir):
    return {p: loadPemCert(chain_dir / f"{p.value}.crt.pem") for p in Position}


def _pem(cert):
    return cert.public_bytes(serialization.Encoding.PEM)


def server_verifier(root):
    return (
        PolicyBuilder()
        .store(Store([root]))
        .time(VERIFY_AT)
        .build_server_verifier(x509.DNSName("localhost"))
    )


def client_verifier(root):
    return PolicyBuilder().store(Store([root])).time(VERIFY_AT).build_client_verifier()


def test_signatures_follow_the_chain(certs):
    root, middle = certs[Position.ROOTCA], certs[Position.MIDDLE]
    assert verifySignature(root, root) == (True, "")
    assert verifySignature(middle, root) == (True, "")
    assert verifySignature(certs[Position.SERVER], middle) == (True, "")
    assert verifySignature(certs[Position.CLIENT], middle) == (True, "")


def test_leaf_not_signed_by_root(certs):
    ok, _ = verifySignature(certs[Position.SERVER], certs[Position.ROOTCA])
    assert not ok


def test_server_chain_verifies(certs):
    root, middle, server = certs[Position.ROOTCA], certs[Position.MIDDLE], certs[Position.SERVER]
    chain = server_verifier(root).verify(server, [middle])
    assert chain == [server, middle, root]


def test_client_chain_verifies(certs):
    root, middle, client = certs[Position.ROOTCA], certs[Position.MIDDLE], certs[Position.CLIENT]
    verified = client_verifier(root).verify(client, [middle])
    assert verified.chain == [client, middle, root]


def test_client_cert_is_not_a_server_cert(certs):
    with pytest.raises(VerificationError):
        server_verifier(certs[Position.ROOTCA]).verify(certs[Position.CLIENT], [certs[Position.MIDDLE]])


def test_leaf_without_middle_fails(certs):
    with pytest.raises(VerificationError):
        server_verifier(certs[Position.ROOTCA]).verify(certs[Position.SERVER], [])
    with pytest.raises(VerificationError):
        client_verifier(certs[Position.ROOTCA]).verify(certs[Position.CLIENT], [])


def test_leaf_cannot_issue(chain_dir, certs):
    server = certs[Position.SERVER]
    server_key = loadPemPrivateKey(chain_dir / "server.key.pem")
    key = generateKey(2048)
    template = buildTemplate(Position.SERVER, make_spec("forged", 99, dns=["localhost"]), key.public_key())
    forged = reparseCertificate(signTemplate(template, server_key, issuerCert=server))

    # the signature itself is fine, the issuer is not a CA
    assert verifySignature(forged, server) == (True, "")
    ok, reason = verifyCert(
        _pem(forged),
        _pem(server),
        now=VERIFY_AT,
    )
    assert not ok
    assert reason == "issuer is not a CA"

    with pytest.raises(VerificationError):
        server_verifier(certs[Position.ROOTCA]).verify(forged, [server, certs[Position.MIDDLE]])


def test_fields_match_spec(chain_config, certs):
    for position in Position:
        spec = chain_config.specFor(position)
        cert = certs[position]
        cn = cert.subject.get_attributes_for_oid(x509.NameOID.COMMON_NAME)[0].value
        assert cn == spec.commonName
        assert cert.serial_number == spec.serialNumber
        assert cert.not_valid_before_utc == NOT_BEFORE
        assert cert.not_valid_after_utc == NOT_AFTER


def test_leaf_names_are_normalized(certs):
    san = certs[Position.SERVER].extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    assert san.get_values_for_type(x509.DNSName) == ["localhost"]
    assert san.get_values_for_type(x509.IPAddress) == [ipaddress.ip_address("127.0.0.1")]

    san = certs[Position.CLIENT].extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    assert san.get_values_for_type(x509.DNSName) == ["localhost"]
    assert san.get_values_for_type(x509.IPAddress) == [ipaddress.ip_address("::1")]


def test_authority_key_identifiers_link_the_chain(certs):
    def ski(cert):
        return cert.extensions.get_extension_for_class(x509.SubjectKeyIdentifier).value.digest

    def aki(cert):
        return cert.extensions.get_extension_for_class(x509.AuthorityKeyIdentifier).value.key_identifier

    assert aki(certs[Position.MIDDLE]) == ski(certs[Position.ROOTCA])
    assert aki(certs[Position.SERVER]) == ski(certs[Position.MIDDLE])
    assert aki(certs[Position.CLIENT]) == ski(certs[Position.MIDDLE])


def test_every_position_gets_its_own_key(chain_dir):
    numbers = {
        loadPemPrivateKey(chain_dir / f"{p.value}.key.pem").private_numbers().p
        for p in Position
    }
    assert len(numbers) == 4


def test_small_key_is_a_keygen_error(tmp_path):
    with pytest.raises(KeyGenerationError) as info:
        createChain(make_config(tmp_path, bits=512))
    assert info.value.stage == "keygen"
    assert info.value.position == Position.ROOTCA
    assert list(tmp_path.iterdir()) == []


def test_inverted_validity_is_a_signing_error(tmp_path):
    bad = make_spec("Bad Middle", 2002, not_before=NOT_AFTER, not_after=NOT_BEFORE)
    with pytest.raises(SigningError) as info:
        createChain(make_config(tmp_path, bits=1024, middle=bad))
    assert info.value.position == Position.MIDDLE
    assert str(info.value).startswith("sign failed for middle:")
    assert list(tmp_path.iterdir()) == []


def test_reparse_failure_is_reported(tmp_path, monkeypatch):
    def broken(der):
        raise ValueError("truncated")

    monkeypatch.setattr(chainmod, "reparseCertificate", broken)
    with pytest.raises(ReparseError) as info:
        createChain(make_config(tmp_path, bits=1024))
    assert info.value.position == Position.ROOTCA
    assert isinstance(info.value.__cause__, ValueError)


def test_missing_directory_is_a_write_error(tmp_path):
    with pytest.raises(PersistenceError) as info:
        createChain(make_config(tmp_path / "missing", bits=1024))
    assert isinstance(info.value, ChainError)
    assert "rootca.key.pem" in str(info.value)
