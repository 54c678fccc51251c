"""X.509 validation of a written chain: signatures, CA flags, validity, CN, file order."""

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding
from pathlib import Path
import datetime

from dummycert.crypto.templates import Position, PROFILES, CHAIN_ORDER, LEAVES
from dummycert.storage.artifacts import key_file, cert_file, full_chain_file

def loadPemCert(pathOrBytes):
    if isinstance(pathOrBytes, (bytes, bytearray)):
        data = bytes(pathOrBytes)
    else:
        with open(str(pathOrBytes), "rb") as f:
            data = f.read()
    return x509.load_pem_x509_certificate(data)

def loadPemChain(path):
    with open(str(path), "rb") as f:
        return x509.load_pem_x509_certificates(f.read())

def loadPemPrivateKey(path, password = None):
    with open(path, "rb") as f:
        return serialization.load_pem_private_key(f.read(), password=password)

def verifySignature(cert: x509.Certificate, issuerCert: x509.Certificate):
    issuerPub = issuerCert.public_key()
    try:
        issuerPub.verify(
            signature=cert.signature,
            data=cert.tbs_certificate_bytes,
            padding=padding.PKCS1v15(),
            algorithm=cert.signature_hash_algorithm
        )
    except Exception as e:
        return False, f"bad signature: {e}"
    if cert.issuer != issuerCert.subject:
        return False, "issuer does not match issuer certificate subject"
    return True, ""

def checkIssuerIsCa(issuerCert: x509.Certificate):
    try:
        bc = issuerCert.extensions.get_extension_for_class(x509.BasicConstraints).value
    except x509.ExtensionNotFound:
        return False, "issuer has no basic constraints"
    if not bc.ca:
        return False, "issuer is not a CA"
    return True, ""

def checkValidity(cert: x509.Certificate, now: datetime.datetime = None):
    if now is None:
        now = datetime.datetime.now(datetime.timezone.utc)
    if now < cert.not_valid_before_utc:
        return False, f"not yet valid (not_before={cert.not_valid_before_utc.isoformat()})"
    if now > cert.not_valid_after_utc:
        return False, f"expired (not_after={cert.not_valid_after_utc.isoformat()})"
    return True, ""

def checkCn(cert: x509.Certificate, expectedCn: str):
    if expectedCn is None:
        return True, ""

    try:
        cn = cert.subject.get_attributes_for_oid(x509.NameOID.COMMON_NAME)[0].value
    except IndexError:
        return False, "no CN in subject"

    if cn != expectedCn:
        return False, f"CN mismatch: got={cn} expected={expectedCn}"
    return True, ""

def checkKeyMatches(cert: x509.Certificate, key):
    pub = serialization.PublicFormat.SubjectPublicKeyInfo
    certPub = cert.public_key().public_bytes(serialization.Encoding.DER, pub)
    keyPub = key.public_key().public_bytes(serialization.Encoding.DER, pub)
    if certPub != keyPub:
        return False, "private key does not match certificate"
    return True, ""

def verifyCert(certPemPathOrBytes, caCertPemPathOrBytes, expectedCn: str = None, now=None):
    try:
        cert = loadPemCert(certPemPathOrBytes)
    except Exception as e:
        return False, f"unable to parse cert: {e}"

    try:
        caCert = loadPemCert(caCertPemPathOrBytes)
    except Exception as e:
        return False, f"unable to parse CA cert: {e}"

    for ok, reason in (
        verifySignature(cert, caCert),
        checkIssuerIsCa(caCert),
        checkValidity(cert, now),
        checkCn(cert, expectedCn),
    ):
        if not ok:
            return False, reason

    return True, ""

def verifyChainDir(directory, now=None):
    """
    Check a directory written by createChain.

    Returns a list of (check name, ok, reason) tuples, one per check, in
    chain order. Validity windows are checked against `now`.
    """
    d = Path(directory)
    results = []
    certs = {}

    for position in CHAIN_ORDER:
        try:
            certs[position] = loadPemCert(d / cert_file(position))
            key = loadPemPrivateKey(d / key_file(position))
        except Exception as e:
            results.append((position.value, False, f"unable to load: {e}"))
            continue
        results.append((f"{position.value} key", *checkKeyMatches(certs[position], key)))

    for position in CHAIN_ORDER:
        parent = PROFILES[position].parent
        if position not in certs or parent not in certs:
            continue
        ok, reason = verifyCert(
            certs[position].public_bytes(serialization.Encoding.PEM),
            certs[parent].public_bytes(serialization.Encoding.PEM),
            now=now,
        )
        results.append((f"{position.value} signed by {parent.value}", ok, reason))

    expected = [Position.MIDDLE, Position.ROOTCA]
    for position in LEAVES:
        name = full_chain_file(position)
        try:
            chain = loadPemChain(d / name)
        except Exception as e:
            results.append((name, False, f"unable to load: {e}"))
            continue
        want = [certs.get(p) for p in [position] + expected]
        if chain != want:
            results.append((name, False, "chain is not leaf, middle, root"))
        else:
            results.append((name, True, ""))

    return results
