"""Sign certificate templates against their issuer and re-parse the result."""
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization

def issuerKeyIdentifier(issuerCert: x509.Certificate) -> x509.AuthorityKeyIdentifier:
    ski = issuerCert.extensions.get_extension_for_class(x509.SubjectKeyIdentifier).value
    return x509.AuthorityKeyIdentifier.from_issuer_subject_key_identifier(ski)

def signTemplate(template: x509.CertificateBuilder, signingKey, issuerCert: x509.Certificate = None,
                 selfName: x509.Name = None) -> bytes:
    """
    Sign `template` with `signingKey` and return the DER encoding.

    With `issuerCert` the issuer name and authority key identifier are read
    from that signed certificate. Without it the template is self-signed and
    `selfName` is used as the issuer name.
    """
    if issuerCert is None:
        if selfName is None:
            raise ValueError("self-signed template needs its subject name")
        builder = template.issuer_name(selfName)
    else:
        builder = (
            template
            .issuer_name(issuerCert.subject)
            .add_extension(issuerKeyIdentifier(issuerCert), critical=False)
        )

    cert = builder.sign(private_key=signingKey, algorithm=hashes.SHA256())
    return cert.public_bytes(serialization.Encoding.DER)

def reparseCertificate(der: bytes) -> x509.Certificate:
    return x509.load_der_x509_certificate(der)
