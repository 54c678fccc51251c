"""Mutual-TLS HTTPS client for the smoke server."""
import http.client
import os
import ssl

CA_CERT = os.getenv("CA_CERT", "certs/rootca.crt.pem")
CLIENT_CERT = os.getenv("CLIENT_CERT", "certs/client.full-crt.pem")
CLIENT_KEY = os.getenv("CLIENT_KEY", "certs/client.key.pem")
SERVER_NAME = os.getenv("SERVER_NAME", "localhost")
SERVER_PORT = int(os.getenv("SERVER_PORT", "19999"))

def clientContext(certPath, keyPath, caPath):
    ctx = ssl.create_default_context(ssl.Purpose.SERVER_AUTH, cafile=str(caPath))
    ctx.load_cert_chain(certfile=str(certPath), keyfile=str(keyPath))
    return ctx

def fetch(host, port, path, certPath, keyPath, caPath, timeout=10):
    """GET `path` over mutual TLS; the server certificate must be valid for `host`."""
    conn = http.client.HTTPSConnection(host, port, timeout=timeout,
                                       context=clientContext(certPath, keyPath, caPath))
    try:
        conn.request("GET", path)
        res = conn.getresponse()
        body = res.read()
        if res.status != 200:
            raise ConnectionError(f"unexpected status {res.status}: {body!r}")
        return body
    finally:
        conn.close()

def main():
    body = fetch(SERVER_NAME, SERVER_PORT, "/hello", CLIENT_CERT, CLIENT_KEY, CA_CERT)
    print("[client] SERVER SAYS:", body.decode("utf-8"))

if __name__ == "__main__":
    main()
