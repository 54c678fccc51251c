"""Mutual-TLS HTTPS server answering "OK", for smoke testing a generated chain."""
import os
import ssl
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

CA_CERT = os.getenv("CA_CERT", "certs/rootca.crt.pem")
SERVER_CERT = os.getenv("SERVER_CERT", "certs/server.full-crt.pem")
SERVER_KEY = os.getenv("SERVER_KEY", "certs/server.key.pem")
SERVER_HOST = os.getenv("SERVER_HOST", "127.0.0.1")
SERVER_PORT = int(os.getenv("SERVER_PORT", "19999"))

class OkHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        body = b"OK"
        self.send_response(200)
        self.send_header("Content-Type", "text/plain")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, fmt, *args):
        print(f"[server] {self.address_string()} {fmt % args}")

def serverContext(certPath, keyPath, caPath):
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    ctx.load_cert_chain(certfile=str(certPath), keyfile=str(keyPath))
    ctx.load_verify_locations(cafile=str(caPath))
    ctx.verify_mode = ssl.CERT_REQUIRED
    return ctx

def buildServer(host, port, certPath, keyPath, caPath):
    httpd = ThreadingHTTPServer((host, port), OkHandler)
    httpd.socket = serverContext(certPath, keyPath, caPath).wrap_socket(httpd.socket, server_side=True)
    return httpd

def main():
    httpd = buildServer(SERVER_HOST, SERVER_PORT, SERVER_CERT, SERVER_KEY, CA_CERT)
    print(f"[server] listening on {SERVER_HOST}:{SERVER_PORT}")
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        httpd.server_close()

if __name__ == "__main__":
    main()
