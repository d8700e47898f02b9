#!/usr/bin/env python3
"""
Entrypoint script for fetching a page through a SOCKS5 proxy with configurable authentication.
"""

import logging
import os
from socksdial import Proxy


def main():
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    proxy_address = os.getenv("PROXY_ADDRESS", "127.0.0.1:1080")
    username = os.getenv("USERNAME")
    password = os.getenv("PASSWORD")
    tor_isolation = os.getenv("TOR_ISOLATION", "").lower() in ("1", "true", "yes")
    target = os.getenv("TARGET", "httpbin.org:80")
    path = os.getenv("TARGET_PATH", "/get")

    if tor_isolation:
        if username or password:
            raise ValueError("TOR_ISOLATION cannot be combined with USERNAME/PASSWORD")
        proxy = Proxy.with_tor_isolation(proxy_address)
    elif username:
        proxy = Proxy.with_auth(proxy_address, username, password or "")
    else:
        proxy = Proxy.from_address(proxy_address)

    host = target.rsplit(":", 1)[0]
    stream = proxy.dial("tcp", target)
    with stream:
        request = (
            f"GET {path} HTTP/1.1\r\n"
            f"Host: {host}\r\n"
            "Connection: close\r\n\r\n"
        )
        stream.write(request.encode("ascii"))
        response = bytearray()
        while True:
            chunk = stream.read()
            if not chunk:
                break
            response.extend(chunk)

    head, _, body = bytes(response).partition(b"\r\n\r\n")
    print("Status:", head.split(b"\r\n", 1)[0].decode("latin-1"))
    print(body.decode("utf-8", errors="replace"))


if __name__ == "__main__":
    main()
