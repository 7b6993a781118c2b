"""Trust ``X-Forwarded-*`` from a known number of reverse-proxy hops."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Wrap the WSGI app in :class:`ProxyFix` unless ``USE_PROXYFIX`` is false.

    ``request.remote_addr`` becomes each session's ``client_address``, so
    ``PROXY_TRUSTED_HOPS`` must match the real proxy chain; trusting more
    hops than exist lets clients spoof their audit address.
    """
    if not app.config.get("USE_PROXYFIX", True):
        return
    hops = int(app.config.get("PROXY_TRUSTED_HOPS", 1))
    app.wsgi_app = ProxyFix(  # type: ignore[method-assign]
        app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops
    )
