"""HTML rendering for the postMessage relay popup.

The callback page carries an inline script that hands the token to the CMS
window which opened the popup. All dynamic values are serialised into the
template through filters (``tojson`` for data, ``js_string`` for string
literals) rather than concatenated into markup.
"""

from __future__ import annotations

import logging

from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup

from cmsrelay.config import Settings
from cmsrelay.oauth.models import RelayResult

logger = logging.getLogger(__name__)

_JS_ESCAPES = {
    ord("\\"): "\\\\",
    ord("'"): "\\'",
    ord("<"): "\\u003C",
    ord(">"): "\\u003E",
    ord("&"): "\\u0026",
    ord("\n"): "\\n",
    ord("\r"): "\\r",
    ord("\t"): "\\t",
    0x2028: "\\u2028",
    0x2029: "\\u2029",
}
_JS_ESCAPES.update({c: f"\\x{c:02x}" for c in range(0x20) if c not in _JS_ESCAPES})


def js_string(value: object) -> Markup:
    """Render ``value`` as a single-quoted JavaScript string literal.

    Safe inside an HTML ``<script>`` element: quotes, backslashes, angle
    brackets, ampersands, control and line-separator characters are escaped.
    """
    return Markup("'" + str(value).translate(_JS_ESCAPES) + "'")


def _build_env() -> Environment:
    env = Environment(
        loader=PackageLoader("cmsrelay", "templates"),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["js_string"] = js_string
    return env


templates = _build_env()


def render_relay_page(result: RelayResult, settings: Settings, nonce: str) -> str:
    """Render the callback popup page for ``result``."""
    template = templates.get_template("relay.html")
    return template.render(
        ok=result.ok,
        provider=result.provider,
        message=result.message,
        handshake=result.handshake,
        origins=list(settings.allowed_origins),
        allow_any=settings.allow_any_origin,
        nonce=nonce,
    )


def render_login_page(settings: Settings) -> str:
    """Render the optional index page with a link that starts the flow."""
    template = templates.get_template("login.html")
    return template.render(provider=settings.provider)
