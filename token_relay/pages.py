"""HTML pages rendered by the relay."""

from __future__ import annotations

import html

CONFIRMATION_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Authorization Success</title>
</head>
<body>
  <h1>Authorization Successful!</h1>

  <div style="display: flex; align-items: center; gap: 5px;">
    <div>Email: </div>
    <p id="email">{email}</p>
  </div>

  <div style="display: flex; align-items: center; gap: 5px;">
    <div>Access Token: </div>
    <p id="token">{token}</p>
  </div>
</body>
</html>
"""


def render_confirmation_page(email: str, refresh_token: str) -> str:
    """Return the success page shown after a completed authorization."""

    return CONFIRMATION_TEMPLATE.format(
        email=html.escape(email, quote=True),
        token=html.escape(refresh_token, quote=True),
    )
