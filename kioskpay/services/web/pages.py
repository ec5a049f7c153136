"""HTML pages for the kiosk operator and the paying customer."""

from fastapi.responses import HTMLResponse
from jinja2 import DictLoader, Environment, select_autoescape


TEMPLATES = {
    "landing.html": """
    <html>
      <head>
        <meta name="viewport" content="width=device-width,initial-scale=1" />
        <title>Photobooth Payment</title>
        <style>
          body{font-family:system-ui,Segoe UI,Roboto,Arial,sans-serif;margin:24px;display:flex;justify-content:center}
          .card{max-width:640px;width:100%;text-align:center;padding:24px;border:1px solid #e5e7eb;border-radius:16px;box-shadow:0 2px 12px rgba(0,0,0,.06)}
          .btn{display:inline-block;margin-top:12px;padding:12px 18px;border-radius:12px;border:0;background:#342C2A;color:#fff;text-decoration:none;font-weight:600}
          .avatar{width:120px;height:120px;border-radius:9999px;object-fit:cover;display:block;margin:0 auto 12px;border:2px solid #e5e7eb}
          .subtitle{margin:0 0 12px;color:#6b7280;font-size:14px}
          .badge{margin:12px auto;max-width:560px;padding:12px 16px;border-radius:12px;border:1px solid #ddd}
        </style>
      </head>
      <body>
        <div class="card">
          {% if logo_url %}<img class="avatar" src="{{ logo_url }}" alt="Logo">{% endif %}
          <h2>Photobooth Payment</h2>
          <p class="subtitle">Tap the button below to create an invoice and continue to checkout.</p>
          {% if status %}
          <div class="badge">
            <b>Status:</b> {{ status }}{% if invoice %} &nbsp;&bull;&nbsp; <b>Invoice:</b> {{ invoice }}{% endif %}
            {% if message %}<br/><small>{{ message }}</small>{% endif %}
          </div>
          {% endif %}
          <a class="btn" href="/pay-now">Pay now</a>
        </div>
      </body>
    </html>
    """,
    "pay.html": """
    <html>
      <head>
        <meta name="viewport" content="width=device-width, initial-scale=1" />
        <title>Pay {{ invoice }}</title>
        <style>body{font-family:system-ui;margin:24px;text-align:center}</style>
      </head>
      <body>
        <h3>Scan to pay</h3>
        <p>Invoice: <b>{{ invoice }}</b><br/>Amount: <b>Rp {{ amount | rupiah }}</b></p>
        <img src="{{ qr_data_url }}" alt="QR to Pay" style="width:320px;height:320px"/>
        <p><a href="{{ payment_url }}" target="_blank" rel="noreferrer">Or tap here</a></p>
      </body>
    </html>
    """,
}


def rupiah(amount: int) -> str:
    """Indonesian thousands grouping, e.g. 15000 -> `15.000`."""

    return f"{amount:,}".replace(",", ".")


env = Environment(loader=DictLoader(TEMPLATES), autoescape=select_autoescape(["html"]))
env.filters["rupiah"] = rupiah


def render_template(name: str, **ctx) -> HTMLResponse:
    tpl = env.get_template(name)
    return HTMLResponse(tpl.render(**ctx))
