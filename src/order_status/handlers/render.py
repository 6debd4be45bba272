"""HTML rendering for the order status page.

Builds a small self-contained page: a status card with the order name,
the current stage message and a three-step timeline. All interpolated
values are HTML-escaped.
"""
from html import escape

from ..schemas import OrderStatusPayload, Stage

TIMELINE = [
    (Stage.PROCESSING, "Processing"),
    (Stage.PACKING, "Packing"),
    (Stage.SHIPPED, "Shipped"),
]


def wants_html(accept: str | None) -> bool:
    """True when the Accept header asks for an HTML page."""
    return "text/html" in (accept or "")


def _timeline(current: Stage) -> str:
    current_index = [stage for stage, _ in TIMELINE].index(current)
    steps = []
    for index, (_, label) in enumerate(TIMELINE):
        css = "step done" if index <= current_index else "step"
        steps.append(f'    <li class="{css}">{escape(label)}</li>')
    return "\n".join(steps)


def render_status_page(payload: OrderStatusPayload) -> str:
    order_name = escape(payload.order_name or "-")
    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Order status</title>
  <style>
    body{{font-family:system-ui,-apple-system,Segoe UI,Roboto,Arial; margin:0; padding:32px; background:#fff; color:#111;}}
    .card{{max-width:720px; margin:0 auto; border:1px solid #e8e8e8; border-radius:16px; padding:24px;}}
    .muted{{color:#666; font-size:14px;}}
    h1{{margin:0 0 8px 0; font-size:22px;}}
    .msg{{margin-top:14px; font-size:18px; line-height:1.35;}}
    .timeline{{display:flex; gap:8px; list-style:none; padding:0; margin:20px 0 0 0;}}
    .step{{flex:1; padding:8px 10px; border-radius:999px; border:1px solid #ddd; font-size:12px; text-align:center; text-transform:uppercase; letter-spacing:.06em; color:#999;}}
    .step.done{{background:#111; border-color:#111; color:#fff;}}
  </style>
</head>
<body>
  <div class="card">
    <div class="muted">Order: <strong>{order_name}</strong></div>
    <h1>Order status</h1>
    <ol class="timeline" data-stage="{escape(payload.stage.value)}">
{_timeline(payload.stage)}
    </ol>
    <div class="msg">{escape(payload.message)}</div>
    <div class="muted" style="margin-top:16px;">Days since order: {payload.days_since}</div>
  </div>
</body>
</html>"""
