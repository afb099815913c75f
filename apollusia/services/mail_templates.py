"""
Mail templates.

Each template takes the context dict handed to MailService.send_mail and
returns an HTML body. All interpolated values are escaped.
"""
from html import escape
from typing import Any, Callable, Dict

THEME = {
    "primary": "#0d6efd",
    "text": "#212529",
    "muted": "#6c757d",
    "yes": "#198754",
    "maybe": "#ffc107",
    "no": "#dc3545",
}


def get_base_template(title: str, content: str, cta_url: str = "", cta_label: str = "") -> str:
    """Shared HTML wrapper for all mails"""
    cta = ""
    if cta_url and cta_label:
        cta = (
            f'<p><a href="{escape(cta_url)}" style="background:{THEME["primary"]};color:#fff;'
            f'padding:10px 20px;border-radius:6px;text-decoration:none">{escape(cta_label)}</a></p>'
        )

    return f"""<!DOCTYPE html>
<html>
<body style="font-family:sans-serif;color:{THEME['text']}">
<h2>{escape(title)}</h2>
{content}
{cta}
<p style="color:{THEME['muted']};font-size:12px">Sent by Apollusia</p>
</body>
</html>"""


def participated_template(context: Dict[str, Any]) -> str:
    """Confirmation for a participant who just submitted their availability."""
    poll = context["poll"]
    participant = context["participant"]
    content = (
        f"<p>Hi {escape(participant['name'])},</p>"
        f"<p>you participated in the poll <b>{escape(poll['title'])}</b>. "
        "You will be notified once the organizer books the final date.</p>"
    )
    return get_base_template("Participated in Poll", content, context.get("link", ""), "View Poll")


def participant_template(context: Dict[str, Any]) -> str:
    """Admin notification listing the new participant's choice per event."""
    poll = context["poll"]
    cells = []
    for event, mark in zip(context["events"], context["participation"]):
        color = THEME[mark["class"][2:]]
        cells.append(
            f"<tr><td>{escape(event)}</td>"
            f'<td class="{mark["class"]}" style="color:{color};text-align:center">{escape(mark["icon"])}</td></tr>'
        )
    content = (
        f"<p><b>{escape(context['participant']['name'])}</b> participated in your poll "
        f"<b>{escape(poll['title'])}</b>.</p>"
        f"<table>{''.join(cells)}</table>"
    )
    return get_base_template("Updates in Poll", content, context.get("link", ""), "View Results")


def book_template(context: Dict[str, Any]) -> str:
    """Final schedule sent to every participant after booking."""
    poll = context["poll"]
    items = "".join(f"<li>{escape(line)}</li>" for line in context["appointments"])
    content = (
        f"<p>Hi {escape(context['participant']['name'])},</p>"
        f"<p>the poll <b>{escape(poll['title'])}</b> has been booked for:</p>"
        f"<ul>{items}</ul>"
        "<p>Appointments marked with * are ones you selected.</p>"
    )
    if poll.get("location"):
        content += f"<p>Location: {escape(poll['location'])}</p>"
    return get_base_template("Poll booked", content, context.get("link", ""), "View Poll")


TEMPLATES: Dict[str, Callable[[Dict[str, Any]], str]] = {
    "participated": participated_template,
    "participant": participant_template,
    "book": book_template,
}


def render_template(name: str, context: Dict[str, Any]) -> str:
    try:
        template = TEMPLATES[name]
    except KeyError:
        raise ValueError(f"Unknown mail template: {name}")
    return template(context)
