"""
HTML pages served by the paste routes.
"""
from datetime import datetime
from html import escape
from typing import Sequence

from wordbin.models import Paste, PasteKind

_STYLE = """
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif;
            background: #f0f0f5;
            padding: 40px 20px;
        }
        .container {
            background: white;
            border-radius: 10px;
            box-shadow: 0 4px 20px rgba(0, 0, 0, 0.1);
            max-width: 900px;
            margin: 0 auto;
            padding: 40px;
        }
        h1 { color: #333; margin-bottom: 20px; font-size: 24px; }
        .meta { color: #666; font-size: 12px; margin-bottom: 20px; font-family: monospace; }
        .content {
            background: #f5f5f5;
            border: 1px solid #ddd;
            border-radius: 5px;
            padding: 20px;
            font-family: "Courier New", monospace;
            font-size: 14px;
            white-space: pre-wrap;
            word-wrap: break-word;
        }
        table { width: 100%; border-collapse: collapse; }
        td, th { text-align: left; padding: 6px; border-bottom: 1px solid #eee; }
        textarea { width: 100%; height: 300px; font-family: monospace; margin-bottom: 10px; }
        a { color: #667eea; text-decoration: none; }
        .footer { margin-top: 20px; text-align: center; color: #999; font-size: 12px; }
"""


def _layout(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(title)} - WordBin</title>
    <style>{_STYLE}</style>
</head>
<body>
    <div class="container">
{body}
        <div class="footer">
            <p><a href="/">New paste</a> · <a href="/pastalist">All pastes</a></p>
        </div>
    </div>
</body>
</html>"""


def _format_time(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


def _expiry(paste: Paste) -> str:
    return "never" if paste.expires_at == 0 else _format_time(paste.expires_at)


def render_index() -> str:
    options = "\n".join(
        f'                <option value="{value}"{" selected" if value == "24hour" else ""}>{value}</option>'
        for value in ("1min", "10min", "1hour", "24hour", "1week", "never")
    )
    return _layout("New paste", f"""        <h1>WordBin</h1>
        <form action="/upload" method="post" enctype="multipart/form-data">
            <textarea name="content" placeholder="Text or URL"></textarea>
            <p>
                <label>Expiration
                <select name="expiration">
{options}
                </select></label>
                <input type="file" name="file">
                <button type="submit">Save</button>
            </p>
        </form>""")


def render_paste(paste: Paste) -> str:
    animals = paste.id_as_animals()
    links = [f'<a href="/raw/{animals}">raw</a>', f'<a href="/remove/{animals}">remove</a>']
    if paste.kind == PasteKind.URL:
        links.insert(0, f'<a href="/url/{animals}">open link</a>')
    if paste.has_file:
        links.insert(0, f'<a href="/file/{animals}">{escape(paste.file_name)}</a>')
    link_bar = " · ".join(links)
    return _layout(animals, f"""        <h1>{animals}</h1>
        <div class="meta">{paste.kind.value} · created {_format_time(paste.created_at)} · expires {_expiry(paste)}</div>
        <div class="meta">{link_bar}</div>
        <div class="content">{escape(paste.content)}</div>""")


def render_paste_list(pastes: Sequence[Paste]) -> str:
    rows = "\n".join(
        f"""            <tr>
                <td><a href="/pasta/{p.id_as_animals()}">{p.id_as_animals()}</a></td>
                <td>{p.kind.value}</td>
                <td>{_format_time(p.created_at)}</td>
                <td>{_expiry(p)}</td>
                <td><a href="/remove/{p.id_as_animals()}">remove</a></td>
            </tr>"""
        for p in pastes
    )
    if not pastes:
        rows = '            <tr><td colspan="5">No pastes yet.</td></tr>'
    return _layout("All pastes", f"""        <h1>All pastes</h1>
        <table>
            <tr><th>Id</th><th>Kind</th><th>Created</th><th>Expires</th><th></th></tr>
{rows}
        </table>""")


def render_error(status_code: int, message: str) -> str:
    return _layout("Error", f"""        <h1>{status_code}</h1>
        <p>{escape(message)}</p>""")
