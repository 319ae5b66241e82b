# app/export/service/renderers.py
"""
Turns a single AI response, or a whole saved chat, into export bytes.
Inputs are expected to be sanitized already (see `sanitize_text`).
"""

import json
import re
from io import BytesIO
from typing import List, Optional
from xml.sax.saxutils import escape

from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from app.chat.entity.chat import Chat
from app.llm.entity.chat import utc_now

# NUL and the C0 controls other than tab, newline and carriage return, plus DEL.
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
RULE = "-" * 50
FOOTER = "Generated by Multi-AI Chat Platform"


def sanitize_text(text: str) -> str:
    return _CONTROL_CHARS.sub("", text).strip()


def _timestamp() -> str:
    return utc_now().strftime("%Y-%m-%d %H:%M:%S UTC")


def _role_label(role: str) -> str:
    return "User" if role == "user" else "Assistant"


# ── single response ─────────────────────────────

def response_markdown(response: str, prompt: Optional[str], model: Optional[str]) -> bytes:
    lines = ["# AI Response Export", "", f"**Generated:** {_timestamp()}"]
    if model:
        lines.append(f"**Model:** {model}")
    lines += ["", "---", ""]
    if prompt:
        lines += ["## Original Prompt", "", prompt, "", "---", ""]
    lines += ["## AI Response", "", response, ""]
    return "\n".join(lines).encode("utf-8")


def response_json(response: str, prompt: Optional[str], model: Optional[str], chat_id: Optional[str]) -> bytes:
    data = {
        "exportedAt": utc_now().isoformat(),
        "model": model or "unknown",
        "chatId": chat_id,
        "prompt": prompt,
        "response": response,
        "metadata": {"format": "json", "version": "1.0"},
    }
    return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")


def response_text(response: str, prompt: Optional[str]) -> bytes:
    lines = ["AI RESPONSE EXPORT", "=" * 50, "", f"Generated: {_timestamp()}", ""]
    if prompt:
        lines += ["ORIGINAL PROMPT:", RULE, prompt, ""]
    lines += ["AI RESPONSE:", RULE, response, ""]
    return "\n".join(lines).encode("utf-8")


# ── whole chat ──────────────────────────────────

def chat_markdown(chat: Chat) -> str:
    lines = [
        f"# {chat.title}",
        "",
        f"Chat ID: {chat.chat_id}",
        f"Created: {chat.created_at.strftime('%Y-%m-%d %H:%M:%S')}",
        "",
        "---",
        "",
    ]
    for index, msg in enumerate(chat.messages, start=1):
        lines.append(f"## Message {index} - {_role_label(msg.role)}")
        if msg.model:
            lines.append(f"Model: {msg.model}")
        lines += ["", msg.content, "", "---", ""]
    return "\n".join(lines)


def chat_text(chat: Chat) -> str:
    text = re.sub(r"#+\s", "", chat_markdown(chat))
    return text.replace("---", "")


def chat_json(chat: Chat) -> bytes:
    return json.dumps(chat.to_dict(), indent=2, ensure_ascii=False).encode("utf-8")


# ── pdf ─────────────────────────────────────────

def _paragraph(text: str, style: ParagraphStyle) -> Paragraph:
    return Paragraph(escape(text).replace("\n", "<br/>"), style)


def _build_pdf(story: List) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=letter, leftMargin=50, rightMargin=50, topMargin=50, bottomMargin=50)
    doc.build(story)
    return buffer.getvalue()


def _styles() -> dict:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("ExportTitle", parent=base["Title"], fontSize=24, alignment=TA_CENTER),
        "meta": ParagraphStyle("ExportMeta", parent=base["Normal"], fontSize=10, alignment=TA_CENTER),
        "heading": ParagraphStyle("ExportHeading", parent=base["Heading2"], fontSize=14),
        "body": ParagraphStyle("ExportBody", parent=base["Normal"], fontSize=11, leading=14),
        "footer": ParagraphStyle("ExportFooter", parent=base["Normal"], fontSize=8, alignment=TA_CENTER),
    }


def response_pdf(response: str, prompt: Optional[str], model: Optional[str]) -> bytes:
    s = _styles()
    story = [
        _paragraph("AI Response Export", s["title"]),
        _paragraph(f"Generated: {_timestamp()}", s["meta"]),
    ]
    if model:
        story.append(_paragraph(f"Model: {model}", s["meta"]))
    story.append(Spacer(1, 24))
    if prompt:
        story += [_paragraph("Original Prompt:", s["heading"]), _paragraph(prompt, s["body"]), Spacer(1, 24)]
    story += [
        _paragraph("AI Response:", s["heading"]),
        _paragraph(response, s["body"]),
        Spacer(1, 24),
        _paragraph(FOOTER, s["footer"]),
    ]
    return _build_pdf(story)


def chat_pdf(chat: Chat) -> bytes:
    s = _styles()
    story = [
        _paragraph(chat.title, s["title"]),
        _paragraph(f"Created: {chat.created_at.strftime('%Y-%m-%d %H:%M:%S')}", s["meta"]),
        _paragraph(f"Exported: {_timestamp()}", s["meta"]),
        Spacer(1, 24),
    ]
    for msg in chat.messages:
        heading = _role_label(msg.role)
        if msg.model:
            heading += f" ({msg.model})"
        story += [_paragraph(heading, s["heading"]), _paragraph(msg.content, s["body"]), Spacer(1, 18)]
    story.append(_paragraph(FOOTER, s["footer"]))
    return _build_pdf(story)
