import html
import logging
import zipfile
from io import BytesIO
from typing import Dict, List, Union

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from docx.oxml.ns import qn
from docx.table import Table
from docx.text.paragraph import Paragraph

from cvparser.core.schemas import ConversionResult, ConverterMessage

logger = logging.getLogger(__name__)


KNOWN_STYLES = {
    "Normal",
    "Title",
    "Subtitle",
    "List Paragraph",
    "No Spacing",
    "Body Text",
}
BULLET = "•"


class DocumentConversionError(ValueError):
    """The uploaded bytes are not a readable DOCX document."""


def _iter_blocks(doc) -> List[Union[Paragraph, Table]]:
    """Paragraphs and tables in document order (doc.paragraphs skips tables)."""
    blocks: List[Union[Paragraph, Table]] = []
    for child in doc.element.body.iterchildren():
        if child.tag == qn("w:p"):
            blocks.append(Paragraph(child, doc))
        elif child.tag == qn("w:tbl"):
            blocks.append(Table(child, doc))
    return blocks


def _heading_level(style_name: str) -> int:
    if style_name == "Title":
        return 1
    if style_name.startswith("Heading "):
        level = style_name[len("Heading "):]
        if level.isdigit():
            return min(int(level), 6)
    return 0


def _list_kind(paragraph: Paragraph, style_name: str) -> str:
    if style_name.startswith("List Number"):
        return "number"
    if style_name.startswith("List Bullet"):
        return "bullet"
    p_pr = paragraph._p.pPr
    if p_pr is not None and p_pr.numPr is not None:
        return "bullet"
    return ""


def _table_rows(table: Table) -> List[List[str]]:
    rows = []
    for row in table.rows:
        cells = []
        for cell in row.cells:
            value = " ".join(cell.text.split())
            # merged cells repeat their text once per grid column
            if value and (not cells or cells[-1] != value):
                cells.append(value)
        if cells:
            rows.append(cells)
    return rows


def convert_docx(docx_bytes: bytes) -> ConversionResult:
    """
    Convert a DOCX document into plain text, simple HTML and converter messages.

    Paragraphs are separated by a blank line; list items are prefixed with a
    bullet or their number; table rows become one line with cells joined by
    " | ". Styles the converter has no mapping for are reported once each as
    warnings, which the parser later filters as harmless.

    Raises:
        DocumentConversionError: if the bytes are not a DOCX package
    """
    try:
        doc = Document(BytesIO(docx_bytes))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as exc:
        raise DocumentConversionError(f"Could not read DOCX document: {exc}") from exc

    text_parts: List[str] = []
    html_parts: List[str] = []
    messages: List[ConverterMessage] = []
    reported: Dict[str, bool] = {}
    open_list = ""
    number = 0

    def close_list() -> None:
        nonlocal open_list
        if open_list:
            html_parts.append(f"</{open_list}>")
            open_list = ""

    for block in _iter_blocks(doc):
        if isinstance(block, Table):
            close_list()
            rows = _table_rows(block)
            if not rows:
                continue
            text_parts.extend(" | ".join(cells) for cells in rows)
            html_parts.append(
                "<table>"
                + "".join(
                    "<tr>" + "".join(f"<td>{html.escape(c)}</td>" for c in cells) + "</tr>"
                    for cells in rows
                )
                + "</table>"
            )
            continue

        content = block.text.strip()
        if not content:
            continue

        style = block.style
        style_name = style.name if style is not None else "Normal"
        level = _heading_level(style_name)
        kind = _list_kind(block, style_name)

        if not level and not kind and style_name not in KNOWN_STYLES and style_name not in reported:
            reported[style_name] = True
            messages.append(
                ConverterMessage(
                    type="warning",
                    message=f"Unrecognised paragraph style: '{style_name}' (Style ID: {style.style_id if style is not None else ''})",
                )
            )

        escaped = html.escape(content)
        if kind:
            tag = "ol" if kind == "number" else "ul"
            if open_list != tag:
                close_list()
                html_parts.append(f"<{tag}>")
                open_list = tag
                number = 0
            number += 1
            text_parts.append(f"{number}. {content}" if kind == "number" else f"{BULLET} {content}")
            html_parts.append(f"<li>{escaped}</li>")
            continue

        close_list()
        text_parts.append(content)
        html_parts.append(f"<h{level}>{escaped}</h{level}>" if level else f"<p>{escaped}</p>")

    close_list()
    logger.debug(f"DOCX: {len(text_parts)} text blocks, {len(messages)} converter messages")
    return ConversionResult(text="\n\n".join(text_parts), html="".join(html_parts), messages=messages)
