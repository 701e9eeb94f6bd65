"""
Markdown-to-Word Converter

Builds .docx documents from the small Markdown subset the toolkit
produces: ATX headings up to level 3, pipe tables, and plain lines.
"""

import json
import re

from docx import Document
from docx.shared import Pt

_SEPARATOR_ROW = re.compile(r"^\|[-:\s|]+\|$")
_BLOCK_SPLIT = re.compile(r"\n\s*\n")


def parse_markdown_table(text: str) -> list[list[str]]:
    """
    Parse a Markdown pipe table into rows of cell strings.

    Separator rows such as ``|---|:--:|`` are dropped. Lines that are not
    wrapped in pipes are ignored.
    """
    rows = []
    for line in text.split("\n"):
        line = line.strip()
        if not line or not (line.startswith("|") and line.endswith("|")):
            continue
        if _SEPARATOR_ROW.match(line):
            continue
        rows.append([cell.strip() for cell in line.split("|")[1:-1]])
    return rows


def _is_table_line(line: str) -> bool:
    return line.startswith("|") and line.endswith("|")


class MarkdownToWordConverter:
    """Writes Markdown or plain text into Word documents."""

    SUPPORTED_EXTENSIONS = {".md", ".markdown", ".txt"}

    # level: (prefix, point size)
    HEADINGS = {
        3: ("### ", 12),
        2: ("## ", 14),
        1: ("# ", 16),
    }
    HEADING_SPACE_AFTER = Pt(10)
    TABLE_STYLE = "Table Grid"

    TEXT_FONT = "Calibri"
    TEXT_SIZE = Pt(11)
    TEXT_SPACE_AFTER = Pt(6)
    TEXT_TITLE = "Extracted Data"

    def convert(self, markdown: str, output_path: str) -> str:
        """
        Convert Markdown text into a Word document.

        Args:
            markdown: Markdown source.
            output_path: Destination .docx path.

        Returns:
            The output path.
        """
        doc = Document()
        lines = markdown.split("\n")
        table_lines: list[str] = []

        for i, line in enumerate(lines):
            if _is_table_line(line):
                table_lines.append(line)
                last = i == len(lines) - 1
                if last or not _is_table_line(lines[i + 1]):
                    self._add_table(doc, parse_markdown_table("\n".join(table_lines)))
                    table_lines = []
                continue

            heading = self._heading(line)
            if heading:
                text, size = heading
                para = doc.add_paragraph()
                run = para.add_run(text)
                run.bold = True
                run.font.size = Pt(size)
                para.paragraph_format.space_after = self.HEADING_SPACE_AFTER
            elif line.strip() == "":
                doc.add_paragraph()
            else:
                doc.add_paragraph(line)

        doc.save(output_path)
        return output_path

    def convert_tables(self, markdown: str, output_path: str) -> str:
        """
        Convert blank-line separated Markdown tables into Word tables.

        Blocks that hold no table rows are ignored.
        """
        doc = Document()
        for block in _BLOCK_SPLIT.split(markdown):
            if not block.strip():
                continue
            self._add_table(doc, parse_markdown_table(block))
        doc.save(output_path)
        return output_path

    def convert_text(self, data, output_path: str) -> str:
        """
        Write text as one paragraph per line.

        Non-string data is serialized as indented JSON first.
        """
        if isinstance(data, str):
            content = data
        elif data is not None:
            content = json.dumps(data, indent=2, ensure_ascii=False)
        else:
            content = str(data)

        doc = Document()
        doc.core_properties.title = self.TEXT_TITLE
        normal = doc.styles["Normal"]
        normal.font.name = self.TEXT_FONT
        normal.font.size = self.TEXT_SIZE
        normal.paragraph_format.space_after = self.TEXT_SPACE_AFTER

        for line in content.split("\n"):
            doc.add_paragraph(line)

        doc.save(output_path)
        return output_path

    def _heading(self, line: str):
        for prefix, size in self.HEADINGS.values():
            if line.startswith(prefix):
                return line[len(prefix):], size
        return None

    def _add_table(self, doc, rows: list[list[str]]) -> None:
        if not rows:
            return
        columns = max(len(r) for r in rows)
        table = doc.add_table(rows=len(rows), cols=columns)
        table.style = self.TABLE_STYLE
        for r, cells in enumerate(rows):
            for c, text in enumerate(cells):
                table.cell(r, c).text = text
        doc.add_paragraph()
