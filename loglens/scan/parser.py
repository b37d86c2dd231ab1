"""
Access log line parsing and '#Fields' header handling
"""

import re
from typing import Iterator, Optional

from ..config import COMMENT_PREFIX, FIELDS_DIRECTIVE, TEXT_ENCODING
from ..models import FieldLayout


LINE_BREAK = re.compile(r'\r\n|\r|\n')


def split_lines(text: str) -> Iterator[str]:
    """Split on \\r\\n, \\r or \\n only"""
    return iter(LINE_BREAK.split(text))


class LineParser:
    """
    Extract the client address from whitespace-delimited log lines.

    With headers enabled, the IP column follows the most recent '#Fields:'
    header; lines under a header that does not name the IP field are
    skipped. The layout's fixed column applies before the first header,
    or everywhere when headers are disabled.
    """

    def __init__(self, layout: Optional[FieldLayout] = None,
                 encoding: str = TEXT_ENCODING):
        self.layout = layout or FieldLayout()
        self.encoding = encoding
        self._directive = FIELDS_DIRECTIVE.encode(encoding)

    @property
    def initial_column(self) -> int:
        return self.layout.default_column

    def is_header(self, line: str) -> bool:
        return self.layout.use_headers and line.startswith(FIELDS_DIRECTIVE)

    def header_column(self, line: str) -> Optional[int]:
        """
        Column named by a '#Fields:' header.

        The directive token itself is not a column, so the index counts
        from the first field name. A header without the IP field gives None:
        the lines under it carry no client address.
        """
        names = line.split()[1:]
        try:
            return names.index(self.layout.field)
        except ValueError:
            return None

    def extract(self, line: str, column: Optional[int]) -> Optional[str]:
        """Token at `column`, None if the line is too short or has no IP column"""
        if column is None:
            return None
        tokens = line.split(None, column + 1)
        if len(tokens) <= column:
            return None
        return tokens[column]

    def column_after(self, data: bytes, column: Optional[int]) -> Optional[int]:
        """
        Column in force after reading `data` when `column` was in force before it.

        Looks for the last '#Fields' line in the buffer; used to carry the
        header state across chunk boundaries without decoding the chunk.
        """
        if not self.layout.use_headers:
            return column

        pos = data.rfind(self._directive)
        while pos > 0 and data[pos - 1:pos] not in (b'\n', b'\r'):
            pos = data.rfind(self._directive, 0, pos)
        if pos < 0:
            return column

        end = len(data)
        for terminator in (b'\n', b'\r'):
            found = data.find(terminator, pos)
            if 0 <= found < end:
                end = found
        line = data[pos:end].decode(self.encoding, errors='replace')
        return self.header_column(line)

    @staticmethod
    def is_comment(line: str) -> bool:
        return line.startswith(COMMENT_PREFIX)
