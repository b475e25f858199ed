import csv
import io
from typing import BinaryIO, Iterator

from loguru import logger

from ..core.errors import FileReadError
from ..models.invoice import Row


class RowReader:
    """
    Lazily turns a CSV byte stream into field maps.

    The first line is the header. Cells missing from short rows read as ""
    and header names are stripped of surrounding whitespace and any BOM.
    """

    def __init__(self, encoding: str = "utf-8-sig", delimiter: str = ","):
        self.encoding = encoding
        self.delimiter = delimiter

    def read(self, stream: BinaryIO, file_name: str = "<stream>") -> Iterator[Row]:
        text = io.TextIOWrapper(stream, encoding=self.encoding, newline="")
        try:
            reader = csv.DictReader(text, delimiter=self.delimiter, restval="")
            if reader.fieldnames is None:
                logger.warning("Source file has no header row", file=file_name)
                return
            reader.fieldnames = [name.strip() for name in reader.fieldnames]

            for record in reader:
                # Extra cells beyond the header land under the None key
                record.pop(None, None)
                yield {key: (value or "").strip() for key, value in record.items()}
        except (csv.Error, UnicodeDecodeError) as e:
            raise FileReadError(file_name, str(e)) from e
        finally:
            text.detach()
