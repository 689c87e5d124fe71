"""
record_source.py - Query interface over a parsed GEDCOM record graph.

The cache pipeline never reads GEDCOM text itself. It walks records through the
small RecordSource protocol defined here:
    - MemoryRecordSource: record nodes held in memory (used by tests and callers
      that already have a tree)
    - Ged4pyRecordSource: adapter that reads a GEDCOM file with ged4py and converts
      each ged4py Record into a RecordNode

Module: gedcom_cache.record_source
Author: @colin0brass
Last updated: 2026-10-19
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Protocol, Union

from ged4py.parser import GedcomReader
from ged4py.model import NameRec, Pointer, Record

logger = logging.getLogger(__name__)

RECORD_KINDS = ('INDI', 'FAM', 'SOUR', 'REPO', 'OBJE', 'NOTE')


class RecordSourceError(RuntimeError):
    """Raised when the root record graph cannot be obtained."""


class RecordNode:
    """
    A single GEDCOM record or sub-record.

    Attributes:
        tag (str): GEDCOM tag (e.g. 'INDI', 'BIRT', 'PLAC').
        value (Any): Record value; pointers are kept as '@X@' strings, dates may be ged4py DateValue.
        xref_id (Optional[str]): Cross-reference id of level-0 records.
        sub_records (List[RecordNode]): Child records in file order.
    """
    __slots__ = ['tag', 'value', 'xref_id', 'sub_records']

    def __init__(self, tag: str, value: Any = None, sub_records: Optional[List["RecordNode"]] = None, xref_id: Optional[str] = None):
        self.tag: str = tag
        self.value: Any = value
        self.xref_id: Optional[str] = xref_id
        self.sub_records: List[RecordNode] = list(sub_records) if sub_records else []

    def __repr__(self) -> str:
        xref = f"{self.xref_id} " if self.xref_id else ""
        return f"RecordNode({xref}{self.tag} {self.value!r}, {len(self.sub_records)} sub-records)"

    def sub_tag(self, path: str) -> Optional["RecordNode"]:
        """
        Return the first descendant matching a slash-separated tag path.

        Args:
            path (str): Tag path such as 'PLAC' or 'PLAC/MAP/LATI'.

        Returns:
            Optional[RecordNode]: Matching node or None.
        """
        node = self
        for tag in path.split('/'):
            node = next((sub for sub in node.sub_records if sub.tag == tag), None)
            if node is None:
                return None
        return node

    def sub_tags(self, *tags: str) -> List["RecordNode"]:
        """Return all direct children whose tag is one of tags."""
        return [sub for sub in self.sub_records if sub.tag in tags]

    def sub_tag_value(self, path: str) -> Any:
        """Return the value of the first descendant matching path, or None."""
        node = self.sub_tag(path)
        return node.value if node is not None else None


class RecordSource(Protocol):
    """
    Protocol for a root query handle over a GEDCOM record graph.

    Methods:
        records(kind): Yield level-0 records of the given kind ('INDI', 'FAM', ...).
        lookup(xref_id): Return the level-0 record with this xref id, or None.
        header(): Return the HEAD record, or None.
    """
    def records(self, kind: str) -> Iterable[RecordNode]:
        ...

    def lookup(self, xref_id: str) -> Optional[RecordNode]:
        ...

    def header(self) -> Optional[RecordNode]:
        ...


class MemoryRecordSource:
    """
    RecordSource over RecordNode objects already held in memory.

    Attributes:
        _by_kind (Dict[str, List[RecordNode]]): Level-0 records by tag.
        _by_xref (Dict[str, RecordNode]): Level-0 records by xref id.
        _header (Optional[RecordNode]): HEAD record if supplied.
    """
    __slots__ = ['_by_kind', '_by_xref', '_header']

    def __init__(self, nodes: Iterable[RecordNode] = ()):
        self._by_kind: Dict[str, List[RecordNode]] = {}
        self._by_xref: Dict[str, RecordNode] = {}
        self._header: Optional[RecordNode] = None
        for node in nodes:
            self.add(node)

    def add(self, node: RecordNode) -> None:
        """Register a level-0 record."""
        if node.tag == 'HEAD':
            self._header = node
            return
        self._by_kind.setdefault(node.tag, []).append(node)
        if node.xref_id:
            self._by_xref[node.xref_id] = node

    def records(self, kind: str) -> Iterator[RecordNode]:
        return iter(self._by_kind.get(kind, []))

    def lookup(self, xref_id: str) -> Optional[RecordNode]:
        if not xref_id:
            return None
        return self._by_xref.get(xref_id)

    def header(self) -> Optional[RecordNode]:
        return self._header

    def __len__(self) -> int:
        return sum(len(nodes) for nodes in self._by_kind.values())


class Ged4pyRecordSource(MemoryRecordSource):
    """
    RecordSource that loads a GEDCOM file through ged4py.

    The whole file is read once; ged4py records are converted to RecordNode trees so the
    rest of the pipeline does not depend on ged4py model types.

    Attributes:
        gedcom_file (Path): Path to GEDCOM file.
        encoding (Optional[str]): Forced file encoding, or None to let ged4py detect it.
    """
    __slots__ = ['gedcom_file', 'encoding']

    def __init__(self, gedcom_file: Union[Path, str], encoding: Optional[str] = None):
        super().__init__()
        self.gedcom_file = Path(gedcom_file)
        self.encoding = encoding
        self._load()

    def _load(self) -> None:
        """Read all level-0 records from the GEDCOM file."""
        if not self.gedcom_file.exists():
            raise RecordSourceError(f"GEDCOM file not found: {self.gedcom_file}")
        try:
            with GedcomReader(str(self.gedcom_file), encoding=self.encoding, errors='replace') as reader:
                count = 0
                for record in reader.records0():
                    if record.tag == 'TRLR':
                        continue
                    self.add(self._convert(record))
                    count += 1
        except Exception as e:
            raise RecordSourceError(f"Failed to parse GEDCOM file '{self.gedcom_file}': {e}") from e
        logger.info(f"Loaded {count} level-0 records from {self.gedcom_file}")

    def _convert(self, record: Record) -> RecordNode:
        """
        Convert a ged4py Record (recursively) into a RecordNode.

        Args:
            record (Record): ged4py record.

        Returns:
            RecordNode: Converted node.
        """
        value = record.value
        if isinstance(value, Pointer):
            value = value.value
        elif isinstance(record, NameRec) and isinstance(value, tuple):
            value = self._format_name(value)
        elif isinstance(value, bytes):
            value = value.decode('utf-8', errors='replace')
        sub_records = [self._convert(sub) for sub in record.sub_records]
        return RecordNode(record.tag, value, sub_records, xref_id=record.xref_id)

    @staticmethod
    def _format_name(parts: tuple) -> str:
        """Rebuild a 'Given /Surname/ Suffix' string from a ged4py name tuple."""
        given, surname, suffix = (tuple(parts) + ('', '', ''))[:3]
        text = f"{given or ''} /{surname or ''}/ {suffix or ''}"
        return " ".join(text.split())
