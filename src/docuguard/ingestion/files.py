"""Plain-text file ingestion."""

import logging
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from docuguard.core.constants import TEXT_MIME_TYPE
from docuguard.core.ids import IdFactory, new_id
from docuguard.models.document import Document


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestedFile:
    """A file accepted for analysis."""

    name: str
    text_content: str


@dataclass
class RejectedFile:
    """A file that was not ingested and why."""

    path: Path
    reason: str


@dataclass
class IngestionResult:
    """Outcome of reading a set of files."""

    files: list[IngestedFile] = field(default_factory=list)
    rejected: list[RejectedFile] = field(default_factory=list)

    @property
    def has_rejections(self) -> bool:
        """Check whether any file was ignored."""
        return bool(self.rejected)


def is_text_file(path: Path) -> bool:
    """Check whether a path's guessed MIME type is text/plain."""
    mime_type, _ = mimetypes.guess_type(path.name)
    return mime_type == TEXT_MIME_TYPE


def read_text_files(paths: Iterable[Path]) -> IngestionResult:
    """Read text/plain files, setting everything else aside.

    Files are kept in the order given. Missing files, non-text MIME types and
    content that is not valid UTF-8 end up in ``rejected``.
    """
    result = IngestionResult()

    for path in paths:
        path = Path(path)
        if not path.is_file():
            result.rejected.append(RejectedFile(path, "not a file"))
            continue
        if not is_text_file(path):
            result.rejected.append(RejectedFile(path, "not a text/plain file"))
            continue
        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            result.rejected.append(RejectedFile(path, "not valid UTF-8"))
            continue
        except OSError as e:
            result.rejected.append(RejectedFile(path, f"unreadable: {e}"))
            continue
        result.files.append(IngestedFile(name=path.name, text_content=content))

    if result.rejected:
        logger.warning(
            f"Ignored {len(result.rejected)} files: "
            + ", ".join(r.path.name for r in result.rejected)
        )
    return result


def to_documents(files: Iterable[IngestedFile], id_factory: IdFactory = new_id) -> list[Document]:
    """Create documents titled by file name with fresh ids."""
    return [
        Document(id=id_factory(), title=f.name, content=f.text_content)
        for f in files
    ]
