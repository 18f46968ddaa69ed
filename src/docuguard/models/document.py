"""Document data model."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Document:
    """A plain-text document tracked for conflicts."""

    id: str
    title: str
    content: str

    def with_content(self, content: str) -> "Document":
        """Return a copy with the content fully replaced."""
        return Document(id=self.id, title=self.title, content=content)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Document":
        """Create from dictionary."""
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            content=str(data["content"]),
        )
