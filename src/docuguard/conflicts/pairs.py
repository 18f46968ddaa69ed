"""Document pair generation for pairwise analysis."""

from typing import Sequence

from docuguard.models.document import Document


DocumentPair = tuple[Document, Document]


def generate_pairs(
    new_documents: Sequence[Document],
    existing_documents: Sequence[Document],
) -> list[DocumentPair]:
    """Build the pairs a batch run must analyze.

    Every new document is paired with every existing one first (new documents
    in ingestion order, existing ones in store order), followed by the pairs
    within the new batch in lexicographic index order. Existing documents are
    never paired with each other.

    Args:
        new_documents: The batch being ingested.
        existing_documents: Documents already in the store before the batch.

    Returns:
        Exactly ``N*M + N*(N-1)/2`` pairs with no repeats and no self pairs.
    """
    pairs: list[DocumentPair] = [
        (new_doc, existing_doc)
        for new_doc in new_documents
        for existing_doc in existing_documents
    ]

    for i, first in enumerate(new_documents):
        for second in new_documents[i + 1:]:
            pairs.append((first, second))

    return pairs


def count_pairs(new_count: int, existing_count: int) -> int:
    """Count the pairs ``generate_pairs`` yields for batch sizes N and M."""
    if new_count < 0 or existing_count < 0:
        raise ValueError("Document counts must be non-negative")
    return new_count * existing_count + new_count * (new_count - 1) // 2
