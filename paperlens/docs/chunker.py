"""Paper chunker - sentence-preserving text splitting."""

import re

# A sentence is a run of non-terminators closed by one or more terminators.
# The trailing alternative keeps text after the last terminator.
_SENTENCE_PATTERN = re.compile(r"[^.!?]*[.!?]+|[^.!?]+\Z")


def split_sentences(text: str) -> list[str]:
    """Split text into sentences, keeping terminators and all whitespace.

    Every character of ``text`` belongs to exactly one returned sentence, so
    ``"".join(split_sentences(text)) == text``.
    """
    sentences = _SENTENCE_PATTERN.findall(text)
    return sentences or [text]


def chunk_text(text: str, max_chunk_size: int = 500) -> list[str]:
    """Chunk text into ordered passages without breaking sentences.

    Pure function with no I/O or randomness. Sentences are packed greedily;
    the buffer is flushed when the next sentence would push it past
    ``max_chunk_size``. A sentence longer than ``max_chunk_size`` becomes its
    own oversized chunk.

    Args:
        text: Raw paper text
        max_chunk_size: Soft upper bound on chunk length in characters.
            Values <= 0 yield one chunk per sentence.

    Returns:
        Ordered list of stripped, non-empty chunks. Empty input gives [].
    """
    if not text or not text.strip():
        return []

    chunks: list[str] = []
    buffer = ""

    def flush() -> None:
        stripped = buffer.strip()
        if stripped:
            chunks.append(stripped)

    for sentence in split_sentences(text):
        if buffer and len(buffer) + len(sentence) > max_chunk_size:
            flush()
            buffer = sentence
        else:
            buffer += sentence

    flush()

    return chunks
