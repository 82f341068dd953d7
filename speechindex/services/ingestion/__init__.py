"""Speech ingestion pipeline.

Orchestrates: **segment -> batch -> sync -> record**.

1. **Segment** (segmenter.py / TextSegmenter) -- token-bounded segments,
   paragraph → sentence → word fallback.
2. **Batch** (batcher.py / batch_segments) -- fixed-size upsert windows.
3. **Sync** (synchronizer.py / IngestionSynchronizer) -- upsert plus bounded
   consistency wait on the namespace vector count.
4. **Record** (cross_reference.py / CrossReferenceRecorder) -- one
   document → vector-id entry per speech.

IngestionService wires the four stages together; SpeechDirectoryLoader
fills the document store from disk beforehand.
"""

from speechindex.services.ingestion.batcher import batch_segments
from speechindex.services.ingestion.cross_reference import (
    CrossReferenceRecorder,
    select_vector_ids,
)
from speechindex.services.ingestion.document_loader import SpeechDirectoryLoader
from speechindex.services.ingestion.ingestion_service import IngestionService
from speechindex.services.ingestion.segmenter import TextSegmenter
from speechindex.services.ingestion.synchronizer import IngestionSynchronizer

__all__ = [
    "CrossReferenceRecorder",
    "IngestionService",
    "IngestionSynchronizer",
    "SpeechDirectoryLoader",
    "TextSegmenter",
    "batch_segments",
    "select_vector_ids",
]
