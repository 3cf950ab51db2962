"""
USF CourseChat - Conversational Course Search over a Semantic Index
===================================================================

Answers natural-language questions about a semester's course offerings by
combining an embedding-backed index of course records with a tool-calling
dialogue loop:

- ingestion: read the course CSV and validate rows
- indexing: embed labeled course lines and bulk-load them into ChromaDB
- rag: retrieve the nearest course lines and let the model call
  ``search_courses`` while answering
- evaluation: LLM-as-judge scoring of answers against expected ones

RAG flow:
    Question → Model → search_courses → Retriever → Record Store → Model → Answer
"""

__version__ = "0.1.0"
__author__ = "USF CourseChat Team"
__license__ = "MIT"

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Main modules (imported on demand)
    "shared",
    "ingestion",
    "indexing",
    "rag",
    "evaluation",
    "cli",
]
