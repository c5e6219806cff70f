"""Vector store adapters.

    - JsonVectorStore -- whole-collection JSON snapshot on local disk
"""

from ragdesk.providers.vector_store.json_vector_store import JsonVectorStore, cosine_similarity

__all__ = ["JsonVectorStore", "cosine_similarity"]
