import os
import shutil
import logging
from langchain_text_splitters import Language, RecursiveCharacterTextSplitter
from langchain_community.vectorstores import FAISS
from repo_brain.evidence import Evidence, EvidenceSource
from repo_brain.tools.symbol_tool import detect_language

log = logging.getLogger(__name__)

FAISS_DIR = "faiss_index"

_SPLITTER_LANGUAGE = {
    "python": Language.PYTHON,
    "typescript": Language.TS,
    "javascript": Language.JS,
}


def _chunk_id(file_path: str, n: int) -> str:
    return f"{file_path}::{n}"


class SemanticSearch:
    """
    FAISS-backed similarity search over code chunks.

    `get_embeddings` is a zero-arg factory, called at most once and only when
    an index is actually built or loaded.
    """
    name = "semantic"
    description = "Search indexed code chunks via FAISS"
    capabilities = ["semantic_search"]

    def __init__(self, index_path: str, get_embeddings, chunk_size: int = 1000, chunk_overlap: int = 100):
        self.index_path = index_path
        self.db_path = os.path.join(index_path, FAISS_DIR)
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._get_embeddings = get_embeddings
        self._embeddings = None
        self._db = None
        self._loaded = False

    @property
    def embeddings(self):
        if self._embeddings is None:
            self._embeddings = self._get_embeddings()
        return self._embeddings

    def _splitter(self, file_path: str):
        language = _SPLITTER_LANGUAGE.get(detect_language(file_path))
        if language is None:
            return RecursiveCharacterTextSplitter(
                chunk_size=self.chunk_size, chunk_overlap=self.chunk_overlap, add_start_index=True
            )
        return RecursiveCharacterTextSplitter.from_language(
            language=language,
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
            add_start_index=True,
        )

    def _ensure_loaded(self):
        if self._db is None and not self._loaded:
            self.load()

    def _ids_for(self, file_path: str) -> list:
        if self._db is None:
            return []
        prefix = f"{file_path}::"
        return [doc_id for doc_id in self._db.index_to_docstore_id.values() if doc_id.startswith(prefix)]

    def index_code(self, file_path: str, content: str) -> bool:
        """Chunks and embeds a file. Re-indexing a path replaces its old chunks."""
        self._ensure_loaded()

        stale = self._ids_for(file_path)
        if stale:
            self._db.delete(stale)

        docs = self._splitter(file_path).create_documents([content], metadatas=[{"source": file_path}])
        docs = [d for d in docs if d.page_content.strip()]
        if not docs:
            return True

        texts, metadatas, ids = [], [], []
        for n, doc in enumerate(docs):
            start = doc.metadata.get("start_index", 0)
            if start < 0:
                start = 0
            texts.append(doc.page_content)
            metadatas.append({"source": file_path, "line": content.count("\n", 0, start) + 1})
            ids.append(_chunk_id(file_path, n))

        if self._db is None:
            self._db = FAISS.from_texts(texts, self.embeddings, metadatas=metadatas, ids=ids)
        else:
            self._db.add_texts(texts, metadatas=metadatas, ids=ids)

        log.debug(f"[Semantic] Indexed {len(ids)} chunks from {file_path}")
        return True

    def chunk_count(self) -> int:
        if self._db is None:
            return 0
        return len(self._db.index_to_docstore_id)

    def search(self, query: str, top_k: int = 5) -> list:
        self._ensure_loaded()
        if self._db is None or top_k <= 0:
            return []

        evidence = []
        for doc, score in self._db.similarity_search_with_score(query, k=top_k):
            relevance = 1.0 / (1.0 + max(float(score), 0.0))
            path = doc.metadata.get("source", "unknown")
            line = doc.metadata.get("line", 1)
            evidence.append(Evidence(
                source=EvidenceSource.SEMANTIC,
                content=f"{path}:{line}\n{doc.page_content}",
                relevance=round(relevance, 2),
                metadata={"file_path": path, "line": line},
            ))

        log.info(f"[Semantic] FAISS returned {len(evidence)} chunks for: '{query[:50]}'")
        return evidence

    def save(self) -> bool:
        if self._db is None:
            return False
        os.makedirs(self.index_path, exist_ok=True)
        self._db.save_local(self.db_path)
        return True

    def load(self) -> bool:
        self._loaded = True
        if not os.path.isdir(self.db_path):
            return False
        self._db = FAISS.load_local(self.db_path, self.embeddings, allow_dangerous_deserialization=True)
        log.debug(f"[Semantic] Loaded FAISS index from {self.db_path}")
        return True

    def clear_index(self) -> None:
        self._db = None
        self._loaded = True
        if os.path.isdir(self.db_path):
            shutil.rmtree(self.db_path)
